# aiohttp_vendor.py -- aiohttp request function for lfsclient
# Copyright (C) 2026 The lfsclient authors
#
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later
# lfsclient is dual-licensed under the Apache License, Version 2.0 and the GNU
# General Public License as published by the Free Software Foundation; version 2.0
# or (at your option) any later version. You can redistribute it and/or
# modify it under the terms of either of these two licenses.
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# You should have received a copy of the licenses; if not, see
# <http://www.gnu.org/licenses/> for a copy of the GNU General Public License
# and <http://www.apache.org/licenses/LICENSE-2.0> for a copy of the Apache
# License, Version 2.0.
#

"""aiohttp support for lfsclient.

Unlike the default urllib3 transport, requests made through
:class:`AiohttpTransport` run on the event loop itself::

    async with AiohttpTransport() as transport:
        client = TransferClient(remote, request=transport)
        data = await client.download(pointer)

Requires the ``aiohttp`` extra.
"""

__all__ = ["AiohttpTransport"]

from types import TracebackType

import aiohttp

from ..http import HTTPRequest, HTTPResponse, default_user_agent_string, merge_headers
from ..log_utils import getLogger

logger = getLogger(__name__)


class AiohttpTransport:
    """Request function backed by an aiohttp client session."""

    def __init__(
        self,
        session: aiohttp.ClientSession | None = None,
        user_agent: str | None = None,
    ) -> None:
        """Initialize AiohttpTransport.

        Args:
          session: Session to send requests with; one is created (and later
            closed by :meth:`close`) if not given
          user_agent: User-Agent used when a request does not set one
        """
        self._session = session
        self._owns_session = session is None
        self.user_agent = user_agent or default_user_agent_string()

    @property
    def session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession()
        return self._session

    async def close(self) -> None:
        """Close the session, if it was created by this transport."""
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "AiohttpTransport":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def __call__(self, request: HTTPRequest) -> HTTPResponse:
        headers = merge_headers({"User-Agent": self.user_agent}, request.headers)
        logger.debug("%s %s", request.method, request.url)
        async with self.session.request(
            request.method, request.url, headers=headers, data=request.body
        ) as response:
            body = await response.read()
            return HTTPResponse(
                status=response.status, headers=dict(response.headers), body=body
            )
