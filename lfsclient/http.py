# http.py -- HTTP plumbing for LFS transfers
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

"""HTTP plumbing for LFS transfers.

Transfers do not talk to the network themselves; they build an
:class:`HTTPRequest` and hand it to a *request function*, an async callable
returning an :class:`HTTPResponse`. :class:`Urllib3Transport` is the default
request function. Request functions return error statuses rather than
raising, so callers can decide what a given status means.
"""

__all__ = [
    "LFS_MEDIA_TYPE",
    "BasicAuth",
    "HTTPRequest",
    "HTTPResponse",
    "Remote",
    "RequestFunc",
    "Urllib3Transport",
    "default_urllib3_manager",
    "default_user_agent_string",
    "get_auth_header",
    "merge_headers",
]

import asyncio
import base64
import os
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional, Union
from urllib.parse import urlparse

import lfsclient

from .log_utils import getLogger

if TYPE_CHECKING:
    import urllib3

    from .config import Config

logger = getLogger(__name__)

LFS_MEDIA_TYPE = "application/vnd.git-lfs+json"


@dataclass
class HTTPRequest:
    """A request to be sent by a request function."""

    url: str
    method: str = "GET"
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes | None = None


@dataclass
class HTTPResponse:
    """A fully read response."""

    status: int
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""


RequestFunc = Callable[[HTTPRequest], Awaitable[HTTPResponse]]


@dataclass(frozen=True)
class BasicAuth:
    """Credentials for HTTP basic authentication."""

    username: str
    password: str

    def __repr__(self) -> str:
        return f"{type(self).__name__}(username={self.username!r}, password='***')"


def get_auth_header(auth: BasicAuth | None) -> dict[str, str]:
    """Return the Authorization header for the given credentials, if any."""
    if auth is None:
        return {}
    token = base64.b64encode(f"{auth.username}:{auth.password}".encode()).decode(
        "ascii"
    )
    return {"Authorization": f"Basic {token}"}


def merge_headers(*header_maps: Mapping[str, str] | None) -> dict[str, str]:
    """Combine header mappings; later mappings win.

    Header names are compared case-insensitively, and the spelling from the
    winning mapping is kept.
    """
    merged: dict[str, tuple[str, str]] = {}
    for headers in header_maps:
        if not headers:
            continue
        for name, value in headers.items():
            merged[name.lower()] = (name, value)
    return dict(merged.values())


def default_user_agent_string() -> str:
    """Return the default user agent string for LFS requests."""
    # Some LFS servers reject requests without a User-Agent, and GitHub
    # expects it to name git-lfs.
    version = ".".join(str(x) for x in lfsclient.__version__)
    return f"git-lfs/lfsclient/{version}"


@dataclass
class Remote:
    """Where and how to reach an LFS server."""

    url: str
    """Repository URL; the batch endpoint lives below it."""

    headers: dict[str, str] = field(default_factory=dict)
    """Headers sent with every request."""

    auth: BasicAuth | None = None
    user_agent: str = field(default_factory=default_user_agent_string)

    config: Optional["Config"] = field(default=None, repr=False, compare=False)
    """Git configuration the remote came from; its ``http.*`` settings are
    used to set up the default transport."""

    @property
    def batch_url(self) -> str:
        """URL of the batch API endpoint."""
        return f"{self.url.rstrip('/')}/info/lfs/objects/batch"

    def request_headers(self, *extra: Mapping[str, str] | None) -> dict[str, str]:
        """Headers for a request to this remote, then any extra ones."""
        return merge_headers(self.headers, get_auth_header(self.auth), *extra)


def check_for_proxy_bypass(base_url: str | None) -> bool:
    """Check whether no_proxy excludes the host of base_url."""
    if not base_url:
        return False
    no_proxy = os.environ.get("no_proxy") or os.environ.get("NO_PROXY")
    if not no_proxy:
        return False
    hostname = urlparse(base_url).hostname
    if not hostname:
        return False
    for entry in no_proxy.split(","):
        entry = entry.strip().lstrip(".")
        if not entry:
            continue
        if entry == "*" or hostname == entry or hostname.endswith("." + entry):
            return True
    return False


def default_urllib3_manager(
    config: Optional["Config"],
    base_url: str | None = None,
    timeout: float | None = None,
) -> Union["urllib3.ProxyManager", "urllib3.PoolManager"]:
    """Return a urllib3 connection pool manager.

    Honours the proxy environment variables and the ``http.*`` settings in
    config.

    Args:
      config: Git configuration, if any
      base_url: URL the manager will mostly be used for, for no_proxy checks
      timeout: Timeout for HTTP requests in seconds
    """
    import urllib3

    proxy_server: str | None = None
    for proxyname in ("https_proxy", "http_proxy", "all_proxy"):
        proxy_server = os.environ.get(proxyname)
        if proxy_server:
            break

    user_agent = None
    ca_certs = None
    ssl_verify = True
    if config is not None:
        try:
            proxy_server = config.get(b"http", b"proxy").decode("utf-8")
        except KeyError:
            pass
        try:
            user_agent = config.get(b"http", b"useragent").decode("utf-8")
        except KeyError:
            pass
        ssl_verify = bool(config.get_boolean(b"http", b"sslVerify", True))
        try:
            ca_certs = config.get(b"http", b"sslCAInfo").decode("utf-8")
        except KeyError:
            pass
        if timeout is None:
            try:
                timeout = float(config.get(b"http", b"timeout"))
            except KeyError:
                pass

    if proxy_server and check_for_proxy_bypass(base_url):
        proxy_server = None

    headers = {"User-Agent": user_agent or default_user_agent_string()}
    kwargs: dict[str, str | float | None] = {
        "ca_certs": ca_certs,
        "cert_reqs": "CERT_REQUIRED" if ssl_verify else "CERT_NONE",
    }
    if timeout is not None:
        kwargs["timeout"] = timeout

    if proxy_server:
        parsed = urlparse(proxy_server)
        proxy_headers = {}
        if parsed.username is not None:
            proxy_headers = urllib3.make_headers(
                proxy_basic_auth=f"{parsed.username}:{parsed.password or ''}"
            )
        return urllib3.ProxyManager(
            proxy_server, proxy_headers=proxy_headers, headers=headers, **kwargs
        )
    return urllib3.PoolManager(headers=headers, **kwargs)


class Urllib3Transport:
    """Request function backed by a urllib3 pool manager.

    urllib3 blocks, so each request runs in a worker thread.
    """

    def __init__(
        self,
        pool_manager: Optional["urllib3.PoolManager"] = None,
        config: Optional["Config"] = None,
        base_url: str | None = None,
    ) -> None:
        self._pool_manager = pool_manager
        self._config = config
        self._base_url = base_url

    @property
    def pool_manager(self) -> "urllib3.PoolManager":
        if self._pool_manager is None:
            self._pool_manager = default_urllib3_manager(
                self._config, base_url=self._base_url
            )
        return self._pool_manager

    def _send(self, request: HTTPRequest) -> HTTPResponse:
        pool_manager = self.pool_manager
        # Per-request headers replace the pool's defaults in urllib3.
        headers = merge_headers(pool_manager.headers, request.headers)
        logger.debug("%s %s", request.method, request.url)
        response = pool_manager.request(
            request.method, request.url, headers=headers, body=request.body
        )
        return HTTPResponse(
            status=response.status, headers=dict(response.headers), body=response.data
        )

    async def __call__(self, request: HTTPRequest) -> HTTPResponse:
        return await asyncio.to_thread(self._send, request)
