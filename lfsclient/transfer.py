# transfer.py -- Downloading and uploading LFS objects
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

"""Downloading and uploading LFS objects with the basic transfer adapter.

A download consults the local cache, negotiates with the batch API, fetches
the object and stores it in the cache. An upload hashes the content,
negotiates, PUTs the object and, when the server asks for it, verifies the
upload. Steps for a single object always run one after the other.

Downloaded content is checked against neither its oid nor, strictly, its
size: a size mismatch is only logged.
"""

__all__ = [
    "CACHE_WRITE_FAILURE_IGNORE",
    "CACHE_WRITE_FAILURE_RAISE",
    "ProgressEvent",
    "TransferClient",
]

import json
from collections.abc import Callable
from dataclasses import dataclass

from .batch import DOWNLOAD, UPLOAD, VERIFY, LFSBatchObject, LFSBatchResponse, negotiate
from .cache import ObjectCache, WritePolicy
from .errors import CacheIOError, ProtocolError, TransferFailed
from .fs import FileSystem
from .http import LFS_MEDIA_TYPE, HTTPRequest, Remote, RequestFunc, Urllib3Transport
from .log_utils import getLogger
from .pointer import LFSPointer, LFSPointerInfo, build_info

logger = getLogger(__name__)

CACHE_WRITE_FAILURE_IGNORE = "ignore"
CACHE_WRITE_FAILURE_RAISE = "raise"


@dataclass(frozen=True)
class ProgressEvent:
    """Something happened to an object.

    ``phase`` is one of "scanning", "downloading", "cached", "uploading" or
    "verifying".
    """

    phase: str
    oid: str


ProgressCallback = Callable[[ProgressEvent], None]


def _first_object(response: LFSBatchResponse, oid: str) -> LFSBatchObject:
    obj = response.objects[0]
    if obj.error is not None:
        raise ProtocolError(
            f"LFS server error for {oid}: {obj.error.code} {obj.error.message}",
            kind=ProtocolError.OBJECT_ERROR,
        )
    return obj


class TransferClient:
    """Transfers LFS objects between a server and a repository's cache."""

    def __init__(
        self,
        remote: Remote,
        request: RequestFunc | None = None,
        fs: FileSystem | None = None,
        progress: ProgressCallback | None = None,
        cache_write_failure: str = CACHE_WRITE_FAILURE_IGNORE,
    ) -> None:
        """Initialize TransferClient.

        Args:
          remote: LFS server to talk to
          request: Request function; defaults to a Urllib3Transport
          fs: Filesystem holding the object cache; defaults to the local disk
          progress: Optional callback receiving a ProgressEvent per step
          cache_write_failure: What to do when storing a freshly downloaded
            object in the cache fails: CACHE_WRITE_FAILURE_IGNORE (log and
            return the content anyway) or CACHE_WRITE_FAILURE_RAISE
        """
        if cache_write_failure not in (
            CACHE_WRITE_FAILURE_IGNORE,
            CACHE_WRITE_FAILURE_RAISE,
        ):
            raise ValueError(f"invalid cache_write_failure {cache_write_failure!r}")
        self.remote = remote
        self.request = (
            request
            if request is not None
            else Urllib3Transport(config=remote.config, base_url=remote.url)
        )
        self.cache = ObjectCache(fs)
        self.progress = progress
        self.cache_write_failure = cache_write_failure

    def report(self, phase: str, oid: str) -> None:
        """Send a progress event, if anyone is listening."""
        if self.progress is not None:
            self.progress(ProgressEvent(phase, oid))

    async def download(
        self,
        pointer: LFSPointer,
        policy: WritePolicy = WritePolicy.WRITABLE,
    ) -> bytes:
        """Return the content of the object a pointer refers to.

        The cache is used if it holds an entry of the right size; otherwise
        the object is fetched from the server and stored in the cache.

        Args:
          pointer: Pointer to resolve
          policy: Cache write policy for the fetched object
        Returns: object content
        Raises:
          CacheIOError: if the cache entry exists but cannot be read
          ProtocolError: if batch negotiation fails
          TransferFailed: if the object cannot be fetched
        """
        info = pointer.info

        cached = await self.cache.try_read(pointer.object_path, info.size)
        if cached is not None:
            logger.debug("Using cached LFS object %s", info.oid)
            self.report("cached", info.oid)
            return cached

        response = await negotiate(self.request, self.remote, DOWNLOAD, [info])
        obj = _first_object(response, info.oid)
        assert obj.actions is not None
        action = obj.actions[DOWNLOAD]

        self.report("downloading", info.oid)
        logger.info("Downloading LFS object %s (%d bytes)", info.oid, info.size)
        fetched = await self.request(
            HTTPRequest(
                url=action.href,
                method="GET",
                headers=self.remote.request_headers(action.header),
            )
        )
        if not 200 <= fetched.status < 300:
            raise TransferFailed(DOWNLOAD, fetched.status)
        content = fetched.body
        if len(content) != info.size:
            logger.warning(
                "LFS object %s: expected %d bytes, got %d",
                info.oid,
                info.size,
                len(content),
            )

        try:
            await self.cache.try_write(pointer.object_path, content, policy)
        except CacheIOError as e:
            if self.cache_write_failure == CACHE_WRITE_FAILURE_RAISE:
                raise
            logger.warning("Unable to cache LFS object %s: %s", info.oid, e)
        return content

    async def upload(self, content: bytes) -> LFSPointerInfo:
        """Upload content to the LFS server.

        The returned pointer info is what the caller should commit, encoded
        with :func:`lfsclient.pointer.encode`, in place of the content.

        Raises:
          ProtocolError: if batch negotiation fails
          TransferFailed: if the upload or its verification is rejected
        """
        info = build_info(content)

        response = await negotiate(self.request, self.remote, UPLOAD, [info])
        obj = _first_object(response, info.oid)
        if not obj.actions:
            logger.debug("LFS server already has %s", info.oid)
            return info

        upload_action = obj.actions[UPLOAD]
        self.report("uploading", info.oid)
        logger.info("Uploading LFS object %s (%d bytes)", info.oid, info.size)
        put = await self.request(
            HTTPRequest(
                url=upload_action.href,
                method="PUT",
                headers=self.remote.request_headers(upload_action.header),
                body=content,
            )
        )
        if put.status != 200:
            raise TransferFailed(UPLOAD, put.status)

        verify_action = obj.actions.get(VERIFY)
        if verify_action is not None:
            self.report("verifying", info.oid)
            # Some servers refuse a missing or unfamiliar User-Agent here.
            verify_headers = {
                "User-Agent": self.remote.user_agent,
                "Accept": LFS_MEDIA_TYPE,
                "Content-Type": LFS_MEDIA_TYPE,
            }
            verified = await self.request(
                HTTPRequest(
                    url=verify_action.href,
                    method="POST",
                    headers=self.remote.request_headers(
                        verify_headers, verify_action.header
                    ),
                    body=json.dumps(info.as_json()).encode("utf-8"),
                )
            )
            if verified.status != 200:
                raise TransferFailed(VERIFY, verified.status)
        return info
