# populate.py -- Filling the LFS cache from a tree walk
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

"""Populate the LFS cache for every pointer found in a tree.

Walking the repository is left to the host: it yields one entry per visited
path, and recursion into subtrees is its business. Each entry only needs to
tell its type, its mode and, for blobs, its content.

Objects already present in the cache, or whose cache path is not writable,
are skipped without contacting the server. The working tree is never
touched.
"""

__all__ = [
    "SYMLINK_MODE",
    "MemoryEntry",
    "PopulateResult",
    "ScanEntry",
    "populate_cache",
    "populate_repository",
]

from collections.abc import AsyncIterable, AsyncIterator, Iterable
from dataclasses import dataclass, field
from typing import Protocol

from .cache import WritePolicy
from .config import remote_from_gitdir
from .fs import FileSystem
from .http import RequestFunc
from .log_utils import getLogger
from .pointer import LFSPointer, is_pointer
from .transfer import ProgressCallback, TransferClient

logger = getLogger(__name__)

SYMLINK_MODE = 0o120000


class ScanEntry(Protocol):
    """A path visited by the host's tree walk."""

    path: str

    async def type(self) -> str:
        """Return "tree" or "blob"."""
        ...

    async def mode(self) -> int:
        """Return the git file mode."""
        ...

    async def content(self) -> bytes | None:
        """Return the blob content, or None if unavailable."""
        ...


@dataclass
class MemoryEntry:
    """A ScanEntry whose details are known up front."""

    path: str
    kind: str = "blob"
    file_mode: int = 0o100644
    data: bytes | None = None

    async def type(self) -> str:
        return self.kind

    async def mode(self) -> int:
        return self.file_mode

    async def content(self) -> bytes | None:
        return self.data


@dataclass
class PopulateResult:
    """Oids handled by populate_cache."""

    downloaded: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


async def _iter_entries(
    entries: AsyncIterable[ScanEntry] | Iterable[ScanEntry],
) -> AsyncIterator[ScanEntry]:
    if isinstance(entries, AsyncIterable):
        async for entry in entries:
            yield entry
    else:
        for entry in entries:
            yield entry


async def populate_cache(
    client: TransferClient,
    gitdir: str,
    entries: AsyncIterable[ScanEntry] | Iterable[ScanEntry],
) -> PopulateResult:
    """Download every LFS object referenced by the scanned blobs.

    Args:
      client: Client used to download missing objects
      gitdir: Control directory of the repository whose cache to fill
      entries: Entries yielded by the tree walk
    Returns: a PopulateResult
    Raises:
      MalformedPointer: if a blob looks like a pointer but cannot be decoded
      LFSError: if a download fails; objects downloaded so far stay cached
    """
    result = PopulateResult()
    async for entry in _iter_entries(entries):
        if await entry.type() != "blob" or await entry.mode() == SYMLINK_MODE:
            continue
        content = await entry.content()
        if not content or not is_pointer(content):
            continue

        pointer = LFSPointer.from_bytes(gitdir, content)
        oid = pointer.info.oid
        client.report("scanning", oid)

        # Don't even start the download if the cache path is taken or not
        # accessible.
        if not await client.cache.is_vacant_and_writable(pointer.object_path):
            logger.debug("Skipping %s (%s): already cached", entry.path, oid)
            result.skipped.append(oid)
            continue

        await client.download(pointer, WritePolicy.VACANT_AND_WRITABLE)
        result.downloaded.append(oid)
    return result


async def populate_repository(
    gitdir: str,
    entries: AsyncIterable[ScanEntry] | Iterable[ScanEntry],
    request: RequestFunc | None = None,
    fs: FileSystem | None = None,
    progress: ProgressCallback | None = None,
    remote_name: str = "origin",
) -> PopulateResult:
    """Populate the cache of a repository, using its configured remote.

    Nothing is downloaded if the remote has no URL configured.
    """
    remote = remote_from_gitdir(gitdir, remote_name)
    if remote is None:
        logger.info("No URL for remote %s, not fetching LFS objects", remote_name)
        return PopulateResult()
    client = TransferClient(remote, request=request, fs=fs, progress=progress)
    return await populate_cache(client, gitdir, entries)
