# fs.py -- Filesystem access for the object cache
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

"""Filesystem capability used by the object cache.

The cache never touches the filesystem directly; it goes through a
:class:`FileSystem`. Failures are reported as :class:`OSError` subclasses,
with :class:`FileNotFoundError` reserved for absent paths.
"""

__all__ = [
    "FileSystem",
    "LocalFileSystem",
    "MemoryFileSystem",
    "SyncFileSystemAdapter",
]

import asyncio
import errno
import os
import posixpath
from typing import Any


class FileSystem:
    """Asynchronous filesystem operations needed by the cache."""

    async def read_file(self, path: str) -> bytes:
        """Read the full contents of a file."""
        raise NotImplementedError(self.read_file)

    async def write_file(self, path: str, data: bytes) -> None:
        """Create or replace a file."""
        raise NotImplementedError(self.write_file)

    async def mkdir_all(self, path: str) -> None:
        """Create a directory and any missing parents."""
        raise NotImplementedError(self.mkdir_all)

    async def access(self, path: str, mode: int) -> None:
        """Check that path can be accessed with mode (``os.W_OK`` etc).

        Raises:
          FileNotFoundError: if path does not exist
          PermissionError: if access is denied
        """
        raise NotImplementedError(self.access)


def _write_bytes(path: str, data: bytes) -> None:
    with open(path, "wb") as f:
        f.write(data)


def _read_bytes(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()


def _check_access(path: str, mode: int) -> None:
    if not os.path.lexists(path):
        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), path)
    if not os.access(path, mode):
        raise PermissionError(errno.EACCES, os.strerror(errno.EACCES), path)


class LocalFileSystem(FileSystem):
    """The local disk, with blocking calls run in a worker thread."""

    async def read_file(self, path: str) -> bytes:
        return await asyncio.to_thread(_read_bytes, path)

    async def write_file(self, path: str, data: bytes) -> None:
        await asyncio.to_thread(_write_bytes, path, data)

    async def mkdir_all(self, path: str) -> None:
        await asyncio.to_thread(os.makedirs, path, exist_ok=True)

    async def access(self, path: str, mode: int) -> None:
        await asyncio.to_thread(_check_access, path, mode)


class SyncFileSystemAdapter(FileSystem):
    """Expose a blocking filesystem object through the async interface.

    The wrapped object must provide ``read_file``, ``write_file``,
    ``mkdir_all`` and ``access`` with the same signatures and error
    conventions as :class:`FileSystem`, but as plain functions.
    """

    def __init__(self, sync_fs: Any) -> None:
        self._fs = sync_fs

    async def read_file(self, path: str) -> bytes:
        return await asyncio.to_thread(self._fs.read_file, path)

    async def write_file(self, path: str, data: bytes) -> None:
        await asyncio.to_thread(self._fs.write_file, path, data)

    async def mkdir_all(self, path: str) -> None:
        await asyncio.to_thread(self._fs.mkdir_all, path)

    async def access(self, path: str, mode: int) -> None:
        await asyncio.to_thread(self._fs.access, path, mode)


class MemoryFileSystem(FileSystem):
    """Filesystem kept in a dictionary.

    Paths are treated as POSIX paths. Individual paths can be made read-only
    or made to fail on read, which is useful to exercise cache error handling.
    """

    def __init__(self) -> None:
        self.files: dict[str, bytes] = {}
        self.dirs: set[str] = {"/"}
        self.read_only: set[str] = set()
        self.read_errors: dict[str, OSError] = {}

    def _require_parent(self, path: str) -> None:
        parent = posixpath.dirname(path)
        if parent and parent not in self.dirs:
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), parent)

    async def read_file(self, path: str) -> bytes:
        if path in self.read_errors:
            raise self.read_errors[path]
        try:
            return self.files[path]
        except KeyError:
            raise FileNotFoundError(
                errno.ENOENT, os.strerror(errno.ENOENT), path
            ) from None

    async def write_file(self, path: str, data: bytes) -> None:
        self._require_parent(path)
        if path in self.read_only:
            raise PermissionError(errno.EACCES, os.strerror(errno.EACCES), path)
        self.files[path] = bytes(data)

    async def mkdir_all(self, path: str) -> None:
        while path and path not in self.dirs:
            if path in self.files:
                raise FileExistsError(errno.EEXIST, os.strerror(errno.EEXIST), path)
            self.dirs.add(path)
            path = posixpath.dirname(path)

    async def access(self, path: str, mode: int) -> None:
        if path not in self.files and path not in self.dirs:
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), path)
        if mode & os.W_OK and path in self.read_only:
            raise PermissionError(errno.EACCES, os.strerror(errno.EACCES), path)
