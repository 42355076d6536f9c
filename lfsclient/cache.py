# cache.py -- Local LFS object cache
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

"""Content-addressable cache of LFS objects.

Objects are stored as raw bytes under ``<gitdir>/lfs/objects``, sharded on
the first four hex digits of their oid, the same layout git-lfs uses. An
entry is trusted if its length matches the expected size; its hash is not
recomputed. Nothing is ever deleted from the cache.

Writes go straight to the destination path. An interrupted write leaves a
short file behind, which the next read treats as a miss.
"""

__all__ = [
    "ObjectCache",
    "WritePolicy",
]

import enum
import os

from .errors import CacheIOError
from .fs import FileSystem, LocalFileSystem
from .log_utils import getLogger
from .pointer import object_path

logger = getLogger(__name__)


class WritePolicy(enum.Enum):
    """When a cache write may go ahead."""

    # Overwrite whatever is there, as long as the path is writable.
    WRITABLE = "writable"
    # Only write to a path that does not exist yet.
    VACANT_AND_WRITABLE = "vacant-and-writable"


class ObjectCache:
    """LFS objects stored below repository control directories.

    Entries are addressed by path, as computed by :meth:`path`, so one
    instance serves any number of repositories on the same filesystem.
    """

    def __init__(self, fs: FileSystem | None = None) -> None:
        """Initialize ObjectCache.

        Args:
          fs: Filesystem to use; defaults to the local disk
        """
        self.fs = fs if fs is not None else LocalFileSystem()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.fs!r})"

    @staticmethod
    def path(gitdir: str, oid: str) -> str:
        """Return the path an object with the given oid is cached at."""
        return object_path(gitdir, oid)

    async def try_read(self, path: str, expected_size: int) -> bytes | None:
        """Read a cached object.

        Args:
          path: Cache path of the object
          expected_size: Size recorded in the pointer
        Returns: the cached bytes, or None on a miss
        Raises:
          CacheIOError: if the file exists but cannot be read
        """
        try:
            data = await self.fs.read_file(path)
        except FileNotFoundError:
            logger.debug("LFS cache miss for %s", path)
            return None
        except OSError as e:
            raise CacheIOError(path, e) from e
        if len(data) != expected_size:
            logger.debug(
                "Ignoring LFS cache entry %s: expected %d bytes, found %d",
                path,
                expected_size,
                len(data),
            )
            return None
        return data

    async def is_writable(self, path: str) -> bool:
        """Check whether path may be written, whether or not it exists."""
        try:
            await self.fs.access(path, os.W_OK)
        except FileNotFoundError:
            return True
        except OSError:
            return False
        return True

    async def is_vacant_and_writable(self, path: str) -> bool:
        """Check whether path does not exist yet, and so may be written."""
        try:
            await self.fs.access(path, os.F_OK)
        except FileNotFoundError:
            return True
        except OSError:
            return False
        return False

    async def try_write(
        self,
        path: str,
        data: bytes,
        policy: WritePolicy = WritePolicy.WRITABLE,
    ) -> bool:
        """Store an object in the cache, if policy allows it.

        Args:
          path: Cache path of the object
          data: Object contents
          policy: Whether an existing file may be replaced
        Returns: True if the object was written, False if it was skipped
        Raises:
          CacheIOError: if the write was attempted and failed
        """
        if policy is WritePolicy.VACANT_AND_WRITABLE:
            allowed = await self.is_vacant_and_writable(path)
        else:
            allowed = await self.is_writable(path)
        if not allowed:
            logger.debug("Not writing LFS cache entry %s (%s)", path, policy.value)
            return False
        try:
            await self.fs.mkdir_all(os.path.dirname(path))
            await self.fs.write_file(path, data)
        except OSError as e:
            raise CacheIOError(path, e) from e
        return True
