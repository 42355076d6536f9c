# pointer.py -- LFS pointer files
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

"""LFS pointer detection, parsing and creation.

A pointer is the small text blob committed in place of a large file::

    version https://git-lfs.github.com/spec/v1
    oid sha256:<hex digest>
    size <decimal>

All functions in this module are pure.
"""

__all__ = [
    "LFS_POINTER_PREAMBLE",
    "LFSPointer",
    "LFSPointerInfo",
    "build_info",
    "decode",
    "encode",
    "is_pointer",
    "object_path",
]

import hashlib
import os
import re
from dataclasses import dataclass

from .errors import MalformedPointer

LFS_SPEC_URL = "https://git-lfs.github.com/spec/v1"
LFS_POINTER_PREAMBLE = f"version {LFS_SPEC_URL}\n".encode("ascii")

# Only this many leading bytes are inspected by is_pointer.
POINTER_SNIFF_LENGTH = 100

_HEX_OID_RE = re.compile(r"^[0-9a-f]+$")


@dataclass(frozen=True)
class LFSPointerInfo:
    """Identity of an LFS object: its SHA-256 and its size in bytes."""

    oid: str
    size: int

    def __post_init__(self) -> None:
        if not _HEX_OID_RE.match(self.oid):
            raise ValueError(f"invalid LFS oid {self.oid!r}")
        if self.size < 0:
            raise ValueError(f"invalid LFS object size {self.size}")

    def as_json(self) -> dict[str, str | int]:
        """Return the batch API representation of this object."""
        return {"oid": self.oid, "size": self.size}


@dataclass(frozen=True)
class LFSPointer:
    """A decoded pointer, together with where its object lives in the cache."""

    info: LFSPointerInfo
    object_path: str

    @classmethod
    def from_info(cls, gitdir: str, info: LFSPointerInfo) -> "LFSPointer":
        """Bind pointer info to the cache of a repository."""
        return cls(info, object_path(gitdir, info.oid))

    @classmethod
    def from_bytes(cls, gitdir: str, data: bytes) -> "LFSPointer":
        """Decode pointer text and bind it to the cache of a repository.

        Raises:
          MalformedPointer: if the pointer cannot be decoded
        """
        return cls.from_info(gitdir, decode(data))

    @classmethod
    def from_workdir(cls, workdir: str, data: bytes) -> "LFSPointer":
        """Like from_bytes, for a repository whose control dir is ``.git``."""
        return cls.from_bytes(os.path.join(workdir, ".git"), data)


def object_path(gitdir: str, oid: str) -> str:
    """Return the cache path of the object with the given oid.

    Objects are sharded two levels deep on the first four hex digits:
    ``<gitdir>/lfs/objects/ab/cd/abcd...``.
    """
    return os.path.join(gitdir, "lfs", "objects", oid[0:2], oid[2:4], oid)


def is_pointer(data: bytes) -> bool:
    """Check whether a blob looks like an LFS pointer.

    This only looks at a short prefix and is cheap enough to call on every
    blob seen while scanning a tree.
    """
    return data[:1] == b"v" and data[:POINTER_SNIFF_LENGTH].startswith(
        LFS_POINTER_PREAMBLE
    )


def decode(data: bytes) -> LFSPointerInfo:
    """Parse pointer text.

    Lines may appear in any order after the version line; keys other than
    ``oid`` and ``size`` are ignored.

    Raises:
      MalformedPointer: if the oid or size is missing or invalid
    """
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise MalformedPointer("LFS pointer is not valid UTF-8") from exc

    oid = None
    size = None
    for line in text.strip().splitlines():
        key, _, value = line.strip().partition(" ")
        if key == "oid":
            # The hash algorithm prefix ("sha256:") is not kept.
            oid = value.strip().partition(":")[2]
        elif key == "size":
            value = value.strip()
            # Only plain ASCII digits form a valid size.
            if not (value.isascii() and value.isdigit()):
                raise MalformedPointer(f"LFS pointer has invalid size {value!r}")
            size = int(value, 10)

    if oid is None or size is None:
        raise MalformedPointer("LFS pointer is incomplete or cannot be read")

    try:
        return LFSPointerInfo(oid, size)
    except ValueError as exc:
        raise MalformedPointer(str(exc)) from exc


def encode(info: LFSPointerInfo) -> bytes:
    """Serialize pointer info in canonical form."""
    return (
        f"version {LFS_SPEC_URL}\noid sha256:{info.oid}\nsize {info.size}\n"
    ).encode("ascii")


def build_info(content: bytes) -> LFSPointerInfo:
    """Compute pointer info for raw object content."""
    return LFSPointerInfo(hashlib.sha256(content).hexdigest(), len(content))
