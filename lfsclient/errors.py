# errors.py -- LFS exception classes
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

"""lfsclient-related exception classes."""

__all__ = [
    "CacheIOError",
    "LFSError",
    "MalformedPointer",
    "ProtocolError",
    "TransferFailed",
]


class LFSError(Exception):
    """Base class for LFS errors."""


class MalformedPointer(LFSError):
    """Pointer text is missing its oid or size, or has an unparsable value."""


class ProtocolError(LFSError):
    """The LFS server responded in a way this client does not understand."""

    INVALID_JSON = "invalid-json"
    INVALID_SHAPE = "invalid-shape"
    HTTP_STATUS = "http-status"
    OBJECT_ERROR = "object-error"

    def __init__(
        self, message: str, body: bytes | None = None, kind: str = INVALID_SHAPE
    ) -> None:
        """Initialize a ProtocolError.

        Args:
            message: Description of the problem.
            body: Raw response body, kept for diagnostics.
            kind: One of the ``INVALID_JSON``, ``INVALID_SHAPE``,
                ``HTTP_STATUS`` or ``OBJECT_ERROR`` constants.
        """
        if body is not None:
            message = f"{message}: {body.decode('utf-8', errors='replace')}"
        LFSError.__init__(self, message)
        self.body = body
        self.kind = kind


class TransferFailed(LFSError):
    """An object transfer step returned an unexpected HTTP status."""

    def __init__(self, phase: str, status: int) -> None:
        """Initialize a TransferFailed exception.

        Args:
            phase: Transfer step that failed ("download", "upload" or "verify").
            status: HTTP status code returned by the server.
        """
        LFSError.__init__(
            self,
            f"Transfer might have been unsuccessful, {phase} action yielded HTTP {status}",
        )
        self.phase = phase
        self.status = status


class CacheIOError(LFSError):
    """Accessing the local object cache failed for a reason other than absence."""

    def __init__(self, path: str, cause: OSError) -> None:
        """Initialize a CacheIOError.

        Args:
            path: Cache path being accessed.
            cause: Underlying filesystem error.
        """
        LFSError.__init__(self, f"Unable to access LFS cache at {path}: {cause}")
        self.path = path
        self.cause = cause
