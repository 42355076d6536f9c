# batch.py -- LFS batch API negotiation
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

"""LFS batch API negotiation.

Before any object is transferred, the client POSTs the oids and sizes it is
interested in to ``<repo>/info/lfs/objects/batch``; the server answers with
per-object *actions*: URLs (and headers) to download, upload or verify.
Only the "basic" transfer adapter is requested.
"""

__all__ = [
    "DOWNLOAD",
    "UPLOAD",
    "BatchParseResult",
    "LFSAction",
    "LFSBatchObject",
    "LFSBatchResponse",
    "LFSErrorInfo",
    "build_batch_request",
    "negotiate",
    "parse_batch_response",
]

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from .errors import ProtocolError
from .http import LFS_MEDIA_TYPE, HTTPRequest, Remote, RequestFunc
from .log_utils import getLogger
from .pointer import LFSPointerInfo

logger = getLogger(__name__)

DOWNLOAD = "download"
UPLOAD = "upload"
VERIFY = "verify"

OPERATIONS = (DOWNLOAD, UPLOAD)


@dataclass
class LFSAction:
    """LFS action structure."""

    href: str
    header: dict[str, str] | None = None
    expires_at: str | None = None


@dataclass
class LFSErrorInfo:
    """LFS error structure."""

    code: int
    message: str


@dataclass
class LFSBatchObject:
    """LFS batch object structure."""

    oid: str | None = None
    size: int | None = None
    authenticated: bool | None = None
    actions: dict[str, LFSAction] | None = None
    error: LFSErrorInfo | None = None


@dataclass
class LFSBatchResponse:
    """LFS batch response structure."""

    objects: list[LFSBatchObject]
    transfer: str = "basic"
    hash_algo: str | None = None


@dataclass
class BatchParseResult:
    """Outcome of parsing a batch response.

    Exactly one of ``response`` and ``error_kind`` is set.
    """

    response: LFSBatchResponse | None = None
    error_kind: str | None = None
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.response is not None


def build_batch_request(
    operation: str, objects: Sequence[LFSPointerInfo]
) -> dict[str, Any]:
    """Return the JSON document for a batch request."""
    if operation not in OPERATIONS:
        raise ValueError(f"unsupported LFS operation {operation!r}")
    return {
        "operation": operation,
        "transfers": ["basic"],
        "objects": [info.as_json() for info in objects],
    }


class _ShapeError(Exception):
    """A parsed batch response does not have the expected structure."""


def _parse_action(name: str, data: Any) -> LFSAction:
    if not isinstance(data, Mapping):
        raise _ShapeError(f"action {name!r} is not an object")
    href = data.get("href")
    if not isinstance(href, str) or not href.strip():
        raise _ShapeError(f"action {name!r} has no href")
    header = data.get("header")
    if header is not None:
        if not isinstance(header, Mapping) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in header.items()
        ):
            raise _ShapeError(f"action {name!r} has an invalid header map")
        header = dict(header)
    expires_at = data.get("expires_at")
    return LFSAction(
        href=href,
        header=header,
        expires_at=expires_at if isinstance(expires_at, str) else None,
    )


def _parse_object(data: Any) -> LFSBatchObject:
    if not isinstance(data, Mapping):
        raise _ShapeError("batch object is not a JSON object")
    actions = None
    if data.get("actions") is not None:
        if not isinstance(data["actions"], Mapping):
            raise _ShapeError("actions is not an object")
        actions = {
            name: _parse_action(name, action)
            for name, action in data["actions"].items()
        }
    error = None
    if data.get("error") is not None:
        err = data["error"]
        if not isinstance(err, Mapping):
            raise _ShapeError("error is not an object")
        error = LFSErrorInfo(
            code=err.get("code", 0), message=str(err.get("message", "unknown error"))
        )
    oid = data.get("oid")
    size = data.get("size")
    return LFSBatchObject(
        oid=oid if isinstance(oid, str) else None,
        size=size if isinstance(size, int) else None,
        authenticated=data.get("authenticated"),
        actions=actions,
        error=error,
    )


def _check_operation(operation: str, obj: LFSBatchObject) -> None:
    if obj.error is not None:
        # Reported to the caller that needs this object.
        return
    if operation == DOWNLOAD:
        if not obj.actions or DOWNLOAD not in obj.actions:
            raise _ShapeError("download response has no download action")
    elif obj.actions and UPLOAD not in obj.actions:
        # No actions at all means the server already has the object.
        raise _ShapeError("upload response has actions but no upload action")


def parse_batch_response(raw: bytes, operation: str) -> BatchParseResult:
    """Parse and validate a batch response body.

    Args:
      raw: Response body as received
      operation: Operation the request was made for
    Returns: a BatchParseResult; on failure its ``error_kind`` is
      ``ProtocolError.INVALID_JSON`` or ``ProtocolError.INVALID_SHAPE``
    """
    try:
        data = json.loads(raw)
    except (UnicodeDecodeError, ValueError) as e:
        return BatchParseResult(
            error_kind=ProtocolError.INVALID_JSON, message=f"unable to parse JSON: {e}"
        )

    try:
        if not isinstance(data, Mapping):
            raise _ShapeError("response is not a JSON object")
        raw_objects = data.get("objects")
        if not isinstance(raw_objects, list) or not raw_objects:
            raise _ShapeError("response has no objects")
        objects = [_parse_object(obj) for obj in raw_objects]
        _check_operation(operation, objects[0])
    except _ShapeError as e:
        return BatchParseResult(error_kind=ProtocolError.INVALID_SHAPE, message=str(e))

    transfer = data.get("transfer", "basic")
    hash_algo = data.get("hash_algo")
    return BatchParseResult(
        response=LFSBatchResponse(
            objects=objects,
            transfer=transfer if isinstance(transfer, str) else "basic",
            hash_algo=hash_algo if isinstance(hash_algo, str) else None,
        )
    )


async def negotiate(
    request: RequestFunc,
    remote: Remote,
    operation: str,
    objects: Sequence[LFSPointerInfo],
) -> LFSBatchResponse:
    """Perform a batch API call.

    Args:
      request: Request function to send the call with
      remote: LFS server to talk to
      operation: DOWNLOAD or UPLOAD
      objects: Objects to negotiate
    Returns: the validated batch response
    Raises:
      ProtocolError: if the server returns an error status, or a body that
        is not JSON or does not have the expected structure
    """
    body = json.dumps(build_batch_request(operation, objects)).encode("utf-8")
    headers = remote.request_headers(
        {"Accept": LFS_MEDIA_TYPE, "Content-Type": LFS_MEDIA_TYPE}
    )
    logger.debug("LFS batch %s of %d object(s)", operation, len(objects))
    response = await request(
        HTTPRequest(
            url=remote.batch_url,
            method="POST",
            headers=headers,
            body=body,
        )
    )
    if not 200 <= response.status < 300:
        raise ProtocolError(
            f"LFS batch API returned HTTP {response.status}",
            response.body,
            kind=ProtocolError.HTTP_STATUS,
        )
    result = parse_batch_response(response.body, operation)
    if result.response is None:
        assert result.error_kind is not None
        raise ProtocolError(
            f"Unexpected response to LFS {operation} request, {result.message}",
            response.body,
            kind=result.error_kind,
        )
    return result.response
