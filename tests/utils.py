# utils.py -- Test utilities for lfsclient
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

"""Utility functions common to lfsclient tests."""

import json
from typing import Any

from lfsclient.http import LFS_MEDIA_TYPE, HTTPRequest, HTTPResponse

HELLO = b"hello world"
HELLO_OID = "b94d27b9934d3e08a52e52d7da7dabfac484efe37a5380ee9088f7ace2efcde9"
EMPTY_OID = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"


def json_response(data: Any, status: int = 200) -> HTTPResponse:
    """Build a response carrying a JSON document."""
    return HTTPResponse(
        status=status,
        headers={"Content-Type": LFS_MEDIA_TYPE},
        body=json.dumps(data).encode("utf-8"),
    )


def download_batch(oid: str, size: int, header: dict[str, str] | None = None) -> HTTPResponse:
    """Batch response offering a download of a single object."""
    action: dict[str, Any] = {"href": f"https://lfs.example.com/objects/{oid}"}
    if header is not None:
        action["header"] = header
    return json_response(
        {"objects": [{"oid": oid, "size": size, "actions": {"download": action}}]}
    )


def upload_batch(oid: str, size: int, verify: bool = True) -> HTTPResponse:
    """Batch response asking for an upload (and verification) of one object."""
    actions: dict[str, Any] = {
        "upload": {
            "href": f"https://lfs.example.com/objects/{oid}",
            "header": {"X-Upload-Token": "up"},
        }
    }
    if verify:
        actions["verify"] = {
            "href": f"https://lfs.example.com/objects/{oid}/verify",
            "header": {"X-Verify-Token": "ver"},
        }
    return json_response({"objects": [{"oid": oid, "size": size, "actions": actions}]})


class FakeTransport:
    """Request function replaying canned responses and recording requests."""

    def __init__(self, *responses: HTTPResponse) -> None:
        self.responses = list(responses)
        self.requests: list[HTTPRequest] = []

    async def __call__(self, request: HTTPRequest) -> HTTPResponse:
        self.requests.append(request)
        if not self.responses:
            raise AssertionError(f"unexpected request {request.method} {request.url}")
        return self.responses.pop(0)
