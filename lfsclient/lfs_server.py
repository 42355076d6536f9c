# lfs_server.py -- Minimal Git LFS server
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

"""Simple Git LFS server implementation for testing.

Serves the batch API at ``/info/lfs/objects/batch`` and keeps objects in
memory. Every request is recorded so tests can check what a client sent.
"""

import hashlib
import json
import threading
import typing
from collections.abc import Mapping
from dataclasses import dataclass
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

from .http import LFS_MEDIA_TYPE

BATCH_PATH = "/info/lfs/objects/batch"


@dataclass
class RecordedRequest:
    """A request received by the server."""

    method: str
    path: str
    headers: dict[str, str]
    body: bytes


class LFSRequestHandler(BaseHTTPRequestHandler):
    """HTTP request handler for LFS operations."""

    server: "LFSServer"

    def _read_body(self) -> bytes:
        length = int(self.headers.get("Content-Length", 0))
        return self.rfile.read(length) if length else b""

    def _record(self, body: bytes) -> None:
        self.server.requests.append(
            RecordedRequest(self.command, self.path, dict(self.headers.items()), body)
        )

    def _send(
        self, status: int, body: bytes = b"", content_type: str = "text/plain"
    ) -> None:
        self.send_response(status)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _send_json(self, status: int, data: Mapping[str, typing.Any]) -> None:
        self._send(status, json.dumps(data).encode("utf-8"), LFS_MEDIA_TYPE)

    def _oid_from_path(self, suffix: str = "") -> str | None:
        parts = self.path.strip("/").split("/")
        if parts[0] != "objects" or len(parts) != (3 if suffix else 2):
            return None
        if suffix and parts[2] != suffix:
            return None
        return parts[1]

    def do_POST(self) -> None:
        body = self._read_body()
        self._record(body)
        if self.path == BATCH_PATH:
            self.handle_batch(body)
        elif self._oid_from_path("verify") is not None:
            self.handle_verify(body)
        else:
            self._send(404, b"Not Found")

    def do_PUT(self) -> None:
        body = self._read_body()
        self._record(body)
        oid = self._oid_from_path()
        if oid is None:
            self._send(404, b"Not Found")
            return
        if self.server.upload_status != 200:
            self._send(self.server.upload_status)
            return
        actual = hashlib.sha256(body).hexdigest()
        if actual != oid:
            self._send(400, f"OID mismatch: expected {oid}, got {actual}".encode())
            return
        self.server.objects[oid] = body
        self._send(200)

    def do_GET(self) -> None:
        self._record(b"")
        oid = self._oid_from_path()
        if oid is None or oid not in self.server.objects:
            self._send(404, b"Object not found")
            return
        self._send(200, self.server.objects[oid], "application/octet-stream")

    def handle_batch(self, body: bytes) -> None:
        try:
            batch_request = json.loads(body)
        except json.JSONDecodeError:
            self._send(400, b"Invalid JSON")
            return

        operation = batch_request.get("operation")
        if operation not in ("download", "upload"):
            self._send(400, b"Invalid operation")
            return

        base = f"http://{self.headers['Host']}/objects"
        response_objects = []
        for obj in batch_request.get("objects", []):
            oid = obj.get("oid")
            response_obj: dict[str, typing.Any] = {"oid": oid, "size": obj.get("size")}
            if operation == "download":
                if oid in self.server.objects:
                    response_obj["actions"] = {
                        "download": {
                            "href": f"{base}/{oid}",
                            "header": {"Accept": "application/octet-stream"},
                        }
                    }
                else:
                    response_obj["error"] = {"code": 404, "message": "Object not found"}
            elif oid not in self.server.objects:
                actions: dict[str, typing.Any] = {
                    "upload": {
                        "href": f"{base}/{oid}",
                        "header": {"Content-Type": "application/octet-stream"},
                    }
                }
                if self.server.require_verify:
                    actions["verify"] = {"href": f"{base}/{oid}/verify"}
                response_obj["actions"] = actions
            response_objects.append(response_obj)

        self._send_json(200, {"transfer": "basic", "objects": response_objects})

    def handle_verify(self, body: bytes) -> None:
        if not self.headers.get("User-Agent"):
            self._send(400, b"Missing User-Agent")
            return
        try:
            verify_request = json.loads(body)
        except json.JSONDecodeError:
            self._send(400, b"Invalid JSON")
            return
        stored = self.server.objects.get(verify_request.get("oid"))
        if stored is None or len(stored) != verify_request.get("size"):
            self._send(422, b"Object not verified")
            return
        self._send(200)

    def log_message(self, format: str, *args: object) -> None:
        if self.server.log_requests:
            super().log_message(format, *args)


class LFSServer(ThreadingHTTPServer):
    """Simple LFS server for testing."""

    def __init__(
        self,
        server_address: tuple[str, int],
        require_verify: bool = True,
        log_requests: bool = False,
    ) -> None:
        """Initialize LFSServer.

        Args:
          server_address: Tuple of (host, port) to bind to
          require_verify: Whether upload responses include a verify action
          log_requests: Whether to log incoming requests
        """
        super().__init__(server_address, LFSRequestHandler)
        self.objects: dict[str, bytes] = {}
        self.requests: list[RecordedRequest] = []
        self.require_verify = require_verify
        self.upload_status = 200
        self.log_requests = log_requests

    @property
    def url(self) -> str:
        host, port = self.server_address[:2]
        return f"http://{host}:{port}"

    def start(self) -> threading.Thread:
        """Serve requests from a daemon thread."""
        thread = threading.Thread(target=self.serve_forever, daemon=True)
        thread.start()
        return thread

    def stop(self) -> None:
        self.shutdown()
        self.server_close()


def run_lfs_server(
    host: str = "127.0.0.1",
    port: int = 0,
    require_verify: bool = True,
    log_requests: bool = False,
) -> tuple[LFSServer, str]:
    """Start an LFS server in the background.

    Returns:
        Tuple of (server, url) where url is the repository URL to use
    """
    server = LFSServer((host, port), require_verify, log_requests)
    server.start()
    return server, server.url
