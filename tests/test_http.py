# test_http.py -- tests for the HTTP plumbing
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

"""Tests for lfsclient.http."""

import base64
import os

import urllib3

from lfsclient.config import ConfigDict
from lfsclient.http import (
    BasicAuth,
    Remote,
    check_for_proxy_bypass,
    default_urllib3_manager,
    default_user_agent_string,
    get_auth_header,
    merge_headers,
)

from . import TestCase


class MergeHeadersTests(TestCase):
    def test_later_wins(self) -> None:
        self.assertEqual(
            {"Accept": "b", "X": "1"},
            merge_headers({"Accept": "a", "X": "1"}, {"Accept": "b"}),
        )

    def test_case_insensitive(self) -> None:
        self.assertEqual(
            {"user-agent": "mine"},
            merge_headers({"User-Agent": "default"}, {"user-agent": "mine"}),
        )

    def test_skips_none(self) -> None:
        self.assertEqual({"A": "1"}, merge_headers(None, {"A": "1"}, None, {}))


class AuthTests(TestCase):
    def test_no_auth(self) -> None:
        self.assertEqual({}, get_auth_header(None))

    def test_basic(self) -> None:
        header = get_auth_header(BasicAuth("user", "pass"))
        self.assertEqual(
            "Basic " + base64.b64encode(b"user:pass").decode("ascii"),
            header["Authorization"],
        )

    def test_repr_hides_password(self) -> None:
        self.assertNotIn("hunter2", repr(BasicAuth("user", "hunter2")))


class RemoteTests(TestCase):
    def test_batch_url(self) -> None:
        self.assertEqual(
            "https://example.com/repo.git/info/lfs/objects/batch",
            Remote("https://example.com/repo.git").batch_url,
        )

    def test_batch_url_trailing_slash(self) -> None:
        self.assertEqual(
            "https://example.com/repo/info/lfs/objects/batch",
            Remote("https://example.com/repo/").batch_url,
        )

    def test_default_user_agent(self) -> None:
        self.assertEqual(default_user_agent_string(), Remote("https://x").user_agent)
        self.assertTrue(default_user_agent_string().startswith("git-lfs/"))

    def test_request_headers(self) -> None:
        remote = Remote(
            "https://example.com/repo",
            headers={"X-Remote": "r", "Accept": "*/*"},
            auth=BasicAuth("u", "p"),
        )
        headers = remote.request_headers({"Accept": "application/json"}, None)
        self.assertEqual("r", headers["X-Remote"])
        self.assertEqual("application/json", headers["Accept"])
        self.assertTrue(headers["Authorization"].startswith("Basic "))


class ProxyBypassTests(TestCase):
    def test_no_env(self) -> None:
        self.assertFalse(check_for_proxy_bypass("https://example.com/"))

    def test_matching_host(self) -> None:
        os.environ["no_proxy"] = "localhost, .example.com"
        self.assertTrue(check_for_proxy_bypass("https://lfs.example.com/x"))
        self.assertTrue(check_for_proxy_bypass("http://localhost:8080/"))
        self.assertFalse(check_for_proxy_bypass("https://example.org/"))

    def test_wildcard(self) -> None:
        os.environ["no_proxy"] = "*"
        self.assertTrue(check_for_proxy_bypass("https://anything/"))


class DefaultUrllib3ManagerTests(TestCase):
    def test_no_config(self) -> None:
        manager = default_urllib3_manager(None)
        self.assertIsInstance(manager, urllib3.PoolManager)
        self.assertNotIsInstance(manager, urllib3.ProxyManager)
        self.assertEqual(default_user_agent_string(), manager.headers["User-Agent"])
        self.assertEqual("CERT_REQUIRED", manager.connection_pool_kw["cert_reqs"])

    def test_config(self) -> None:
        config = ConfigDict()
        config.set(b"http", b"useragent", b"custom/1")
        config.set(b"http", b"sslVerify", b"false")
        config.set(b"http", b"sslCAInfo", b"/etc/ca.pem")
        manager = default_urllib3_manager(config)
        self.assertEqual("custom/1", manager.headers["User-Agent"])
        self.assertEqual("CERT_NONE", manager.connection_pool_kw["cert_reqs"])
        self.assertEqual("/etc/ca.pem", manager.connection_pool_kw["ca_certs"])

    def test_proxy_from_config(self) -> None:
        config = ConfigDict()
        config.set(b"http", b"proxy", b"http://proxy.example.com:3128")
        manager = default_urllib3_manager(config)
        self.assertIsInstance(manager, urllib3.ProxyManager)

    def test_proxy_from_environment(self) -> None:
        os.environ["https_proxy"] = "http://proxy.example.com:3128"
        manager = default_urllib3_manager(None)
        self.assertIsInstance(manager, urllib3.ProxyManager)

    def test_proxy_bypassed(self) -> None:
        os.environ["https_proxy"] = "http://proxy.example.com:3128"
        os.environ["no_proxy"] = "example.com"
        manager = default_urllib3_manager(None, base_url="https://example.com/r")
        self.assertNotIsInstance(manager, urllib3.ProxyManager)

    def test_timeout(self) -> None:
        manager = default_urllib3_manager(None, timeout=5)
        self.assertEqual(5, manager.connection_pool_kw["timeout"])
