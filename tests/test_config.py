# test_config.py -- tests for git configuration handling
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

"""Tests for reading git configuration."""

import os
import shutil
import tempfile
from io import BytesIO

from lfsclient.config import (
    ConfigDict,
    ConfigFile,
    remote_from_config,
    remote_from_gitdir,
)
from lfsclient.http import default_user_agent_string
from lfsclient.transfer import TransferClient

from . import TestCase


class ConfigFileTests(TestCase):
    def from_file(self, text: bytes) -> ConfigFile:
        return ConfigFile.from_file(BytesIO(text))

    def test_empty(self) -> None:
        self.assertEqual([], list(self.from_file(b"").sections()))

    def test_simple(self) -> None:
        cf = self.from_file(b"[core]\nfoo = bar\n")
        self.assertEqual(b"bar", cf.get(b"core", b"foo"))

    def test_case_insensitive(self) -> None:
        cf = self.from_file(b"[CORE]\nFOO = bar\n")
        self.assertEqual(b"bar", cf.get(b"core", b"foo"))
        self.assertEqual(b"bar", cf.get("Core", "Foo"))

    def test_subsection(self) -> None:
        cf = self.from_file(b'[remote "origin"]\nurl = https://example.com/r.git\n')
        self.assertEqual(
            b"https://example.com/r.git", cf.get((b"remote", b"origin"), b"url")
        )
        self.assertTrue(cf.has_section((b"remote", b"origin")))

    def test_subsection_case_sensitive(self) -> None:
        cf = self.from_file(b'[remote "Origin"]\nurl = a\n')
        self.assertRaises(KeyError, cf.get, (b"remote", b"origin"), b"url")

    def test_deprecated_subsection(self) -> None:
        cf = self.from_file(b"[remote.origin]\nurl = a\n")
        self.assertEqual(b"a", cf.get((b"remote", b"origin"), b"url"))

    def test_quoted_and_escaped(self) -> None:
        cf = self.from_file(b'[core]\nfoo = "bar ; baz" \\"q\\"\n')
        self.assertEqual(b'bar ; baz "q"', cf.get(b"core", b"foo"))

    def test_comments(self) -> None:
        cf = self.from_file(b"# leading\n[core] ; trailing\nfoo = bar # comment\n")
        self.assertEqual(b"bar", cf.get(b"core", b"foo"))

    def test_bare_boolean(self) -> None:
        cf = self.from_file(b"[core]\nbare\n")
        self.assertTrue(cf.get_boolean(b"core", b"bare"))

    def test_continuation(self) -> None:
        cf = self.from_file(b"[core]\nfoo = bar\\\nbaz\n")
        self.assertEqual(b"barbaz", cf.get(b"core", b"foo"))

    def test_bom(self) -> None:
        cf = self.from_file(b"\xef\xbb\xbf[core]\nfoo = bar\n")
        self.assertEqual(b"bar", cf.get(b"core", b"foo"))

    def test_multivar(self) -> None:
        cf = self.from_file(b"[http]\nextraHeader = A: 1\nextraHeader = B: 2\n")
        self.assertEqual([b"A: 1", b"B: 2"], list(cf.get_multivar(b"http", b"extraheader")))
        self.assertEqual(b"B: 2", cf.get(b"http", b"extraHeader"))

    def test_setting_without_section(self) -> None:
        self.assertRaises(ValueError, self.from_file, b"foo = bar\n")

    def test_invalid_name(self) -> None:
        self.assertRaises(ValueError, self.from_file, b"[core]\nfo_o = bar\n")

    def test_missing_end_quote(self) -> None:
        self.assertRaises(ValueError, self.from_file, b'[core]\nfoo = "bar\n')

    def test_get_boolean(self) -> None:
        cf = self.from_file(b"[http]\nsslVerify = no\nother = maybe\n")
        self.assertFalse(cf.get_boolean(b"http", b"sslVerify"))
        self.assertTrue(cf.get_boolean(b"http", b"missing", True))
        self.assertRaises(ValueError, cf.get_boolean, b"http", b"other")


class ConfigDictTests(TestCase):
    def test_set_and_get(self) -> None:
        cd = ConfigDict()
        cd.set(b"http", b"sslVerify", False)
        self.assertEqual(b"false", cd.get(b"http", b"sslverify"))

    def test_subsection_falls_back_to_section(self) -> None:
        cd = ConfigDict()
        cd.set(b"http", b"proxy", "http://proxy")
        self.assertEqual(
            b"http://proxy", cd.get((b"http", b"https://example.com"), b"proxy")
        )

    def test_add(self) -> None:
        cd = ConfigDict()
        cd.add(b"http", b"extraHeader", b"A: 1")
        cd.add(b"http", b"extraHeader", b"B: 2")
        self.assertEqual([b"A: 1", b"B: 2"], list(cd.get_multivar(b"http", b"extraHeader")))

    def test_missing(self) -> None:
        self.assertRaises(KeyError, ConfigDict().get, b"core", b"foo")


class RemoteFromConfigTests(TestCase):
    def test_no_url(self) -> None:
        self.assertIsNone(remote_from_config(ConfigDict()))

    def test_defaults(self) -> None:
        cd = ConfigDict()
        cd.set((b"remote", b"origin"), b"url", b"https://example.com/r.git")
        remote = remote_from_config(cd)
        assert remote is not None
        self.assertEqual("https://example.com/r.git", remote.url)
        self.assertEqual(
            "https://example.com/r.git/info/lfs/objects/batch", remote.batch_url
        )
        self.assertEqual({}, remote.headers)
        self.assertIsNone(remote.auth)
        self.assertEqual(default_user_agent_string(), remote.user_agent)

    def test_other_remote(self) -> None:
        cd = ConfigDict()
        cd.set((b"remote", b"upstream"), b"url", b"https://example.com/u.git")
        self.assertIsNone(remote_from_config(cd))
        remote = remote_from_config(cd, "upstream")
        assert remote is not None
        self.assertEqual("https://example.com/u.git", remote.url)

    def test_scp_style_url(self) -> None:
        cd = ConfigDict()
        cd.set((b"remote", b"origin"), b"url", b"git@github.com:owner/repo.git")
        remote = remote_from_config(cd)
        assert remote is not None
        self.assertEqual("https://github.com/owner/repo.git", remote.url)

    def test_user_agent_and_extra_headers(self) -> None:
        cd = ConfigDict()
        cd.set((b"remote", b"origin"), b"url", b"https://example.com/r.git")
        cd.set(b"http", b"useragent", b"my-agent/1.0")
        cd.add(b"http", b"extraHeader", b"X-Token: secret")
        cd.add(b"http", b"extraHeader", b"garbage")
        with self.assertLogs("lfsclient.config", level="WARNING"):
            remote = remote_from_config(cd)
        assert remote is not None
        self.assertEqual("my-agent/1.0", remote.user_agent)
        self.assertEqual({"X-Token": "secret"}, remote.headers)

    def test_empty_user_agent(self) -> None:
        cd = ConfigDict()
        cd.set((b"remote", b"origin"), b"url", b"https://example.com/r.git")
        cd.set(b"http", b"useragent", b"")
        remote = remote_from_config(cd)
        assert remote is not None
        self.assertEqual(default_user_agent_string(), remote.user_agent)

    def test_keeps_config(self) -> None:
        cd = ConfigDict()
        cd.set((b"remote", b"origin"), b"url", b"https://example.com/r.git")
        remote = remote_from_config(cd)
        assert remote is not None
        self.assertIs(cd, remote.config)


class RemoteFromGitdirTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.gitdir = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.gitdir)

    def test_no_config(self) -> None:
        self.assertIsNone(remote_from_gitdir(self.gitdir))

    def test_config(self) -> None:
        with open(os.path.join(self.gitdir, "config"), "wb") as f:
            f.write(
                b"[core]\n\tbare = false\n"
                b'[remote "origin"]\n'
                b"\turl = https://example.com/r.git\n"
                b"\tfetch = +refs/heads/*:refs/remotes/origin/*\n"
            )
        remote = remote_from_gitdir(self.gitdir)
        assert remote is not None
        self.assertEqual("https://example.com/r.git", remote.url)

    def test_http_settings_reach_transport(self) -> None:
        with open(os.path.join(self.gitdir, "config"), "wb") as f:
            f.write(
                b'[remote "origin"]\n'
                b"\turl = https://example.com/r.git\n"
                b"[http]\n"
                b"\tsslVerify = false\n"
                b"\ttimeout = 3\n"
            )
        remote = remote_from_gitdir(self.gitdir)
        assert remote is not None
        client = TransferClient(remote)
        pool_kw = client.request.pool_manager.connection_pool_kw
        self.assertEqual("CERT_NONE", pool_kw["cert_reqs"])
        self.assertEqual(3.0, pool_kw["timeout"])
