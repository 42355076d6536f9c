# __init__.py -- The tests for lfsclient
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

"""Tests for lfsclient."""

__all__ = [
    "AsyncTestCase",
    "SkipTest",
    "TestCase",
    "skipIf",
]

import os
import unittest
from unittest import SkipTest, skipIf


class _IsolatedEnvironment:
    """Point HOME somewhere harmless and hide proxy settings."""

    _HIDDEN = (
        "GIT_TRACE",
        "LFS_PASSWORD",
        "http_proxy",
        "https_proxy",
        "all_proxy",
        "no_proxy",
        "NO_PROXY",
    )

    def _isolate_environment(self) -> None:
        saved = {name: os.environ.get(name) for name in ("HOME", *self._HIDDEN)}
        os.environ["HOME"] = "/nonexistent"
        for name in self._HIDDEN:
            os.environ.pop(name, None)
        self.addCleanup(self._restore_environment, saved)  # type: ignore[attr-defined]

    @staticmethod
    def _restore_environment(saved: dict[str, str | None]) -> None:
        for name, value in saved.items():
            if value is None:
                os.environ.pop(name, None)
            else:
                os.environ[name] = value


class TestCase(_IsolatedEnvironment, unittest.TestCase):
    def setUp(self) -> None:
        super().setUp()
        self._isolate_environment()


class AsyncTestCase(_IsolatedEnvironment, unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        super().setUp()
        self._isolate_environment()
