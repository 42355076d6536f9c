# log_utils.py -- Logging configuration for lfsclient
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

"""Logging utilities for lfsclient.

lfsclient is a library, so by default nothing it logs is shown: a no-op
handler is attached to the ``lfsclient`` logger. Applications either call
:func:`default_logging_config` or configure logging themselves, optionally
calling :func:`remove_null_handler` first.

Modules only need ``getLogger``, which is re-exported here.
"""

import logging
import os
import sys
from collections.abc import Mapping

getLogger = logging.getLogger

TRACE_FORMAT = "%(asctime)s %(name)s %(levelname)s: %(message)s"


class _NullHandler(logging.Handler):
    """Handler that drops every record."""

    def emit(self, record: logging.LogRecord) -> None:
        pass


_NULL_HANDLER = _NullHandler()
_LFSCLIENT_LOGGER = getLogger("lfsclient")
_LFSCLIENT_LOGGER.addHandler(_NULL_HANDLER)


def parse_trace_target(value: str | None) -> str | int | None:
    """Interpret a GIT_TRACE value.

    Args:
      value: Raw environment value, or None if unset
    Returns:
      None when tracing is off, 2 for stderr, an int 3-9 for a file
      descriptor, or an absolute path (file or directory)
    """
    if not value or value.lower() in ("0", "false"):
        return None
    if value.lower() in ("1", "2", "true"):
        return 2
    if value.isdigit() and 3 <= int(value) <= 9:
        return int(value)
    if os.path.isabs(value):
        return value
    return None


def configure_trace(environ: Mapping[str, str] | None = None) -> bool:
    """Send debug output to the target named by GIT_TRACE.

    Returns: True if tracing was configured
    """
    if environ is None:
        environ = os.environ
    target = parse_trace_target(environ.get("GIT_TRACE"))
    if target is None:
        return False

    if target == 2:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr, format=TRACE_FORMAT)
        return True

    try:
        if isinstance(target, int):
            stream = os.fdopen(target, "w", buffering=1)
            logging.basicConfig(level=logging.DEBUG, stream=stream, format=TRACE_FORMAT)
        else:
            if os.path.isdir(target):
                target = os.path.join(target, f"trace.{os.getpid()}")
            logging.basicConfig(
                level=logging.DEBUG, filename=target, filemode="a", format=TRACE_FORMAT
            )
    except OSError as e:
        sys.stderr.write(f"Warning: unable to open GIT_TRACE target {target}: {e}\n")
        return False
    return True


def default_logging_config() -> None:
    """Set up logging for applications using lfsclient.

    GIT_TRACE takes precedence; otherwise INFO and above go to stderr.
    """
    remove_null_handler()
    if not configure_trace():
        logging.basicConfig(
            level=logging.INFO,
            stream=sys.stderr,
            format="%(asctime)s %(levelname)s: %(message)s",
        )


def remove_null_handler() -> None:
    """Detach the no-op handler from the lfsclient logger."""
    _LFSCLIENT_LOGGER.removeHandler(_NULL_HANDLER)
