# cli.py -- Command-line interface to lfsclient
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

"""Simple command-line interface to lfsclient.

Mostly useful to poke at an LFS server by hand:

  lfsclient pointer FILE       print the pointer for a file
  lfsclient check FILE         exit with 0 if FILE is a pointer
  lfsclient fetch POINTER      download the object a pointer refers to
  lfsclient push FILE          upload a file and print its pointer
"""

__all__ = ["Command", "main"]

import argparse
import asyncio
import logging
import os
import sys
from collections.abc import Sequence

from .config import read_gitdir_config, remote_from_gitdir
from .errors import LFSError
from .http import BasicAuth, Remote
from .log_utils import configure_trace
from .pointer import LFSPointer, build_info, encode, is_pointer
from .transfer import CACHE_WRITE_FAILURE_RAISE, ProgressEvent, TransferClient

logger = logging.getLogger(__name__)


def _read_file(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()


def _add_remote_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--gitdir", default=".git", help="Git control directory (default: .git)"
    )
    parser.add_argument(
        "--url", help="Repository URL (default: from remote.origin.url)"
    )
    parser.add_argument("--username", help="Username for basic authentication")
    parser.add_argument(
        "--password",
        default=os.environ.get("LFS_PASSWORD"),
        help="Password for basic authentication (default: $LFS_PASSWORD)",
    )


def _remote_from_args(args: argparse.Namespace) -> Remote | None:
    if args.url:
        remote = Remote(args.url, config=read_gitdir_config(args.gitdir))
    else:
        remote = remote_from_gitdir(args.gitdir)
        if remote is None:
            return None
    if args.username:
        remote.auth = BasicAuth(args.username, args.password or "")
    return remote


def _log_progress(event: ProgressEvent) -> None:
    logger.info("%s %s", event.phase, event.oid)


class Command:
    """An lfsclient subcommand."""

    def run(self, args: Sequence[str]) -> int | None:
        """Run the command."""
        raise NotImplementedError(self.run)


class cmd_pointer(Command):
    """Print the LFS pointer for a file."""

    def run(self, args: Sequence[str]) -> int | None:
        parser = argparse.ArgumentParser(prog="lfsclient pointer")
        parser.add_argument("path", help="File to compute the pointer for")
        parsed_args = parser.parse_args(args)
        sys.stdout.buffer.write(encode(build_info(_read_file(parsed_args.path))))
        return 0


class cmd_check(Command):
    """Check whether a file is an LFS pointer."""

    def run(self, args: Sequence[str]) -> int | None:
        parser = argparse.ArgumentParser(prog="lfsclient check")
        parser.add_argument("path", help="File to check")
        parsed_args = parser.parse_args(args)
        return 0 if is_pointer(_read_file(parsed_args.path)) else 1


class cmd_fetch(Command):
    """Download the object an LFS pointer file refers to into the cache."""

    def run(self, args: Sequence[str]) -> int | None:
        parser = argparse.ArgumentParser(prog="lfsclient fetch")
        parser.add_argument("path", help="Pointer file")
        _add_remote_arguments(parser)
        parsed_args = parser.parse_args(args)

        remote = _remote_from_args(parsed_args)
        if remote is None:
            logger.error("No LFS remote configured; use --url")
            return 1
        try:
            pointer = LFSPointer.from_bytes(
                parsed_args.gitdir, _read_file(parsed_args.path)
            )
            client = TransferClient(
                remote,
                progress=_log_progress,
                cache_write_failure=CACHE_WRITE_FAILURE_RAISE,
            )
            asyncio.run(client.download(pointer))
        except LFSError as e:
            logger.error("%s", e)
            return 1
        if not os.path.exists(pointer.object_path):
            logger.error("LFS object was not stored at %s", pointer.object_path)
            return 1
        print(pointer.object_path)
        return 0


class cmd_push(Command):
    """Upload a file to the LFS server and print its pointer."""

    def run(self, args: Sequence[str]) -> int | None:
        parser = argparse.ArgumentParser(prog="lfsclient push")
        parser.add_argument("path", help="File to upload")
        _add_remote_arguments(parser)
        parsed_args = parser.parse_args(args)

        remote = _remote_from_args(parsed_args)
        if remote is None:
            logger.error("No LFS remote configured; use --url")
            return 1
        client = TransferClient(remote, progress=_log_progress)
        try:
            info = asyncio.run(client.upload(_read_file(parsed_args.path)))
        except LFSError as e:
            logger.error("%s", e)
            return 1
        sys.stdout.buffer.write(encode(info))
        return 0


commands = {
    "check": cmd_check,
    "fetch": cmd_fetch,
    "pointer": cmd_pointer,
    "push": cmd_push,
}


def main(argv: Sequence[str] | None = None) -> int | None:
    """Main entry point for the lfsclient CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code or None
    """
    if argv is None:
        argv = sys.argv[1:]

    if not argv or argv[0] in ("-h", "--help"):
        print("usage: lfsclient <command> [<args>]")
        print(f"Available commands: {', '.join(sorted(commands))}")
        return 1

    if not configure_trace():
        logging.basicConfig(level=logging.INFO, format="%(message)s")

    cmd, cmd_args = argv[0], argv[1:]
    try:
        cmd_kls = commands[cmd]
    except KeyError:
        logging.fatal("No such subcommand: %s", cmd)
        return 1
    return cmd_kls().run(cmd_args)


def _main() -> None:
    sys.exit(main())


if __name__ == "__main__":
    _main()
