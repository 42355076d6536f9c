# config.py -- Reading git configuration for LFS
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

"""Reading git configuration files.

Only the parts of the git config format LFS needs are supported: sections,
subsections, quoting, escapes, comments and line continuations. Include
directives are not followed.

The settings consulted are:

- ``remote.<name>.url`` -- repository URL the LFS endpoint is derived from
- ``http.useragent`` -- User-Agent sent with LFS requests
- ``http.extraHeader`` -- additional headers (may be given several times)
- ``http.proxy``, ``http.sslVerify``, ``http.sslCAInfo``, ``http.timeout``
  -- used when setting up the HTTP connection pool
"""

__all__ = [
    "Config",
    "ConfigDict",
    "ConfigFile",
    "read_gitdir_config",
    "remote_from_config",
    "remote_from_gitdir",
]

import os
from collections.abc import Iterator
from typing import IO

from .http import Remote, default_user_agent_string
from .log_utils import getLogger

logger = getLogger(__name__)

Section = tuple[bytes, ...]
SectionLike = bytes | str | tuple[bytes | str, ...]
NameLike = bytes | str


class Config:
    """A Git configuration."""

    def get(self, section: SectionLike, name: NameLike) -> bytes:
        """Retrieve the contents of a configuration setting.

        Args:
          section: Tuple with section name and optional subsection name
          name: Variable name
        Returns:
          Contents of the setting
        Raises:
          KeyError: if the value is not set
        """
        raise NotImplementedError(self.get)

    def get_multivar(self, section: SectionLike, name: NameLike) -> Iterator[bytes]:
        """Retrieve every value of a setting that may be given several times.

        Raises:
          KeyError: if the value is not set
        """
        raise NotImplementedError(self.get_multivar)

    def get_boolean(
        self, section: SectionLike, name: NameLike, default: bool | None = None
    ) -> bool | None:
        """Retrieve a configuration setting as boolean.

        Returns: the value, or default if the setting is missing
        Raises:
          ValueError: if the value is not a recognized boolean
        """
        try:
            value = self.get(section, name)
        except KeyError:
            return default
        if value.lower() in (b"true", b"yes", b"on", b"1"):
            return True
        if value.lower() in (b"false", b"no", b"off", b"0", b""):
            return False
        raise ValueError(f"not a valid boolean string: {value!r}")

    def sections(self) -> Iterator[Section]:
        """Iterate over the sections."""
        raise NotImplementedError(self.sections)

    def has_section(self, name: Section) -> bool:
        """Check if a specified section exists."""
        return name in self.sections()


def _normalize_section(section: SectionLike, encoding: str) -> Section:
    if not isinstance(section, tuple):
        section = (section,)
    parts = [p.encode(encoding) if isinstance(p, str) else p for p in section]
    # Section names are case-insensitive, subsection names are not.
    return (parts[0].lower(), *parts[1:])


def _normalize_name(name: NameLike, encoding: str) -> bytes:
    if isinstance(name, str):
        name = name.encode(encoding)
    return name.lower()


class ConfigDict(Config):
    """Git configuration stored in a dictionary."""

    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding
        self._values: dict[Section, dict[bytes, list[bytes]]] = {}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._values!r})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, self.__class__) and other._values == self._values

    def _lookup(self, section: SectionLike, name: NameLike) -> list[bytes]:
        checked = _normalize_section(section, self.encoding)
        key = _normalize_name(name, self.encoding)
        if len(checked) > 1:
            try:
                return self._values[checked][key]
            except KeyError:
                pass
        return self._values[checked[:1]][key]

    def get(self, section: SectionLike, name: NameLike) -> bytes:
        return self._lookup(section, name)[-1]

    def get_multivar(self, section: SectionLike, name: NameLike) -> Iterator[bytes]:
        return iter(list(self._lookup(section, name)))

    def set(
        self, section: SectionLike, name: NameLike, value: bytes | str | bool
    ) -> None:
        """Set a configuration value, replacing any existing values."""
        checked = _normalize_section(section, self.encoding)
        if isinstance(value, bool):
            value = b"true" if value else b"false"
        if isinstance(value, str):
            value = value.encode(self.encoding)
        self._values.setdefault(checked, {})[_normalize_name(name, self.encoding)] = [
            value
        ]

    def add(self, section: SectionLike, name: NameLike, value: bytes) -> None:
        """Add another value to a setting."""
        checked = _normalize_section(section, self.encoding)
        self._values.setdefault(checked, {}).setdefault(
            _normalize_name(name, self.encoding), []
        ).append(value)

    def sections(self) -> Iterator[Section]:
        return iter(list(self._values))


_ESCAPE_TABLE = {
    ord(b"\\"): ord(b"\\"),
    ord(b'"'): ord(b'"'),
    ord(b"n"): ord(b"\n"),
    ord(b"t"): ord(b"\t"),
    ord(b"b"): ord(b"\b"),
}
_COMMENT_CHARS = (ord(b"#"), ord(b";"))
_WHITESPACE_CHARS = (ord(b"\t"), ord(b" "))


def _parse_string(value: bytes) -> bytes:
    """Unquote and unescape a value, dropping any trailing comment."""
    raw = bytearray(value.strip())
    ret = bytearray()
    pending_space = bytearray()
    in_quotes = False
    i = 0
    while i < len(raw):
        c = raw[i]
        if c == ord(b"\\") and i + 1 < len(raw) and raw[i + 1] in _ESCAPE_TABLE:
            ret += pending_space
            pending_space.clear()
            ret.append(_ESCAPE_TABLE[raw[i + 1]])
            i += 2
            continue
        if c == ord(b'"'):
            in_quotes = not in_quotes
        elif c in _COMMENT_CHARS and not in_quotes:
            break
        elif c in _WHITESPACE_CHARS and not in_quotes:
            pending_space.append(c)
        else:
            ret += pending_space
            pending_space.clear()
            ret.append(c)
        i += 1
    if in_quotes:
        raise ValueError("missing end quote")
    return bytes(ret)


def _strip_comments(line: bytes) -> bytes:
    in_quotes = False
    for i, c in enumerate(line):
        if c == ord(b'"'):
            in_quotes = not in_quotes
        elif not in_quotes and c in _COMMENT_CHARS:
            return line[:i]
    return line


def _valid_name(name: bytes, extra: bytes) -> bool:
    return bool(name) and all(
        chr(c).isalnum() or bytes([c]) in extra for c in name
    )


def _parse_section_header(line: bytes) -> tuple[Section, bytes]:
    """Parse ``[section "subsection"]``, returning the rest of the line."""
    line = _strip_comments(line).rstrip()
    end = line.find(b"]", line.rfind(b'"') + 1 if b'"' in line else 0)
    if end == -1:
        raise ValueError(f"expected trailing ] in {line!r}")
    header, rest = line[1:end], line[end + 1 :]
    name, _, sub = header.partition(b" ")
    if sub:
        if not (sub.startswith(b'"') and sub.endswith(b'"') and len(sub) >= 2):
            raise ValueError(f"Invalid subsection {sub!r}")
        if not _valid_name(name, b"-."):
            raise ValueError(f"invalid section name {name!r}")
        return (name.lower(), sub[1:-1].replace(b'\\"', b'"')), rest
    if not _valid_name(name, b"-."):
        raise ValueError(f"invalid section name {name!r}")
    # Deprecated [section.subsection] syntax.
    name, dot, sub = name.partition(b".")
    if dot:
        return (name.lower(), sub), rest
    return (name.lower(),), rest


def _continues(value: bytes) -> bool:
    """Check whether a raw value ends in an unescaped backslash."""
    stripped = value.rstrip(b"\r\n")
    trailing = len(stripped) - len(stripped.rstrip(b"\\"))
    return trailing % 2 == 1


class ConfigFile(ConfigDict):
    """A Git configuration file, like .git/config or ~/.gitconfig."""

    def __init__(self, encoding: str = "utf-8") -> None:
        super().__init__(encoding=encoding)
        self.path: str | None = None

    @classmethod
    def from_file(cls, f: IO[bytes]) -> "ConfigFile":
        """Read configuration from a file-like object.

        Raises:
          ValueError: on a syntax error
        """
        ret = cls()
        section: Section | None = None
        setting: bytes | None = None
        pending = b""
        for lineno, line in enumerate(f.readlines()):
            if lineno == 0 and line.startswith(b"\xef\xbb\xbf"):
                line = line[3:]
            if setting is not None:
                pending += line
            else:
                line = line.lstrip()
                if line[:1] == b"[":
                    section, line = _parse_section_header(line)
                    ret._values.setdefault(section, {})
                if _strip_comments(line).strip() == b"":
                    continue
                if section is None:
                    raise ValueError(f"setting {line!r} without section")
                name, eq, value = line.partition(b"=")
                setting = name.strip()
                if not _valid_name(setting, b"-"):
                    raise ValueError(f"invalid variable name {setting!r}")
                pending = value if eq else b"true"
            if _continues(pending):
                pending = pending.rstrip(b"\r\n")[:-1]
                continue
            assert section is not None
            ret._values[section].setdefault(setting.lower(), []).append(
                _parse_string(pending)
            )
            setting = None
            pending = b""
        return ret

    @classmethod
    def from_path(cls, path: str | os.PathLike[str]) -> "ConfigFile":
        """Read configuration from a file on disk."""
        with open(path, "rb") as f:
            ret = cls.from_file(f)
            ret.path = os.fspath(path)
            return ret


def _https_url(url: str) -> str:
    """Turn an scp-style ``git@host:path`` URL into an HTTPS one."""
    if "://" not in url and "@" in url.split(":", 1)[0] and ":" in url:
        host, path = url.split("@", 1)[1].split(":", 1)
        return f"https://{host}/{path}"
    return url


def remote_from_config(config: Config, remote_name: str = "origin") -> Remote | None:
    """Derive LFS connection settings from git configuration.

    Args:
      config: Git configuration
      remote_name: Remote whose URL the LFS endpoint is derived from
    Returns: a Remote, or None when the remote has no URL configured
    """
    try:
        url = config.get((b"remote", remote_name.encode("utf-8")), b"url")
    except KeyError:
        return None

    try:
        user_agent = config.get(b"http", b"useragent").decode("utf-8").strip()
    except KeyError:
        user_agent = ""
    if not user_agent:
        user_agent = default_user_agent_string()

    headers: dict[str, str] = {}
    try:
        extra_headers = list(config.get_multivar(b"http", b"extraHeader"))
    except KeyError:
        extra_headers = []
    for extra_header in extra_headers:
        name, sep, value = extra_header.decode("utf-8", errors="replace").partition(
            ": "
        )
        if not sep or not name:
            logger.warning("Ignoring invalid http.extraHeader value %r", extra_header)
            continue
        headers[name] = value

    return Remote(
        url=_https_url(url.decode("utf-8")),
        headers=headers,
        user_agent=user_agent,
        config=config,
    )


def read_gitdir_config(gitdir: str) -> ConfigFile | None:
    """Read ``<gitdir>/config``, or return None if there is none."""
    try:
        return ConfigFile.from_path(os.path.join(gitdir, "config"))
    except FileNotFoundError:
        return None


def remote_from_gitdir(gitdir: str, remote_name: str = "origin") -> Remote | None:
    """Read ``<gitdir>/config`` and derive LFS connection settings from it."""
    config = read_gitdir_config(gitdir)
    if config is None:
        return None
    return remote_from_config(config, remote_name)
