"""
Parsing of the yEnc header, part header and trailer lines.
Copyright (C) 2013-2020  Byron Platt

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.

This program is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
GNU General Public License for more details.

You should have received a copy of the GNU General Public License
along with this program.  If not, see <http://www.gnu.org/licenses/>.
"""

import re
from collections.abc import Iterator
from typing import Any, Optional

from .types import Header, PartHeader, Trailer

BEGIN = "=ybegin"
PART = "=ypart"
END = "=yend"

_NAME = "name="

_int_re = re.compile(r"[+-]?[0-9]+")
_hex_re = re.compile(r"[0-9a-fA-F]+")


def parse_int(value: str, strict: bool = False) -> int:
    """Parse a decimal keyword value.

    Args:
        value: The value as found after the `=`.
        strict: Raise instead of defaulting when the value is invalid.

    Returns:
        The value as an integer, or 0 if it cannot be parsed and strict is
        not set.

    Raises:
        ValueError: If strict is set and the value cannot be parsed.
    """
    if not _int_re.fullmatch(value):
        if strict:
            raise ValueError(f'Invalid number "{value}"')
        return 0
    return int(value, 10)


def parse_crc32(value: str, strict: bool = False) -> Optional[int]:
    """Parse a hexadecimal CRC32 keyword value.

    Args:
        value: The value as found after the `=`.
        strict: Raise instead of returning None when the value is invalid.

    Returns:
        The CRC32 truncated to 32 bits, or None if it cannot be parsed and
        strict is not set.

    Raises:
        ValueError: If strict is set and the value cannot be parsed.
    """
    if not _hex_re.fullmatch(value):
        if strict:
            raise ValueError(f'Invalid CRC32 "{value}"')
        return None
    return int(value, 16) & 0xFFFFFFFF


def iter_keywords(text: str) -> Iterator[tuple[str, str]]:
    """Split space separated `key=value` tokens.

    Tokens without a `=` are skipped.
    """
    for token in text.split(" "):
        key, sep, value = token.strip().partition("=")
        if not sep:
            continue
        yield key, value


def _strip_marker(line: str, marker: str) -> str:
    if not line.startswith(marker):
        raise ValueError(f'Expected "{marker}" line')
    return line[len(marker) :]


def parse_header(line: str, strict: bool = False) -> Header:
    """Parse a `=ybegin` line.

    Args:
        line: The header line without its line terminator.
        strict: Raise on invalid numeric values.

    Returns:
        The header values. The name is everything after the first `name=`
        with surrounding whitespace removed, so it may contain spaces.

    Raises:
        ValueError: If the line is not a begin header or, in strict mode, a
            numeric value is invalid.

    Note: Sample header.
        =ybegin part=1 total=2 line=128 size=19338 name=joystick.jpg
    """
    text = _strip_marker(line, BEGIN)
    text, sep, name = text.partition(_NAME)
    values: dict[str, Any] = {
        "name": name.strip() if sep else "",
        "size": 0,
        "line": 0,
        "part": None,
        "total": None,
    }
    for key, value in iter_keywords(text):
        if key in ("size", "line", "part", "total"):
            values[key] = parse_int(value, strict)
    return Header(**values)


def parse_part_header(line: str, strict: bool = False) -> PartHeader:
    """Parse a `=ypart` line.

    Args:
        line: The part header line without its line terminator.
        strict: Raise on invalid numeric values.

    Returns:
        The begin and end offsets of the part within the whole file.

    Raises:
        ValueError: If the line is not a part header or, in strict mode, a
            numeric value is invalid.
    """
    text = _strip_marker(line, PART)
    values = {"begin": 0, "end": 0}
    for key, value in iter_keywords(text):
        if key in values:
            values[key] = parse_int(value, strict)
    return PartHeader(**values)


def parse_trailer(line: str, strict: bool = False) -> Trailer:
    """Parse a `=yend` line.

    Args:
        line: The trailer line without its line terminator.
        strict: Raise on invalid numeric values.

    Returns:
        The trailer values. Checksums that are absent or not valid hex are
        None.

    Raises:
        ValueError: If the line is not a trailer or, in strict mode, a
            numeric value is invalid.
    """
    text = _strip_marker(line, END)
    values: dict[str, Optional[int]] = {
        "size": 0,
        "part": None,
        "pcrc32": None,
        "crc32": None,
    }
    for key, value in iter_keywords(text):
        if key in ("size", "part"):
            values[key] = parse_int(value, strict)
        elif key in ("pcrc32", "crc32"):
            crc = parse_crc32(value, strict)
            if crc is not None:
                values[key] = crc
    return Trailer(**values)  # type: ignore[arg-type]
