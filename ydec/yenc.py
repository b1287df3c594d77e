"""
Basic yEnc line decoder.
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

from __future__ import annotations

import zlib

from .utils import parse_trailer

__all__ = ["ESCAPE", "trailer_crc32", "YEnc"]


ESCAPE = 0x3D


def trailer_crc32(trailer: bytes) -> int | None:
    """Extract the whole file CRC32 value from a `=yend` line.

    Raises:
        ValueError: If the line is not a yEnc trailer.
    """
    line = trailer.rstrip(b"\r\n").decode("utf-8", "surrogateescape")
    return parse_trailer(line).crc32


class YEnc:
    """A basic yEnc decoder.

    Keeps track of the CRC32 value as data is decoded. An escape character
    at the end of a line applies to the first byte of the next line, so one
    instance must be used for all the lines of a part.
    """

    def __init__(self) -> None:
        self.crc32 = 0
        self.escape = False

    def decode(self, buf: bytes) -> bytes:
        """Decode one line with its line terminator already removed."""
        data = bytearray()
        for b in buf:
            if self.escape:
                b = (((b - 42) & 0xFF) - 64) & 0xFF
                self.escape = False
            elif b == ESCAPE:
                self.escape = True
                continue
            else:
                b = (b - 42) & 0xFF
            data.append(b)
        decoded = bytes(data)
        self.crc32 = zlib.crc32(decoded, self.crc32)
        return decoded
