"""
A reasonably efficient FIFO buffer and a line reader built on it.
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

from typing import TYPE_CHECKING, BinaryIO

if TYPE_CHECKING:
    from typing_extensions import Self

__all__ = ["BytesFifo", "LineReader"]


_DISCARD_SIZE = 0xFFFF

DEFAULT_CHUNK_SIZE = 0x10000


class BytesFifo:
    empty = b""
    eol = b"\n"

    def __init__(self, data: bytes | None = None) -> None:
        self.buf = data or self.empty
        self.buflist: list[bytes] = []
        self.pos = 0

    def __len__(self) -> int:
        return len(self.buf) - self.pos + sum(len(b) for b in self.buflist)

    def __discard(self) -> None:
        if self.pos > _DISCARD_SIZE:
            self.buf = self.buf[self.pos :]
            self.pos = 0

    def __append(self) -> None:
        if self.buflist:
            self.buf += self.empty.join(self.buflist)
            self.buflist = []

    def clear(self) -> None:
        self.buf = self.empty
        self.buflist = []
        self.pos = 0

    def write(self, data: bytes) -> None:
        self.buflist.append(data)

    def read(self, length: int = 0) -> bytes:
        self.__append()
        if 0 < length < len(self):
            newpos = self.pos + length
            data = self.buf[self.pos : newpos]
            self.pos = newpos
            self.__discard()
            return data
        data = self.buf[self.pos :]
        self.clear()
        return data

    def readline(self) -> bytes:
        """Read a complete line including its terminator.

        Returns an empty bytes object when the buffer holds no complete line.
        """
        self.__append()
        i = self.buf.find(self.eol, self.pos)
        if i < 0:
            return self.empty
        newpos = i + len(self.eol)
        data = self.buf[self.pos : newpos]
        self.pos = newpos
        self.__discard()
        return data


class LineReader:
    """Pull LF terminated lines from a binary source.

    The source is read in chunks into a BytesFifo. yEnc data lines may hold
    any byte except LF so nothing but the terminator is significant here.
    """

    def __init__(self, source: BinaryIO, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.source = source
        self.chunk_size = chunk_size
        self.fifo = BytesFifo()
        self.eof = False

    def __iter__(self) -> Self:
        return self

    def __next__(self) -> bytes:
        line = self.readline()
        if not line:
            raise StopIteration
        return line

    def _fill(self) -> None:
        chunk = self.source.read(self.chunk_size)
        if not chunk:
            self.eof = True
            return
        self.fifo.write(bytes(chunk))

    def readline(self) -> bytes:
        """Read the next line including its terminator.

        Returns:
            The next line. The final line of the source is returned even when
            it is not terminated. An empty bytes object means end of stream.

        Raises:
            OSError: If reading from the source fails.
        """
        while True:
            line = self.fifo.readline()
            if line:
                return line
            if self.eof:
                return self.fifo.read()
            self._fill()
