"""
A yEnc decoder for single and multipart streams.
Copyright (C) 2013-2023  Byron Platt

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

import io
import logging
import zlib
from dataclasses import dataclass
from typing import BinaryIO, Optional, Union

from . import utils
from .fifo import DEFAULT_CHUNK_SIZE, LineReader
from .yenc import YEnc

__all__ = [
    "Decoder",
    "Part",
    "YEncCRCError",
    "YEncError",
    "YEncFormatError",
    "YEncNoPartsError",
    "YEncOrderError",
    "YEncReadError",
    "YEncSizeError",
    "decode",
    "decode_parts",
]

log = logging.getLogger(__name__)

Source = Union[BinaryIO, bytes, bytearray]


class YEncError(Exception):
    """Base class for all yEnc errors."""


class YEncFormatError(YEncError):
    """yEnc format error.

    Format errors are raised when the stream ends in the middle of a part or,
    in strict mode, when a header value cannot be parsed.
    """


class YEncReadError(YEncFormatError):
    """Raised when reading from the source fails in the middle of a part."""


class YEncOrderError(YEncError):
    """yEnc ordering error.

    Raised when the part number of a trailer does not match the part number
    given by the header of the same part.
    """

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(expected, actual)

    def __str__(self) -> str:
        return "=yend out of order expected part %d got %d" % (
            self.expected,
            self.actual,
        )


class YEncSizeError(YEncError):
    """Raised when the decoded size of a part differs from its trailer."""

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(expected, actual)

    def __str__(self) -> str:
        return "Body size %d did not match expected size %d" % (
            self.actual,
            self.expected,
        )


class YEncCRCError(YEncError):
    """yEnc CRC error.

    Raised when the CRC32 of a part (number is set) or of the whole stream
    (number is None) differs from the one given in the trailer.
    """

    def __init__(self, expected: int, actual: int, number: Optional[int] = None) -> None:
        self.expected = expected
        self.actual = actual
        self.number = number
        super().__init__(expected, actual, number)

    def __str__(self) -> str:
        if self.number is None:
            return "CRC check failed expected %08x got %08x" % (
                self.expected,
                self.actual,
            )
        return "CRC check failed for part %d expected %08x got %08x" % (
            self.number,
            self.expected,
            self.actual,
        )


class YEncNoPartsError(YEncError):
    """Raised when a stream holds no yEnc parts at all."""


@dataclass
class Part:
    """A decoded yEnc part.

    The multipart fields (number, begin, end and name) are what a caller
    needs to write the body into the right place of the whole file. `pcrc32`
    is the CRC32 given by the trailer and `crc32` the one of the decoded body.
    """

    number: int = 0
    header_size: int = 0
    size: int = 0
    begin: int = 0
    end: int = 0
    name: str = ""
    line_length: int = 0
    pcrc32: Optional[int] = None
    crc32: int = 0
    body: bytes = b""

    def validate(self) -> None:
        """Check the body against the size and CRC32 of the trailer.

        Raises:
            YEncSizeError: If the body length differs from the trailer size.
            YEncCRCError: If the trailer gave a part CRC32 that differs from
                the CRC32 of the body.
        """
        if len(self.body) != self.size:
            raise YEncSizeError(self.size, len(self.body))
        if self.pcrc32 is not None and self.pcrc32 != self.crc32:
            raise YEncCRCError(self.pcrc32, self.crc32, self.number)


class Decoder:
    """yEnc decoder session.

    A decoder reads a single stream once. Parts are decoded in the order
    they appear and each is validated as soon as its trailer is read.
    """

    encoding = "utf-8"
    errors = "surrogateescape"

    def __init__(
        self,
        source: Source,
        strict: bool = False,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        """Constructor for Decoder.

        Args:
            source: A binary file-like object or the encoded data as bytes.
            strict: Raise YEncFormatError for header and trailer values that
                cannot be parsed instead of defaulting them.
            chunk_size: Number of bytes requested per read of the source.
        """
        if isinstance(source, (bytes, bytearray)):
            source = io.BytesIO(source)
        self.reader = LineReader(source, chunk_size)
        self.strict = strict
        self.multipart = False
        self.total = 0
        self.parts: list[Part] = []
        self.part = Part()
        self.expected_crc32: Optional[int] = None
        self.crc32 = 0
        self.yenc = YEnc()

    def _readline(self) -> Optional[bytes]:
        """Read a line with trailing CR and LF characters removed.

        Returns:
            The line, or None at end of stream.

        Raises:
            YEncReadError: If reading from the source fails.
        """
        try:
            line = self.reader.readline()
        except OSError as e:
            raise YEncReadError("Failed to read from source") from e
        if not line:
            return None
        return line.rstrip(b"\r\n")

    def _text(self, line: bytes) -> str:
        return line.decode(self.encoding, self.errors)

    def read_header(self) -> bool:
        """Find and parse the next `=ybegin` line into the active part.

        Returns:
            False if the stream ended (or could not be read) before a header
            was found, otherwise True.

        Raises:
            YEncFormatError: In strict mode if a header value is invalid.
        """
        while True:
            try:
                line = self._readline()
            except YEncReadError as e:
                log.debug("Treating read failure as end of stream: %s", e.__cause__)
                return False
            if line is None:
                return False
            if line.startswith(b"=ybegin"):
                break

        try:
            header = utils.parse_header(self._text(line), self.strict)
        except ValueError as e:
            raise YEncFormatError(f"Bad yEnc header: {e}")

        self.part.name = header.name
        self.part.header_size = header.size
        self.part.line_length = header.line
        if header.part is not None:
            self.part.number = header.part
            self.multipart = True
        if header.total is not None:
            self.total = header.total
        log.debug("Found part %d of %r", self.part.number, self.part.name)
        return True

    def read_part_header(self) -> None:
        """Find and parse the next `=ypart` line into the active part.

        Raises:
            YEncFormatError: If the stream ends before a part header is found
                or, in strict mode, a part header value is invalid.
        """
        while True:
            line = self._readline()
            if line is None:
                raise YEncFormatError("Missing yEnc part header")
            if line.startswith(b"=ypart"):
                break

        try:
            part_header = utils.parse_part_header(self._text(line), self.strict)
        except ValueError as e:
            raise YEncFormatError(f"Bad yEnc part header: {e}")

        self.part.begin = part_header.begin
        self.part.end = part_header.end

    def read_body(self) -> None:
        """Decode the lines of the active part up to and including its trailer.

        Raises:
            YEncFormatError: If the stream ends before the trailer.
            YEncOrderError: If the trailer part number differs from the header.
        """
        body = bytearray()
        self.yenc = YEnc()
        while True:
            line = self._readline()
            if line is None:
                raise YEncFormatError("Missing yEnc trailer")
            if line.startswith(b"=yend"):
                break
            data = self.yenc.decode(line)
            self.crc32 = zlib.crc32(data, self.crc32)
            body += data

        self.part.body = bytes(body)
        self.part.crc32 = self.yenc.crc32
        self.parse_trailer(line)

    def parse_trailer(self, line: bytes) -> None:
        """Apply a `=yend` line to the active part and the session."""
        try:
            trailer = utils.parse_trailer(self._text(line), self.strict)
        except ValueError as e:
            raise YEncFormatError(f"Bad yEnc trailer: {e}")

        self.part.size = trailer.size
        if trailer.pcrc32 is not None:
            self.part.pcrc32 = trailer.pcrc32
        if trailer.crc32 is not None:
            self.expected_crc32 = trailer.crc32
        if trailer.part is not None and trailer.part != self.part.number:
            raise YEncOrderError(self.part.number, trailer.part)

    def run(self) -> None:
        """Decode and validate parts until the stream is exhausted."""
        while True:
            self.part = Part()
            if not self.read_header():
                return
            if self.multipart:
                self.read_part_header()
            self.read_body()
            self.parts.append(self.part)
            log.debug(
                "Decoded part %d, %d bytes at %d-%d",
                self.part.number,
                len(self.part.body),
                self.part.begin,
                self.part.end,
            )
            self.part.validate()

    def validate(self) -> None:
        """Check the whole stream CRC32 if a trailer gave one.

        Raises:
            YEncCRCError: If the CRC32 of all decoded data differs.
        """
        if self.expected_crc32 is not None and self.expected_crc32 != self.crc32:
            raise YEncCRCError(self.expected_crc32, self.crc32)

    def decode_parts(self) -> list[Part]:
        """Decode all parts of the stream.

        Returns:
            The parts in the order they appear in the stream.

        Raises:
            YEncError: If any part is malformed or fails validation, or if
                there are no parts at all.
        """
        self.run()
        if not self.parts:
            raise YEncNoPartsError("no yEnc parts found")

        # Only a complete set can be checked against the whole file CRC32.
        # Completeness is assumed when the part count equals the number of
        # the last part, `total` is not consulted.
        if not self.multipart or len(self.parts) == self.parts[-1].number:
            self.validate()
        else:
            log.debug(
                "Skipping CRC check, %d parts decoded and last part is %d of %d",
                len(self.parts),
                self.parts[-1].number,
                self.total,
            )
        return self.parts

    def decode(self) -> Part:
        """Decode the stream and return its first part."""
        return self.decode_parts()[0]


def decode(
    source: Source,
    strict: bool = False,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> Part:
    """Decode a yEnc stream.

    Args:
        source: A binary file-like object or the encoded data as bytes.
        strict: Reject header and trailer values that cannot be parsed.
        chunk_size: Number of bytes requested per read of the source.

    Returns:
        The first part found in the stream.

    Raises:
        YEncError: If the stream cannot be decoded or fails validation.
    """
    return Decoder(source, strict, chunk_size).decode()


def decode_parts(
    source: Source,
    strict: bool = False,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> list[Part]:
    """Decode a yEnc stream holding one or more concatenated parts.

    See decode() for the arguments and exceptions.

    Returns:
        Every part found in the stream in stream order.
    """
    return Decoder(source, strict, chunk_size).decode_parts()
