from typing import NamedTuple, Optional


class Header(NamedTuple):
    """Values of a `=ybegin` line."""

    name: str
    size: int
    line: int
    part: Optional[int]
    total: Optional[int]


class PartHeader(NamedTuple):
    """Values of a `=ypart` line."""

    begin: int
    end: int


class Trailer(NamedTuple):
    """Values of a `=yend` line.

    `pcrc32` and `crc32` are None when absent or not valid hex; a missing
    checksum means the check is skipped.
    """

    size: int
    part: Optional[int]
    pcrc32: Optional[int]
    crc32: Optional[int]
