from __future__ import annotations

from typing import Callable, Union

import pytest

CRITICAL = {0x00, 0x0A, 0x0D, 0x3D}

Checksum = Union[int, str, None]


def encode_lines(data: bytes, line: int = 128) -> list[bytes]:
    """yEnc encode data into lines of at least `line` encoded bytes."""
    lines: list[bytes] = []
    current = bytearray()
    for b in data:
        e = (b + 42) & 0xFF
        if e in CRITICAL:
            current += bytes((0x3D, (e + 64) & 0xFF))
        else:
            current.append(e)
        if len(current) >= line:
            lines.append(bytes(current))
            current = bytearray()
    if current:
        lines.append(bytes(current))
    return lines


def _hex(value: int | str) -> str:
    return value if isinstance(value, str) else f"{value:08x}"


def build_part(
    data: bytes,
    name: str = "test.bin",
    *,
    line: int = 128,
    eol: bytes = b"\r\n",
    part: int | None = None,
    total: int | None = None,
    begin: int = 1,
    header_size: int | None = None,
    size: int | None = None,
    trailer_part: int | None = None,
    pcrc32: Checksum = None,
    crc32: Checksum = None,
) -> bytes:
    """Build one framed yEnc part, with a `=ypart` line when part is given."""
    header = ["=ybegin"]
    if part is not None:
        header.append(f"part={part}")
    if total is not None:
        header.append(f"total={total}")
    header.append(f"line={line}")
    header.append(f"size={len(data) if header_size is None else header_size}")
    header.append(f"name={name}")
    out = [" ".join(header).encode("utf-8")]

    if part is not None:
        out.append(f"=ypart begin={begin} end={begin + len(data) - 1}".encode())

    out.extend(encode_lines(data, line))

    trailer = ["=yend", f"size={len(data) if size is None else size}"]
    if trailer_part is None:
        trailer_part = part
    if trailer_part is not None:
        trailer.append(f"part={trailer_part}")
    if pcrc32 is not None:
        trailer.append(f"pcrc32={_hex(pcrc32)}")
    if crc32 is not None:
        trailer.append(f"crc32={_hex(crc32)}")
    out.append(" ".join(trailer).encode())

    return eol.join(out) + eol


@pytest.fixture
def yencode() -> Callable[..., list[bytes]]:
    return encode_lines


@pytest.fixture
def yenc_part() -> Callable[..., bytes]:
    return build_part


@pytest.fixture
def all_bytes() -> bytes:
    # Every byte value, plus runs of the values that encode to critical chars.
    return bytes(range(256)) * 2 + bytes([0xD6, 0xE0, 0xE3, 0x13]) * 8
