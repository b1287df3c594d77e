import io

import pytest

from ydec.fifo import BytesFifo, LineReader


def test_fifo_readline() -> None:
    fifo = BytesFifo(b"one\ntwo\r\nthr")
    assert fifo.readline() == b"one\n"
    assert fifo.readline() == b"two\r\n"
    assert fifo.readline() == b""
    fifo.write(b"ee\n")
    assert fifo.readline() == b"three\n"
    assert len(fifo) == 0


def test_fifo_read() -> None:
    fifo = BytesFifo()
    fifo.write(b"abc")
    fifo.write(b"def")
    assert len(fifo) == 6
    assert fifo.read(2) == b"ab"
    assert fifo.read() == b"cdef"
    assert fifo.read() == b""


@pytest.mark.parametrize("chunk_size", [1, 3, 0x10000])
def test_line_reader(chunk_size: int) -> None:
    source = io.BytesIO(b"=ybegin a\r\n\n=\xff\x00data\nlast")
    reader = LineReader(source, chunk_size)
    assert list(reader) == [b"=ybegin a\r\n", b"\n", b"=\xff\x00data\n", b"last"]
    assert reader.readline() == b""


def test_line_reader_empty() -> None:
    assert LineReader(io.BytesIO(b"")).readline() == b""


def test_line_reader_chunk_size() -> None:
    with pytest.raises(ValueError, match="chunk_size"):
        LineReader(io.BytesIO(b""), 0)
