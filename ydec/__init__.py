from .decoder import (
    Decoder,
    Part,
    YEncCRCError,
    YEncError,
    YEncFormatError,
    YEncNoPartsError,
    YEncOrderError,
    YEncReadError,
    YEncSizeError,
    decode,
    decode_parts,
)
from .yenc import YEnc, trailer_crc32

__all__ = [
    "Decoder",
    "Part",
    "YEnc",
    "YEncCRCError",
    "YEncError",
    "YEncFormatError",
    "YEncNoPartsError",
    "YEncOrderError",
    "YEncReadError",
    "YEncSizeError",
    "decode",
    "decode_parts",
    "trailer_crc32",
]
