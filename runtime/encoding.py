"""Byte-level text encoding detection with lossless round-trips."""

from __future__ import annotations

import codecs
from typing import Optional

from models.encoding import UTF8_PLAIN, DecodedText, EncodingName, TextEncoding

_BOMS = {
    "utf8": codecs.BOM_UTF8,
    "utf16le": codecs.BOM_UTF16_LE,
    "utf16be": codecs.BOM_UTF16_BE,
}
# A UTF-16LE BOM read as UTF-8 and written back becomes two U+FFFD characters.
CORRUPT_UTF16LE_PREFIX = b"\xef\xbf\xbd\xef\xbf\xbd"

SAMPLE_BYTES = 4096
ZERO_RATIO_THRESHOLD = 0.25
DOMINANCE_THRESHOLD = 1.7
_MIN_HEURISTIC_BYTES = 8


def detect_utf16_without_bom(data: bytes) -> Optional[EncodingName]:
    """Guess UTF-16 byte order from the parity of zero bytes in a sample."""
    if len(data) < _MIN_HEURISTIC_BYTES:
        return None
    sample = data[:SAMPLE_BYTES]
    even = sample[0::2]
    odd = sample[1::2]
    even_ratio = even.count(0) / len(even) if even else 0.0
    odd_ratio = odd.count(0) / len(odd) if odd else 0.0

    if odd_ratio > ZERO_RATIO_THRESHOLD and odd_ratio > even_ratio * DOMINANCE_THRESHOLD:
        return "utf16le"
    if even_ratio > ZERO_RATIO_THRESHOLD and even_ratio > odd_ratio * DOMINANCE_THRESHOLD:
        return "utf16be"
    return None


def _decode_utf16(data: bytes, codec: str) -> str:
    if len(data) % 2 == 0:
        return data.decode(codec, errors="replace")
    return data[:-1].decode(codec, errors="replace") + "\ufffd"


def _decode_body(data: bytes, name: EncodingName) -> str:
    if name == "utf16le":
        return _decode_utf16(data, "utf-16-le")
    if name == "utf16be":
        return _decode_utf16(data, "utf-16-be")
    return data.decode("utf-8", errors="replace")


def detect_encoding(data: bytes) -> TextEncoding:
    for name, bom in _BOMS.items():
        if data.startswith(bom):
            return TextEncoding(name=name, bom=True)
    guessed = detect_utf16_without_bom(data)
    if guessed:
        return TextEncoding(name=guessed, bom=False)
    return UTF8_PLAIN


def _recover_corrupt_utf16le(data: bytes) -> Optional[DecodedText]:
    if not data.startswith(CORRUPT_UTF16LE_PREFIX):
        return None
    body = data[len(CORRUPT_UTF16LE_PREFIX) :]
    if detect_utf16_without_bom(body) != "utf16le":
        return None
    return DecodedText(
        text=_decode_utf16(body, "utf-16-le"),
        encoding=TextEncoding(name="utf16le", bom=True),
        recovered_from_corrupt_bom=True,
    )


def decode(data: bytes) -> DecodedText:
    """Decode ``data`` and report the encoding needed to write it back."""
    if not data:
        return DecodedText(text="", encoding=UTF8_PLAIN)

    recovered = _recover_corrupt_utf16le(data)
    if recovered is not None:
        return recovered

    encoding = detect_encoding(data)
    body = data[len(_BOMS[encoding.name]) :] if encoding.bom else data
    return DecodedText(text=_decode_body(body, encoding.name), encoding=encoding)


def encode(text: str, encoding: TextEncoding) -> bytes:
    if encoding.name == "utf16le":
        body = text.encode("utf-16-le", errors="surrogatepass")
    elif encoding.name == "utf16be":
        body = text.encode("utf-16-be", errors="surrogatepass")
    else:
        body = text.encode("utf-8", errors="surrogatepass")
    if not encoding.bom:
        return body
    return _BOMS[encoding.name] + body


__all__ = [
    "CORRUPT_UTF16LE_PREFIX",
    "decode",
    "detect_encoding",
    "detect_utf16_without_bom",
    "encode",
]
