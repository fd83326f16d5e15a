"""PlantUML text encoding used to derive cache keys from diagram source.

The encoding is raw deflate followed by a base64 variant over PlantUML's own
alphabet (``0-9A-Za-z-_``). It is the same transform plantuml.com uses in
its URLs, so keys are safe as storage keys and stable across machines.
"""

from __future__ import annotations

import zlib

_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz-_"
_REVERSE = {ch: i for i, ch in enumerate(_ALPHABET)}


def _deflate(data: bytes) -> bytes:
    # Strip the 2-byte zlib header and 4-byte adler32 trailer to get raw deflate.
    return zlib.compress(data, 9)[2:-4]


def _encode_group(b1: int, b2: int, b3: int) -> str:
    return (
        _ALPHABET[b1 >> 2]
        + _ALPHABET[((b1 & 0x3) << 4) | (b2 >> 4)]
        + _ALPHABET[((b2 & 0xF) << 2) | (b3 >> 6)]
        + _ALPHABET[b3 & 0x3F]
    )


def encode(source: str) -> str:
    """Encode diagram source into a compact, URL-safe cache key.

    Pure and total: any string, including the empty string, yields a key.
    """
    compressed = _deflate(source.encode("utf-8"))
    parts: list[str] = []
    for i in range(0, len(compressed), 3):
        chunk = compressed[i : i + 3].ljust(3, b"\x00")
        parts.append(_encode_group(*chunk))
    return "".join(parts)


def decode(key: str) -> str:
    """Recover the diagram source from a key produced by :func:`encode`.

    Raises ValueError if the key contains characters outside the alphabet
    or does not inflate to UTF-8 text.
    """
    raw = bytearray()
    for i in range(0, len(key), 4):
        group = key[i : i + 4]
        try:
            c = [_REVERSE[ch] for ch in group.ljust(4, "0")]
        except KeyError as e:
            raise ValueError(f"Invalid character in key: {e.args[0]!r}") from e
        raw.append(((c[0] << 2) | (c[1] >> 4)) & 0xFF)
        raw.append(((c[1] << 4) | (c[2] >> 2)) & 0xFF)
        raw.append(((c[2] << 6) | c[3]) & 0xFF)
    try:
        # Padding zeros past the end of the deflate stream land in unused_data.
        return zlib.decompressobj(-15).decompress(bytes(raw)).decode("utf-8")
    except (zlib.error, UnicodeDecodeError) as e:
        raise ValueError(f"Key does not decode to diagram source: {e}") from e
