"""Verification key canonicalization.

Explorer pages sometimes publish the VK hex-encoded twice: the 32-byte key
is rendered as `0x`-prefixed hex text and that text is hex-encoded again,
giving a 132-character string. Anything longer than 64 hex characters is
treated that way; everything else is decoded directly.
"""

from __future__ import annotations

from typing import Union

from ..exceptions import InvalidHexError
from ..types import HEX_DIGITS, to_hex

KEY_BYTES = 32
KEY_HEX_CHARS = KEY_BYTES * 2


def _strip_prefix(text: str) -> str:
    return text[2:] if text[:2] in ("0x", "0X") else text


def _decode(text: str, field: str) -> bytes:
    if not HEX_DIGITS.fullmatch(text):
        raise InvalidHexError(field, "not valid hex")
    return bytes.fromhex(text)


def is_double_encoded(raw: str) -> bool:
    return len(_strip_prefix(raw.strip())) > KEY_HEX_CHARS


def canonicalize_key(raw: Union[str, bytes], field: str = "vk") -> bytes:
    """Return the 32 key bytes for a single- or double-encoded VK.

    Already-canonical input (32 raw bytes, or 64 hex characters) comes back
    unchanged.
    """
    if isinstance(raw, (bytes, bytearray)):
        key = bytes(raw)
    else:
        text = _strip_prefix(raw.strip())
        if len(text) > KEY_HEX_CHARS:
            outer = _decode(text, field)
            try:
                inner = outer.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise InvalidHexError(field, "double-encoded key is not valid text") from exc
            text = _strip_prefix(inner.strip())
        key = _decode(text, field)

    if len(key) != KEY_BYTES:
        raise InvalidHexError(field, f"expected {KEY_BYTES} key bytes, got {len(key)}")
    return key


def canonical_key_hex(raw: Union[str, bytes], field: str = "vk") -> str:
    return to_hex(canonicalize_key(raw, field))
