"""
Opaque value codec standing in for the homomorphic encryption scheme.

Ciphertexts are ``FHE-`` followed by the base64 of the decimal text of the value.
Untagged strings are read as plain numbers so older records stay readable.
"""

from __future__ import annotations

import base64
import binascii
import math
from typing import Union

from .errors import FormatError

Number = Union[int, float]

TAG = "FHE-"


def _format_number(value: Number) -> str:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise FormatError(f"Not a number: {value!r}")
    if isinstance(value, float):
        if not math.isfinite(value):
            raise FormatError(f"Cannot encode non-finite value {value!r}")
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)


def parse_number(text: str) -> Number:
    """Parse decimal text, keeping integers exact."""
    text = text.strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        value = float(text)
    except ValueError as exc:
        raise FormatError(f"Not a numeric payload: {text!r}") from exc
    if not math.isfinite(value):
        raise FormatError(f"Non-finite payload: {text!r}")
    return value


def encode(value: Number) -> str:
    """Encode a finite number into a ciphertext string."""
    payload = _format_number(value).encode("ascii")
    return TAG + base64.b64encode(payload).decode("ascii")


def decode(ciphertext: str) -> Number:
    """Decode a ciphertext (or a legacy plain numeric string) back to a number."""
    if not isinstance(ciphertext, str):
        raise FormatError(f"Ciphertext must be a string, got {type(ciphertext).__name__}")
    if ciphertext.startswith(TAG):
        try:
            raw = base64.b64decode(ciphertext[len(TAG):].encode("ascii"), validate=True)
            text = raw.decode("ascii")
        except (binascii.Error, UnicodeError) as exc:
            raise FormatError(f"Malformed ciphertext: {ciphertext!r}") from exc
        return parse_number(text)
    return parse_number(ciphertext)
