"""Secret key normalization for Google Secret Manager naming rules.

Secret Manager accepts secret ids of at most 255 characters drawn from
upper and lower case letters, digits, hyphen and underscore. Keys that
already comply are returned untouched. Anything else is rewritten: illegal
characters become ``-``, overlong keys are truncated, and an 8 character
fingerprint of the original key is appended so that distinct keys stay
distinct after the lossy rewrite.
"""

from __future__ import annotations

import logging
import string
from typing import Optional

logger = logging.getLogger(__name__)

MAX_KEY_LENGTH = 255
HASH_LENGTH = 8
# room left for "_" + fingerprint once a key has been modified
MODIFIED_KEY_LENGTH = MAX_KEY_LENGTH - HASH_LENGTH - 1

ALLOWED_CHARACTERS = frozenset(string.ascii_letters + string.digits + "-_")
REPLACEMENT_CHARACTER = "-"
FINGERPRINT_SEPARATOR = "_"

_FNV32_OFFSET_BASIS = 0x811C9DC5
_FNV32_PRIME = 0x01000193


def fingerprint(key: str) -> str:
    """Return the FNV-1a 32-bit hash of ``key`` as 8 upper-case hex digits."""
    value = _FNV32_OFFSET_BASIS
    for byte in key.encode("utf-8"):
        value ^= byte
        value = (value * _FNV32_PRIME) & 0xFFFFFFFF
    return f"{value:08X}"


def normalize_key(raw_key: Optional[str]) -> str:
    """Map ``raw_key`` to a legal Secret Manager secret id.

    Never raises. ``None`` is treated as the empty string.
    """
    original = raw_key or ""
    modified = False
    buffer = []

    for char in original:
        if char in ALLOWED_CHARACTERS:
            buffer.append(char)
        else:
            buffer.append(REPLACEMENT_CHARACTER)
            modified = True

        if len(buffer) > MAX_KEY_LENGTH or (modified and len(buffer) > MODIFIED_KEY_LENGTH):
            del buffer[MODIFIED_KEY_LENGTH:]
            modified = True
            break

    if not modified:
        return original

    fixed_key = "".join(buffer) + FINGERPRINT_SEPARATOR + fingerprint(original)
    logger.warning(
        "GCP Secret Manager vault sanitized the key, original: %s fixed: %s",
        original,
        fixed_key,
    )
    return fixed_key


def is_normalized(key: str) -> bool:
    """True when ``key`` needs no rewriting."""
    return len(key) <= MAX_KEY_LENGTH and all(char in ALLOWED_CHARACTERS for char in key)
