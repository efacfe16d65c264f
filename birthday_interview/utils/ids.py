"""Record ID generation."""

import secrets
import string
import time

_ALPHABET = string.digits + string.ascii_lowercase


def generate_id() -> str:
    """Millisecond timestamp followed by 9 random base-36 characters.

    Unique enough for the lifetime of one device; not a global identifier.
    """
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(9))
    return f"{int(time.time() * 1000)}{suffix}"
