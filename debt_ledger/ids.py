import secrets
import string
from typing import Container

ID_ALPHABET = string.ascii_letters + string.digits
ID_LENGTH = 6
MAX_ATTEMPTS = 100


def generate_id(taken: Container[str] = (), length: int = ID_LENGTH) -> str:
    """Return a short opaque id that is not already in ``taken``."""
    for _ in range(MAX_ATTEMPTS):
        candidate = "".join(secrets.choice(ID_ALPHABET) for _ in range(length))
        if candidate not in taken:
            return candidate
    raise RuntimeError(f"Could not generate a free id of length {length} after {MAX_ATTEMPTS} attempts")
