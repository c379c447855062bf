"""Random identity shared by all variants of one upload"""
import base64
import os
from typing import Callable

# Length of the random hash in bytes
HASH_LEN_BYTES = 8

# `+`, `/` and `=` are not friendly to urls and object keys, swap them in place
_KEY_SAFE = str.maketrans({"+": "A", "/": "B", "=": "C"})


class RandomHashGenerator:
    """Generates short url-safe tokens. Uniqueness matters, secrecy doesn't."""

    def __init__(self, entropy: Callable[[int], bytes] = os.urandom):
        self.entropy = entropy

    def generate_hash(self) -> str:
        raw = self.entropy(HASH_LEN_BYTES)
        return base64.b64encode(raw).decode("ascii").translate(_KEY_SAFE)
