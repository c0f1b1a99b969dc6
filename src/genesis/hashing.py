"""TwoX storage prefix hashing.

Substrate derives pallet storage prefixes with TwoX: concatenated
XXH64 digests seeded 0, 1, ... and laid out little-endian.
"""

from __future__ import annotations

import math

import xxhash


def twox_hash_hex(data: str | bytes, bit_length: int = 128) -> str:
    """Return the ``0x``-prefixed TwoX hash of data.

    Args:
        data: Input text (UTF-8 encoded) or bytes.
        bit_length: Output width in bits; rounded up to whole 64-bit rounds.

    Returns:
        Lowercase hex digest with ``0x`` prefix.

    Raises:
        ValueError: If bit_length is not positive.
    """
    if bit_length <= 0:
        raise ValueError(f"bit_length must be positive, got {bit_length}")
    payload = data.encode("utf-8") if isinstance(data, str) else data
    rounds = math.ceil(bit_length / 64)
    digest = b"".join(
        xxhash.xxh64_intdigest(payload, seed=seed).to_bytes(8, "little")
        for seed in range(rounds)
    )
    return "0x" + digest.hex()
