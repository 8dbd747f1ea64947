"""
Embedding codec
===============

Vectors are stored as packed little-endian float32, ``4 * len(vector)``
bytes, which is the layout RediSearch expects for ``FLOAT32`` vector fields.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from ragkit.errors import DimensionMismatchError

FLOAT32_LE = np.dtype("<f4")


def encode(vector: Sequence[float] | np.ndarray) -> bytes:
    """Serialize ``vector`` to raw little-endian float32 bytes."""
    return np.asarray(vector, dtype=FLOAT32_LE).reshape(-1).tobytes()


def decode(blob: bytes) -> np.ndarray:
    """Deserialize raw bytes into a float32 ``np.ndarray``."""
    if len(blob) % FLOAT32_LE.itemsize:
        raise ValueError(f"Blob length {len(blob)} is not a multiple of {FLOAT32_LE.itemsize}")
    return np.frombuffer(blob, dtype=FLOAT32_LE).astype(np.float32)


def check_dimension(vector, expected: int) -> None:
    """
    Validate that ``vector`` is a flat numeric sequence of length ``expected``.

    :raises DimensionMismatchError: on a length mismatch or a non-numeric input.
    """

    if isinstance(vector, (str, bytes, bytearray)) or not hasattr(vector, "__len__"):
        raise DimensionMismatchError(expected, None, "vector must be a numeric sequence")

    try:
        arr = np.asarray(vector)
    except ValueError as exc:  # ragged nested input
        raise DimensionMismatchError(expected, len(vector), "vector must be one-dimensional") from exc
    if arr.ndim != 1:
        raise DimensionMismatchError(expected, len(vector), "vector must be one-dimensional")
    if arr.size and not (np.issubdtype(arr.dtype, np.number) and not np.issubdtype(arr.dtype, np.complexfloating)):
        raise DimensionMismatchError(expected, arr.size, "vector must contain real numbers")
    if arr.size != expected:
        raise DimensionMismatchError(expected, int(arr.size))


__all__ = ["encode", "decode", "check_dimension", "FLOAT32_LE"]
