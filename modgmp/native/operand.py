"""
Operand cache: Python ints <-> GMP import/export word buffers.

A NativeBuffer is the portable form GMP imports from (``mpz_import``) and
exports to (``mpz_export``): a sign flag plus the magnitude as big-endian
words, most significant word first.  Buffers are numpy arrays marked
read-only, so once built they can be shared freely between threads.

PreparedOperand pairs an int with its buffer, built on first use.  Reusing
the same PreparedOperand (e.g. an RSA modulus) skips the conversion on every
later call.
"""

import operator
from dataclasses import dataclass
from typing import Optional, Union

import numpy as np

from ..config import SUPPORTED_WORD_BYTES, default_config

# GMP import/export parameters matching the buffer layout.
WORD_ORDER = 1   # most significant word first
WORD_ENDIAN = 1  # big-endian bytes within a word
NAILS = 0


def word_dtype(word_bytes: int) -> np.dtype:
    if word_bytes not in SUPPORTED_WORD_BYTES:
        raise ValueError(
            f"word_bytes must be one of {SUPPORTED_WORD_BYTES}, got {word_bytes}"
        )
    return np.dtype(f">u{word_bytes}")


@dataclass(frozen=True)
class NativeBuffer:
    """Sign + magnitude words of one integer."""
    negative: bool
    words: np.ndarray
    word_bytes: int

    @property
    def count(self) -> int:
        return len(self.words)


def to_native_buffer(value: int, word_bytes: int = 8) -> NativeBuffer:
    """Convert an int into a read-only NativeBuffer."""
    dtype = word_dtype(word_bytes)
    magnitude = -value if value < 0 else value
    word_bits = 8 * word_bytes
    n_words = (magnitude.bit_length() + word_bits - 1) // word_bits
    raw = magnitude.to_bytes(n_words * word_bytes, "big")
    words = np.frombuffer(raw, dtype=dtype)  # read-only view over immutable bytes
    return NativeBuffer(negative=value < 0, words=words, word_bytes=word_bytes)


def materialize(buffer: NativeBuffer) -> int:
    """Build a new int from a NativeBuffer."""
    magnitude = int.from_bytes(buffer.words.tobytes(), "big")
    return -magnitude if buffer.negative else magnitude


class PreparedOperand:
    """An int together with its lazily built native buffer.

    The wrapped int is immutable, so the cached buffer never needs
    invalidation.  Concurrent first uses may each build a buffer; they are
    equal and whichever is published last wins.

    Usage:
        n = PreparedOperand(modulus)
        for m in messages:
            mod_pow_insecure(m, d, n)   # n converted once
    """

    __slots__ = ("_value", "_word_bytes", "_buffer")

    def __init__(self, value: Union[int, "PreparedOperand"],
                 word_bytes: Optional[int] = None):
        if isinstance(value, PreparedOperand):
            value = value.value
        try:
            self._value = operator.index(value)
        except TypeError:
            raise TypeError(
                f"expected an integer, got {type(value).__name__}"
            ) from None
        if word_bytes is None:
            word_bytes = default_config().word_bytes
        word_dtype(word_bytes)
        self._word_bytes = word_bytes
        self._buffer: Optional[NativeBuffer] = None

    @property
    def value(self) -> int:
        return self._value

    @property
    def sign(self) -> int:
        return (self._value > 0) - (self._value < 0)

    @property
    def is_prepared(self) -> bool:
        """True once the native buffer has been built."""
        return self._buffer is not None

    @property
    def buffer(self) -> NativeBuffer:
        buf = self._buffer
        if buf is None:
            buf = to_native_buffer(self._value, self._word_bytes)
            self._buffer = buf
        return buf

    def __int__(self):
        return self._value

    def __index__(self):
        return self._value

    def __eq__(self, other):
        if isinstance(other, PreparedOperand):
            return self._value == other._value
        if isinstance(other, int):
            return self._value == other
        return NotImplemented

    def __hash__(self):
        return hash(self._value)

    def __repr__(self):
        state = "prepared" if self.is_prepared else "lazy"
        return f"PreparedOperand({self._value}, {state})"


def prepare(value: Union[int, PreparedOperand]) -> PreparedOperand:
    """Return ``value`` if already prepared, else wrap it."""
    if isinstance(value, PreparedOperand):
        return value
    return PreparedOperand(value)
