"""
Per-thread GMP scratch contexts.

Every thread that calls into modgmp gets one NativeContext: a small array of
initialised mpz_t values reused as operand and result slots.  The slots grow
to the largest operands seen and stay allocated between calls, so repeated
RSA-sized operations do not hit the allocator.

Lifecycle:
  - created lazily by ContextPool.acquire() on the thread's first operation
  - released explicitly by ContextPool.release() / release_thread_context()
  - otherwise released when the thread exits (its thread-local storage is
    dropped and the context's finalizer clears the slots), or at interpreter
    exit.  Finalizer timing is up to the garbage collector.

A context is never handed to another thread and is not re-entrant.
"""

import ctypes
import threading
import weakref
from contextlib import contextmanager
from typing import Callable, Optional

import numpy as np

from ..config import default_config
from ..errors import ContextBusyError, NativeResourceError
from .bindings import GmpLibrary, MpzStruct, get_library
from .operand import (
    NAILS, WORD_ENDIAN, WORD_ORDER,
    NativeBuffer, PreparedOperand, materialize, word_dtype,
)

# Slot conventions used by the operation modules.
RESULT = 0
ARG0 = 1
ARG1 = 2
ARG2 = 3


def _clear_slots(mpz_clear, slots, count):
    for i in range(count):
        mpz_clear(slots[i])


class NativeContext:
    """Scratch mpz_t slots owned by one thread."""

    def __init__(self, gmp: GmpLibrary, slots: Optional[int] = None,
                 word_bytes: Optional[int] = None):
        cfg = default_config()
        self.n_slots = slots if slots is not None else cfg.scratch_slots
        self.word_bytes = word_bytes if word_bytes is not None else cfg.word_bytes
        self._dtype = word_dtype(self.word_bytes)
        self.gmp = gmp
        self.owner = threading.get_ident()
        self._busy = False

        initialised = 0
        try:
            self._slots = (MpzStruct * self.n_slots)()
            for i in range(self.n_slots):
                gmp.mpz_init(self._slots[i])
                initialised += 1
        except MemoryError as exc:
            if initialised:
                _clear_slots(gmp.mpz_clear, self._slots, initialised)
            raise NativeResourceError(
                f"could not allocate {self.n_slots} GMP scratch slots"
            ) from exc

        self._finalizer = weakref.finalize(
            self, _clear_slots, gmp.mpz_clear, self._slots, self.n_slots
        )

    @property
    def closed(self) -> bool:
        return not self._finalizer.alive

    @property
    def busy(self) -> bool:
        """True while an operation holds this context."""
        return self._busy

    @contextmanager
    def claim(self):
        """Mark the context in use for one operation; not re-entrant."""
        if self._busy:
            raise ContextBusyError(
                "native context is already in use on this thread"
            )
        self._busy = True
        try:
            yield self
        finally:
            self._busy = False

    def close(self):
        """Clear all slots.  Safe to call any number of times."""
        self._finalizer()

    def slot(self, index: int) -> MpzStruct:
        if self.closed:
            raise NativeResourceError("native context used after release")
        return self._slots[index]

    def load(self, index: int, operand: PreparedOperand) -> MpzStruct:
        """Import ``operand`` into slot ``index`` and return the slot."""
        mpz = self.slot(index)
        buf = operand.buffer
        self.gmp.mpz_import(
            mpz, buf.count, WORD_ORDER, buf.word_bytes, WORD_ENDIAN, NAILS,
            buf.words.ctypes.data_as(ctypes.c_void_p),
        )
        if buf.negative:
            self.gmp.mpz_neg(mpz, mpz)
        return mpz

    def store(self, index: int) -> int:
        """Export slot ``index`` as a new int."""
        mpz = self.slot(index)
        word_bits = 8 * self.word_bytes
        n_words = (self.gmp.mpz_sizeinbase(mpz, 2) + word_bits - 1) // word_bits
        words = np.zeros(n_words, dtype=self._dtype)
        count = ctypes.c_size_t(0)
        self.gmp.mpz_export(
            words.ctypes.data_as(ctypes.c_void_p), ctypes.byref(count),
            WORD_ORDER, self.word_bytes, WORD_ENDIAN, NAILS, mpz,
        )
        words = words[:count.value]
        words.flags.writeable = False
        return materialize(NativeBuffer(
            negative=mpz._mp_size < 0, words=words, word_bytes=self.word_bytes,
        ))

    def __repr__(self):
        state = "closed" if self.closed else "open"
        return f"NativeContext(owner={self.owner}, slots={self.n_slots}, {state})"


class ContextPool:
    """One NativeContext per OS thread.

    Contexts are held in thread-local storage; the registry only holds weak
    references and exists for introspection.
    """

    def __init__(self, loader: Callable[[], GmpLibrary] = get_library,
                 slots: Optional[int] = None):
        self._loader = loader
        self._slots = slots
        self._local = threading.local()
        self._lock = threading.Lock()
        self._registry: "weakref.WeakValueDictionary[int, NativeContext]" = (
            weakref.WeakValueDictionary()
        )
        self.created = 0

    def acquire(self) -> NativeContext:
        """Return the calling thread's context, creating it if needed.

        Raises:
            NativeResourceError: libgmp missing or scratch allocation failed.
        """
        ctx = getattr(self._local, "context", None)
        if ctx is not None and not ctx.closed:
            return ctx
        ctx = NativeContext(self._loader(), slots=self._slots)
        self._local.context = ctx
        with self._lock:
            self._registry[ctx.owner] = ctx
            self.created += 1
        return ctx

    def release(self) -> bool:
        """Release the calling thread's context now.

        Returns True if a live context was released.
        """
        ctx = getattr(self._local, "context", None)
        if ctx is None:
            return False
        if ctx.busy:
            raise ContextBusyError("cannot release a context with an operation in flight")
        self._local.context = None
        with self._lock:
            if self._registry.get(ctx.owner) is ctx:
                del self._registry[ctx.owner]
        was_open = not ctx.closed
        ctx.close()
        return was_open

    def live_contexts(self) -> int:
        """Number of open contexts still reachable (any thread)."""
        with self._lock:
            return sum(1 for ctx in list(self._registry.values()) if not ctx.closed)

    @contextmanager
    def lease(self):
        """Acquire the thread's context for the duration of one operation."""
        with self.acquire().claim() as ctx:
            yield ctx


_DEFAULT_POOL = ContextPool()


def default_pool() -> ContextPool:
    return _DEFAULT_POOL


def release_thread_context() -> bool:
    """Free the calling thread's GMP scratch memory now.

    The next operation on this thread allocates a fresh context.
    """
    return _DEFAULT_POOL.release()
