"""
Tests for per-thread GMP scratch contexts.

Run with: pytest modgmp/tests/test_context.py -v
"""

import gc
import threading
import time
import weakref
import sys
import os

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from modgmp import (
    mod_pow_insecure, mod_pow_secure, release_thread_context,
    ContextBusyError, NativeResourceError, HAS_NATIVE_GMP,
)
from modgmp.native.bindings import get_library
from modgmp.native.context import ContextPool, NativeContext, RESULT, ARG0
from modgmp.native.operand import PreparedOperand

needs_gmp = pytest.mark.skipif(not HAS_NATIVE_GMP, reason="libgmp not available")


def wait_for(predicate, timeout=5.0, interval=0.05):
    """Collect garbage and poll until predicate() holds or timeout expires."""
    deadline = time.monotonic() + timeout
    while True:
        gc.collect()
        if predicate():
            return True
        if time.monotonic() >= deadline:
            return False
        time.sleep(interval)


@pytest.fixture
def pool():
    p = ContextPool()
    yield p
    p.release()


@needs_gmp
class TestNativeContext:
    def test_load_store(self):
        ctx = NativeContext(get_library())
        for value in [0, 1, -1, 2**64, -(2**64 + 5), 3**500]:
            ctx.load(ARG0, PreparedOperand(value))
            ctx.gmp.mpz_gcd(ctx.slot(RESULT), ctx.slot(ARG0), ctx.slot(ARG0))
            assert ctx.store(ARG0) == value
            assert ctx.store(RESULT) == abs(value)
        ctx.close()

    def test_close_is_idempotent(self):
        ctx = NativeContext(get_library())
        assert not ctx.closed
        ctx.close()
        ctx.close()
        assert ctx.closed

    def test_use_after_close(self):
        ctx = NativeContext(get_library())
        ctx.close()
        with pytest.raises(NativeResourceError):
            ctx.slot(RESULT)

    def test_claim_sets_busy(self):
        ctx = NativeContext(get_library())
        assert not ctx.busy
        with ctx.claim() as claimed:
            assert claimed is ctx
            assert ctx.busy
            with pytest.raises(ContextBusyError):
                with ctx.claim():
                    pass
            assert ctx.busy
        assert not ctx.busy
        ctx.close()

    def test_claim_cleared_on_error(self):
        ctx = NativeContext(get_library())
        with pytest.raises(ZeroDivisionError):
            with ctx.claim():
                1 / 0
        assert not ctx.busy
        ctx.close()

    def test_collected_without_close(self):
        ctx = NativeContext(get_library())
        finalizer = ctx._finalizer
        del ctx
        assert wait_for(lambda: not finalizer.alive)


class _FailingGmp:
    """Stand-in library whose scratch initialisation runs out of memory."""

    def __init__(self):
        self.cleared = 0

    def mpz_init(self, mpz):
        raise MemoryError

    def mpz_clear(self, mpz):
        self.cleared += 1


class TestResourceErrors:
    def test_allocation_failure(self):
        with pytest.raises(NativeResourceError):
            NativeContext(_FailingGmp())

    def test_missing_library(self):
        def loader():
            raise NativeResourceError("libgmp not found")

        p = ContextPool(loader=loader)
        with pytest.raises(NativeResourceError):
            p.acquire()
        assert p.live_contexts() == 0
        assert p.release() is False


@needs_gmp
class TestContextPool:
    def test_same_context_per_thread(self, pool):
        assert pool.acquire() is pool.acquire()
        assert pool.created == 1
        assert pool.live_contexts() == 1

    def test_distinct_context_per_thread(self, pool):
        n_threads = 4
        barrier = threading.Barrier(n_threads)
        seen = {}

        def worker(i):
            ctx = pool.acquire()
            barrier.wait()  # keep every context alive until all are created
            seen[i] = (ctx.owner, id(ctx), threading.get_ident())
            barrier.wait()

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(n_threads)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len({v[1] for v in seen.values()}) == n_threads
        for owner, _, ident in seen.values():
            assert owner == ident

    def test_release_is_idempotent(self, pool):
        ctx = pool.acquire()
        assert pool.release() is True
        assert ctx.closed
        assert pool.release() is False
        assert pool.live_contexts() == 0

    def test_reacquire_after_release(self, pool):
        first = pool.acquire()
        pool.release()
        second = pool.acquire()
        assert second is not first
        assert not second.closed
        assert pool.created == 2

    def test_lease_is_not_reentrant(self, pool):
        with pool.lease():
            with pytest.raises(ContextBusyError):
                with pool.lease():
                    pass
            with pytest.raises(ContextBusyError):
                pool.release()
        with pool.lease() as ctx:
            assert not ctx.closed
            assert ctx.busy
        assert not ctx.busy

    def test_thread_exit_reclaims_context(self, pool):
        refs = []

        def worker():
            with pool.lease() as ctx:
                refs.append(weakref.ref(ctx))

        t = threading.Thread(target=worker)
        t.start()
        t.join()
        assert wait_for(lambda: refs[0]() is None)
        assert pool.live_contexts() == 0


@needs_gmp
class TestDefaultPool:
    def test_release_between_operations(self):
        assert mod_pow_insecure(2, 10, 1000) == 24
        assert release_thread_context() is True
        assert release_thread_context() is False
        assert mod_pow_secure(2, 10, 1001) == 1024 % 1001

    def test_forced_collection_after_release(self):
        """Releasing then forcing collection must not crash."""
        mod_pow_secure(3, 7, 11)
        release_thread_context()

        collected = threading.Event()

        class Sentinel:
            pass

        sentinel = Sentinel()
        weakref.finalize(sentinel, collected.set)
        del sentinel

        attempts = 0
        while not collected.is_set() and attempts < 50:
            gc.collect()
            time.sleep(0.1)
            attempts += 1
        assert collected.is_set()
        assert mod_pow_insecure(3, 7, 11) == pow(3, 7, 11)
