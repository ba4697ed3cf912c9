"""
Native layer for modgmp.

Provides:
1. ctypes bindings to the system libgmp
2. The operand cache (int <-> GMP word buffers)
3. Per-thread GMP scratch contexts
4. Pure Python reference implementations (always available)
"""

from .reference import (
    mod_pow as reference_mod_pow,
    mod_inverse as reference_mod_inverse,
    gcd as reference_gcd,
    exact_divide as reference_exact_divide,
    kronecker as reference_kronecker,
)
from .bindings import (
    GmpLibrary, MpzStruct, HAS_NATIVE_GMP,
    get_gmp_library_path, get_library, load_library,
)
from .operand import (
    NativeBuffer, PreparedOperand, prepare, materialize, to_native_buffer,
)
from .context import (
    NativeContext, ContextPool, default_pool, release_thread_context,
)

__all__ = [
    "reference_mod_pow", "reference_mod_inverse", "reference_gcd",
    "reference_exact_divide", "reference_kronecker",
    "GmpLibrary", "MpzStruct", "HAS_NATIVE_GMP",
    "get_gmp_library_path", "get_library", "load_library",
    "NativeBuffer", "PreparedOperand", "prepare", "materialize", "to_native_buffer",
    "NativeContext", "ContextPool", "default_pool", "release_thread_context",
]
