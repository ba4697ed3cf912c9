"""
modgmp: GMP-backed modular arithmetic for asymmetric cryptography.

  mod_pow_insecure(b, e, m)   fast, variable time (mpz_powm)
  mod_pow_secure(b, e, m)     constant time, odd m > 0 (mpz_powm_sec)
  mod_inverse, gcd, exact_divide, kronecker, jacobi, legendre

Arguments are Python ints or PreparedOperand wrappers; wrap values reused
across many calls (an RSA modulus, a private exponent) so they are converted
to GMP's format once.  Each thread keeps its own GMP scratch context;
release_thread_context() frees it early.
"""

__version__ = "0.3.0"

from .errors import (
    GmpError, InvalidArgumentError, UnsupportedModulusError,
    GmpArithmeticError, ModulusNotPositiveError, SecureModulusNotPositiveError,
    NotInvertibleError, NativeResourceError, ContextBusyError,
)
from .config import GmpConfig, default_config, set_default_config
from .native import (
    HAS_NATIVE_GMP, PreparedOperand, prepare,
    ContextPool, default_pool, release_thread_context,
)
from .modpow import mod_pow_insecure, mod_pow_secure
from .numtheory import gcd, mod_inverse, exact_divide, kronecker, jacobi, legendre
from .logging import RunLogger, RunManifest, create_manifest

__all__ = [
    "mod_pow_insecure", "mod_pow_secure",
    "gcd", "mod_inverse", "exact_divide", "kronecker", "jacobi", "legendre",
    "PreparedOperand", "prepare",
    "ContextPool", "default_pool", "release_thread_context",
    "HAS_NATIVE_GMP",
    "GmpConfig", "default_config", "set_default_config",
    "GmpError", "InvalidArgumentError", "UnsupportedModulusError",
    "GmpArithmeticError", "ModulusNotPositiveError",
    "SecureModulusNotPositiveError", "NotInvertibleError",
    "NativeResourceError", "ContextBusyError",
    "RunLogger", "RunManifest", "create_manifest",
]
