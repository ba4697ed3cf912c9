"""
Modular exponentiation on top of GMP.

Two entry points with different contracts:

  mod_pow_insecure  mpz_powm      fastest; timing depends on the exponent bits.
                                  Any positive modulus, even ones included.
  mod_pow_secure    mpz_powm_sec  constant time in the values of base and
                                  exponent (only their bit-lengths and the
                                  modulus leak).  Odd positive modulus only.

Use mod_pow_secure whenever the exponent or base is secret (RSA private-key
operations, e.g. m^dp mod p).  Both take ints or PreparedOperand values and
return an int in [0, modulus).
"""

from typing import Union

from .errors import (
    InvalidArgumentError,
    ModulusNotPositiveError,
    SecureModulusNotPositiveError,
    UnsupportedModulusError,
)
from .native.context import ARG0, ARG1, ARG2, RESULT, default_pool
from .native.operand import PreparedOperand, prepare

Operand = Union[int, PreparedOperand]


def _check_signs(base: PreparedOperand, exponent: PreparedOperand):
    if base.sign < 0:
        raise InvalidArgumentError("base must be non-negative")
    if exponent.sign < 0:
        raise InvalidArgumentError("exponent must be non-negative")


def mod_pow_insecure(base: Operand, exponent: Operand, modulus: Operand) -> int:
    """base^exponent mod modulus using GMP's variable-time mpz_powm.

    Raises:
        InvalidArgumentError: base or exponent is negative.
        ModulusNotPositiveError: modulus <= 0.
    """
    base, exponent, modulus = prepare(base), prepare(exponent), prepare(modulus)
    _check_signs(base, exponent)
    if modulus.sign <= 0:
        raise ModulusNotPositiveError(f"modulus must be positive, got {modulus.value}")

    with default_pool().lease() as ctx:
        r = ctx.slot(RESULT)
        ctx.gmp.mpz_powm(r, ctx.load(ARG0, base), ctx.load(ARG1, exponent),
                         ctx.load(ARG2, modulus))
        return ctx.store(RESULT)


def mod_pow_secure(base: Operand, exponent: Operand, modulus: Operand) -> int:
    """base^exponent mod modulus using GMP's constant-time mpz_powm_sec.

    Raises:
        InvalidArgumentError: base or exponent is negative.
        SecureModulusNotPositiveError: modulus <= 0 (also a
            ModulusNotPositiveError).
        UnsupportedModulusError: modulus is even.
    """
    base, exponent, modulus = prepare(base), prepare(exponent), prepare(modulus)
    _check_signs(base, exponent)
    if modulus.sign <= 0:
        raise SecureModulusNotPositiveError(
            f"modulus must be positive, got {modulus.value}"
        )
    if modulus.value % 2 == 0:
        raise UnsupportedModulusError("modulus must be odd for mod_pow_secure")

    # mpz_powm_sec needs exp > 0.  Both shortcuts depend only on public data:
    # the modulus, and whether the exponent has bit-length zero.
    if modulus.value == 1:
        return 0
    if exponent.sign == 0:
        return 1

    with default_pool().lease() as ctx:
        r = ctx.slot(RESULT)
        ctx.gmp.mpz_powm_sec(r, ctx.load(ARG0, base), ctx.load(ARG1, exponent),
                             ctx.load(ARG2, modulus))
        return ctx.store(RESULT)
