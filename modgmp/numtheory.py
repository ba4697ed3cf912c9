"""
Auxiliary number theory on top of GMP: gcd, modular inverse, exact division
and the Kronecker / Jacobi / Legendre symbols.

None of these are constant-time.  Input validation mirrors the contract of a
standard big-integer library so results and errors match
``modgmp.native.reference``.
"""

from typing import Union

from .errors import InvalidArgumentError, ModulusNotPositiveError, NotInvertibleError
from .native.context import ARG0, ARG1, RESULT, default_pool
from .native.operand import PreparedOperand, prepare

Operand = Union[int, PreparedOperand]


def gcd(a: Operand, b: Operand) -> int:
    """Non-negative greatest common divisor; gcd(0, 0) == 0."""
    a, b = prepare(a), prepare(b)
    with default_pool().lease() as ctx:
        ctx.gmp.mpz_gcd(ctx.slot(RESULT), ctx.load(ARG0, a), ctx.load(ARG1, b))
        return ctx.store(RESULT)


def mod_inverse(value: Operand, modulus: Operand) -> int:
    """x in [0, modulus) with value*x == 1 (mod modulus).

    Raises:
        ModulusNotPositiveError: modulus <= 0.
        NotInvertibleError: gcd(value, modulus) != 1.
    """
    value, modulus = prepare(value), prepare(modulus)
    if modulus.sign <= 0:
        raise ModulusNotPositiveError(f"modulus must be positive, got {modulus.value}")
    if modulus.value == 1:
        # Every value is invertible mod 1, and the only residue is 0.
        return 0

    with default_pool().lease() as ctx:
        ok = ctx.gmp.mpz_invert(ctx.slot(RESULT), ctx.load(ARG0, value),
                                ctx.load(ARG1, modulus))
        if not ok:
            raise NotInvertibleError(
                f"value is not invertible mod {modulus.value}"
            )
        return ctx.store(RESULT)


def exact_divide(dividend: Operand, divisor: Operand) -> int:
    """dividend / divisor when divisor is known to divide dividend.

    Faster than general division.  If divisor does not divide dividend the
    result is unspecified; no error is raised.

    Raises:
        ZeroDivisionError: divisor == 0.
    """
    dividend, divisor = prepare(dividend), prepare(divisor)
    if divisor.sign == 0:
        raise ZeroDivisionError("exact_divide by zero")

    with default_pool().lease() as ctx:
        ctx.gmp.mpz_divexact(ctx.slot(RESULT), ctx.load(ARG0, dividend),
                             ctx.load(ARG1, divisor))
        return ctx.store(RESULT)


def kronecker(a: Operand, n: Operand) -> int:
    """Kronecker symbol (a/n) in {-1, 0, 1}, defined for every a and n."""
    a, n = prepare(a), prepare(n)
    with default_pool().lease() as ctx:
        return int(ctx.gmp.mpz_jacobi(ctx.load(ARG0, a), ctx.load(ARG1, n)))


def jacobi(a: Operand, n: Operand) -> int:
    """Jacobi symbol (a/n); n must be odd and positive."""
    n = prepare(n)
    if n.sign <= 0 or n.value % 2 == 0:
        raise InvalidArgumentError(f"Jacobi symbol needs an odd positive n, got {n.value}")
    return kronecker(a, n)


def legendre(a: Operand, p: Operand) -> int:
    """Legendre symbol (a/p) for an odd prime p.

    Primality of p is the caller's responsibility; only oddness and sign are
    checked.
    """
    return jacobi(a, p)
