"""
Pure-Python reference implementations.

These serve as ground truth for differential testing of the GMP-backed
operations.  They follow the contract of a standard big-integer library
(modPow / modInverse / gcd / divide), not the stricter preconditions of the
native wrappers.

All operations are exact (Python ints, no native code).
"""

import math

from ..errors import InvalidArgumentError, ModulusNotPositiveError, NotInvertibleError


def mod_pow(base: int, exponent: int, modulus: int) -> int:
    """base^exponent mod modulus, result in [0, modulus).

    Negative exponents go through the modular inverse of ``base``.
    """
    if modulus <= 0:
        raise ModulusNotPositiveError(f"modulus must be positive, got {modulus}")
    if exponent < 0:
        return pow(mod_inverse(base, modulus), -exponent, modulus)
    return pow(base, exponent, modulus)


def mod_inverse(value: int, modulus: int) -> int:
    """x with value*x == 1 (mod modulus).  Everything is invertible mod 1."""
    if modulus <= 0:
        raise ModulusNotPositiveError(f"modulus must be positive, got {modulus}")
    if modulus == 1:
        return 0
    g, x, _ = extended_gcd(value % modulus, modulus)
    if g != 1:
        raise NotInvertibleError(f"{value} is not invertible mod {modulus} (gcd {g})")
    return x % modulus


def extended_gcd(a: int, b: int):
    """Iterative extended Euclid: returns (g, x, y) with a*x + b*y == g."""
    x0, x1, y0, y1 = 1, 0, 0, 1
    while b:
        q, a, b = a // b, b, a % b
        x0, x1 = x1, x0 - q * x1
        y0, y1 = y1, y0 - q * y1
    return a, x0, y0


def gcd(a: int, b: int) -> int:
    return math.gcd(a, b)


def exact_divide(dividend: int, divisor: int) -> int:
    """dividend / divisor, truncated toward zero; the remainder must be zero."""
    if divisor == 0:
        raise ZeroDivisionError("division by zero")
    q, r = divmod(abs(dividend), abs(divisor))
    if r:
        raise InvalidArgumentError(f"{divisor} does not divide {dividend}")
    return -q if (dividend < 0) != (divisor < 0) else q


def kronecker(a: int, n: int) -> int:
    """Kronecker symbol (a/n) for arbitrary integers a, n."""
    if n == 0:
        return 1 if a in (1, -1) else 0

    result = 1
    if n < 0:
        n = -n
        if a < 0:
            result = -result

    # (a/2) = 0 for even a, else +1 for a = +-1 mod 8 and -1 for a = +-3 mod 8
    twos = (n & -n).bit_length() - 1
    if twos:
        if a % 2 == 0:
            return 0
        n >>= twos
        if twos % 2 == 1 and a % 8 in (3, 5):
            result = -result

    # n is now odd and positive: Jacobi symbol
    a %= n
    while a:
        while a % 2 == 0:
            a //= 2
            if n % 8 in (3, 5):
                result = -result
        a, n = n, a
        if a % 4 == 3 and n % 4 == 3:
            result = -result
        a %= n
    return result if n == 1 else 0
