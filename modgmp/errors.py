"""
Error taxonomy for modgmp.

Two families matter to callers:
  - InvalidArgumentError: the arguments were rejected before any native work.
  - GmpArithmeticError:   the computation itself has no valid result.

Both subclass the matching builtin (ValueError / ArithmeticError) so code
written against plain Python integers keeps working.
"""


class GmpError(Exception):
    """Base class for all modgmp errors."""


class InvalidArgumentError(GmpError, ValueError):
    """Argument rejected before the native engine was called."""


class UnsupportedModulusError(InvalidArgumentError):
    """Modulus not accepted by the constant-time path (must be odd and > 0)."""


class GmpArithmeticError(GmpError, ArithmeticError):
    """No mathematically valid result exists for the given inputs."""


class ModulusNotPositiveError(GmpArithmeticError):
    """Modulus <= 0 where a positive modulus is required."""


class SecureModulusNotPositiveError(UnsupportedModulusError, ModulusNotPositiveError):
    """Modulus <= 0 passed to the constant-time path.

    Rejected up front like any other unsupported modulus, but still an
    ArithmeticError for callers that mirror big-integer modPow semantics.
    """


class NotInvertibleError(GmpArithmeticError):
    """gcd(value, modulus) != 1, so no modular inverse exists."""


class NativeResourceError(GmpError, RuntimeError):
    """libgmp unavailable, scratch allocation failed, or a released context was used."""


class ContextBusyError(NativeResourceError):
    """A thread tried to start a second operation on its in-flight context."""
