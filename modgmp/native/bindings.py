"""
ctypes-based Python bindings to the system GMP shared library.

Only the mpz entry points needed by the modular arithmetic layer are
declared.  GMP exports its public functions under ``__gmpz_*`` names;
``mpz_kronecker`` is a macro for ``mpz_jacobi`` and has no symbol of its own.
"""

import ctypes
import ctypes.util
import sys
import warnings
from pathlib import Path
from typing import Optional, List

from ..config import default_config
from ..errors import NativeResourceError

# ---------------------------------------------------------------------------
# Library discovery
# ---------------------------------------------------------------------------

if sys.platform == "darwin":
    _LIB_NAMES = ["libgmp.10.dylib", "libgmp.dylib"]
elif sys.platform == "win32":
    _LIB_NAMES = ["libgmp-10.dll", "gmp.dll"]
else:
    _LIB_NAMES = ["libgmp.so.10", "libgmp.so"]

_SEARCH_DIRS = [
    Path("/usr/lib/x86_64-linux-gnu"),
    Path("/usr/lib/aarch64-linux-gnu"),
    Path("/usr/lib64"),
    Path("/usr/lib"),
    Path("/usr/local/lib"),
    Path("/opt/homebrew/lib"),
    Path("/opt/local/lib"),
]


def _candidate_paths(explicit: Optional[str]) -> List[str]:
    candidates: List[str] = []
    if explicit:
        p = Path(explicit)
        if p.is_dir():
            candidates.extend(str(p / name) for name in _LIB_NAMES if (p / name).is_file())
        else:
            candidates.append(str(p))
    for d in _SEARCH_DIRS:
        for name in _LIB_NAMES:
            if (d / name).is_file():
                candidates.append(str(d / name))
    found = ctypes.util.find_library("gmp")
    if found:
        candidates.append(found)
    # Let the dynamic loader search LD_LIBRARY_PATH and friends.
    candidates.extend(_LIB_NAMES)
    return candidates


def get_gmp_library_path(explicit: Optional[str] = None) -> Optional[str]:
    """Return the first libgmp candidate that exists on disk, or None.

    Bare sonames only resolvable by the dynamic loader are not reported.
    """
    if explicit is None:
        explicit = default_config().library_path
    for c in _candidate_paths(explicit):
        if Path(c).is_file():
            return c
    return None


# ---------------------------------------------------------------------------
# mpz_t layout and signatures
# ---------------------------------------------------------------------------

class MpzStruct(ctypes.Structure):
    """Mirror of GMP's ``__mpz_struct``; ``mpz_t`` is a one-element array of it."""
    _fields_ = [
        ("_mp_alloc", ctypes.c_int),
        ("_mp_size", ctypes.c_int),   # sign of the value, |size| = limbs used
        ("_mp_d", ctypes.c_void_p),
    ]


mpz_ptr = ctypes.POINTER(MpzStruct)

# attribute name -> (symbol, restype, argtypes)
_SIGNATURES = {
    "mpz_init": ("__gmpz_init", None, [mpz_ptr]),
    "mpz_clear": ("__gmpz_clear", None, [mpz_ptr]),
    # rop, count, order, size, endian, nails, op
    "mpz_import": ("__gmpz_import", None,
                   [mpz_ptr, ctypes.c_size_t, ctypes.c_int, ctypes.c_size_t,
                    ctypes.c_int, ctypes.c_size_t, ctypes.c_void_p]),
    # rop, countp, order, size, endian, nails, op
    "mpz_export": ("__gmpz_export", ctypes.c_void_p,
                   [ctypes.c_void_p, ctypes.POINTER(ctypes.c_size_t), ctypes.c_int,
                    ctypes.c_size_t, ctypes.c_int, ctypes.c_size_t, mpz_ptr]),
    "mpz_neg": ("__gmpz_neg", None, [mpz_ptr, mpz_ptr]),
    "mpz_sizeinbase": ("__gmpz_sizeinbase", ctypes.c_size_t, [mpz_ptr, ctypes.c_int]),
    "mpz_powm": ("__gmpz_powm", None, [mpz_ptr, mpz_ptr, mpz_ptr, mpz_ptr]),
    "mpz_powm_sec": ("__gmpz_powm_sec", None, [mpz_ptr, mpz_ptr, mpz_ptr, mpz_ptr]),
    "mpz_invert": ("__gmpz_invert", ctypes.c_int, [mpz_ptr, mpz_ptr, mpz_ptr]),
    "mpz_gcd": ("__gmpz_gcd", None, [mpz_ptr, mpz_ptr, mpz_ptr]),
    "mpz_divexact": ("__gmpz_divexact", None, [mpz_ptr, mpz_ptr, mpz_ptr]),
    "mpz_jacobi": ("__gmpz_jacobi", ctypes.c_int, [mpz_ptr, mpz_ptr]),
}


class GmpLibrary:
    """A loaded libgmp with typed function pointers.

    Functions are exposed under their documented mpz names
    (``lib.mpz_powm(rop, base, exp, mod)``).
    """

    def __init__(self, path: str):
        self.path = path
        try:
            self._dll = ctypes.CDLL(path)
        except OSError as exc:
            raise NativeResourceError(f"Failed to load libgmp at {path}: {exc}") from exc

        for attr, (symbol, restype, argtypes) in _SIGNATURES.items():
            try:
                fn = getattr(self._dll, symbol)
            except AttributeError as exc:
                raise NativeResourceError(
                    f"libgmp at {path} does not export {symbol} "
                    "(GMP >= 5 is required)"
                ) from exc
            fn.restype = restype
            fn.argtypes = argtypes
            setattr(self, attr, fn)

        self.version = ctypes.c_char_p.in_dll(self._dll, "__gmp_version").value.decode()
        self.bits_per_limb = ctypes.c_int.in_dll(self._dll, "__gmp_bits_per_limb").value

    def __repr__(self):
        return f"GmpLibrary(path={self.path!r}, version={self.version!r})"


def load_library(explicit: Optional[str] = None) -> GmpLibrary:
    """Load libgmp from the first candidate that works.

    Raises:
        NativeResourceError: no candidate could be loaded.
    """
    if explicit is None:
        explicit = default_config().library_path
    errors = []
    for c in _candidate_paths(explicit):
        try:
            return GmpLibrary(c)
        except NativeResourceError as exc:
            errors.append(str(exc))
    raise NativeResourceError(
        "libgmp not found. Install GMP (e.g. libgmp10) or set MODGMP_LIB "
        "to the shared library path. Tried: " + "; ".join(errors[-3:])
    )


# ---------------------------------------------------------------------------
# Load the library (best-effort)
# ---------------------------------------------------------------------------

HAS_NATIVE_GMP = False
_lib: Optional[GmpLibrary] = None

try:
    _lib = load_library()
    HAS_NATIVE_GMP = True
except NativeResourceError as exc:
    if get_gmp_library_path() is not None:
        # Present on disk but unusable: worth telling someone about.
        warnings.warn(
            f"Found libgmp but failed to load it: {exc}. "
            "Native modular arithmetic will not be available.",
            RuntimeWarning,
        )


def get_library() -> GmpLibrary:
    """Return the loaded libgmp.

    Raises:
        NativeResourceError: libgmp could not be loaded at import time.
    """
    if _lib is None:
        raise NativeResourceError(
            "libgmp is not available. Install GMP or set MODGMP_LIB."
        )
    return _lib
