#!/usr/bin/env python3
"""
Validation script for a modgmp installation.

Runs a sequence of checks:
1. libgmp detection and version
2. Exponentiation vs Python pow (insecure + secure)
3. Secure-path preconditions
4. Auxiliary operations (gcd, inverse, exact divide, kronecker)
5. Per-thread contexts and explicit release

Usage:
    python scripts/validate_gmp.py
    python scripts/validate_gmp.py --output-dir outputs/validate
    MODGMP_LIB=/opt/gmp/lib python scripts/validate_gmp.py
"""

import argparse
import random
import sys
import os
import threading
import time
import traceback
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))


def section(name: str):
    print(f"\n{'='*60}")
    print(f"  {name}")
    print(f"{'='*60}")


def main(argv=None):
    from modgmp.config import default_config
    from modgmp.logging import RunLogger, create_manifest

    parser = argparse.ArgumentParser(description="Validate a modgmp installation")
    parser.add_argument("--output-dir", type=str,
                        default=default_config().metrics_dir,
                        help="Write manifest.json and checks.jsonl here "
                             "(default: MODGMP_METRICS_DIR)")
    args = parser.parse_args(argv)

    logger = None
    if args.output_dir:
        run_id = f"validate_{int(time.time())}"
        create_manifest(run_id).save(Path(args.output_dir) / "manifest.json")
        logger = RunLogger(args.output_dir)

    results = []

    def check(name: str, passed: bool, detail: str = ""):
        status = "PASS" if passed else "FAIL"
        mark = "✓" if passed else "✗"
        print(f"  [{status}] {mark} {name}" + (f" -- {detail}" if detail else ""))
        if logger is not None:
            logger.log_check(name, passed, detail)
        results.append(passed)
        return passed

    print("modgmp Validation Suite")
    print(f"Python: {sys.version}")
    print(f"CWD: {os.getcwd()}")

    # ---------------------------------------------------------------
    # 1. libgmp detection
    # ---------------------------------------------------------------
    section("1. libgmp Detection")

    from modgmp.native.bindings import HAS_NATIVE_GMP, get_gmp_library_path, get_library
    print(f"  MODGMP_LIB = {os.environ.get('MODGMP_LIB', 'not set')}")
    print(f"  Library on disk: {get_gmp_library_path()}")

    if not check("libgmp loaded", HAS_NATIVE_GMP):
        print("\n  libgmp is required for the remaining checks.")
        if logger is not None:
            logger.close()
        return 1

    gmp = get_library()
    check("GMP version >= 5", int(gmp.version.split(".")[0]) >= 5,
          f"{gmp.version} at {gmp.path}, {gmp.bits_per_limb}-bit limbs")

    from modgmp import (
        mod_pow_insecure, mod_pow_secure, mod_inverse, gcd, exact_divide,
        kronecker, PreparedOperand, InvalidArgumentError, ModulusNotPositiveError,
        default_pool, release_thread_context,
    )
    from modgmp.native import reference

    rng = random.Random(12345)

    # ---------------------------------------------------------------
    # 2. Exponentiation
    # ---------------------------------------------------------------
    section("2. Modular Exponentiation vs Python pow")

    try:
        for bits in (64, 512, 2048):
            m = rng.getrandbits(bits) | 1 | (1 << (bits - 1))
            cases = [(rng.getrandbits(bits), rng.getrandbits(bits)) for _ in range(20)]
            ok_insecure = all(mod_pow_insecure(b, e, m) == pow(b, e, m) for b, e in cases)
            ok_secure = all(mod_pow_secure(b, e, m) == pow(b, e, m) for b, e in cases)
            check(f"mod_pow_insecure {bits}-bit", ok_insecure)
            check(f"mod_pow_secure {bits}-bit", ok_secure)

        m_even = rng.getrandbits(256) & ~1
        check("mod_pow_insecure even modulus",
              mod_pow_insecure(3, 65537, m_even) == pow(3, 65537, m_even))

        pm = PreparedOperand(rng.getrandbits(1024) | 1)
        t0 = time.time()
        same = len({mod_pow_secure(5, 1 << 100, pm) for _ in range(10)}) == 1
        check("Prepared modulus reused", same and pm.is_prepared,
              f"{time.time() - t0:.4f}s for 10 calls")
    except Exception as e:
        check("Exponentiation", False, str(e))
        traceback.print_exc()

    # ---------------------------------------------------------------
    # 3. Secure-path preconditions
    # ---------------------------------------------------------------
    section("3. Secure-Path Preconditions")

    def raises(fn, exc_type):
        try:
            fn()
        except exc_type:
            return True
        except Exception:
            return False
        return False

    check("Negative base rejected",
          raises(lambda: mod_pow_secure(-1, 1, 1), InvalidArgumentError))
    check("Negative exponent rejected",
          raises(lambda: mod_pow_secure(1, -1, 1), InvalidArgumentError))
    check("Even modulus rejected",
          raises(lambda: mod_pow_secure(2, 3, 10), InvalidArgumentError))
    check("Zero modulus rejected",
          raises(lambda: mod_pow_secure(2, 3, 0), ModulusNotPositiveError))
    check("Insecure zero modulus is ArithmeticError",
          raises(lambda: mod_pow_insecure(2, 3, 0), ArithmeticError))

    # ---------------------------------------------------------------
    # 4. Auxiliary operations
    # ---------------------------------------------------------------
    section("4. Auxiliary Operations")

    try:
        check("gcd", gcd(99, 88) == 11 and gcd(-12, 18) == 6)
        check("mod_inverse", mod_inverse(3, 5) == 2 and mod_inverse(7, 1) == 0)
        check("mod_inverse not invertible",
              raises(lambda: mod_inverse(3, 9), ArithmeticError))
        a, b = rng.getrandbits(900), rng.getrandbits(400) + 1
        check("exact_divide", exact_divide(a * b, b) == a)
        table = [kronecker(x, 7) for x in range(8)]
        check("kronecker (n=7)", table == [0, 1, 1, -1, 1, -1, -1, 0], str(table))
        ok = all(kronecker(x, n) == reference.kronecker(x, n)
                 for x in range(-15, 16) for n in range(-15, 16))
        check("kronecker vs reference", ok)
    except Exception as e:
        check("Auxiliary operations", False, str(e))
        traceback.print_exc()

    # ---------------------------------------------------------------
    # 5. Contexts
    # ---------------------------------------------------------------
    section("5. Per-Thread Contexts")

    try:
        pool = default_pool()
        before = pool.created
        errors = []

        def worker(seed):
            r = random.Random(seed)
            m = r.getrandbits(512) | 1
            for _ in range(50):
                b, e = r.getrandbits(512), r.getrandbits(64)
                if mod_pow_secure(b, e, m) != pow(b, e, m):
                    errors.append(seed)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        check("Concurrent threads", not errors,
              f"{pool.created - before} contexts created")
        mod_pow_insecure(2, 3, 5)
        check("Explicit release", release_thread_context() and not release_thread_context())
    except Exception as e:
        check("Contexts", False, str(e))
        traceback.print_exc()

    # ---------------------------------------------------------------
    # Summary
    # ---------------------------------------------------------------
    section("Summary")

    n_pass = sum(1 for r in results if r)
    n_fail = sum(1 for r in results if not r)
    n_total = len(results)

    print(f"\n  {n_pass}/{n_total} checks passed, {n_fail} failed")
    if n_fail == 0:
        print("\n  All checks PASSED.")
    else:
        print("\n  Some checks FAILED. Review output above.")

    if logger is not None:
        logger.close()

    return 0 if n_fail == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
