#!/usr/bin/env python3
"""
Benchmark modular exponentiation on RSA-CRT shaped inputs.

Times m^dp mod p for:
  - builtin pow
  - mod_pow_insecure / mod_pow_secure with plain ints
  - mod_pow_insecure / mod_pow_secure with PreparedOperand (cached) inputs

Primes come from sympy.nextprime on random starting points, so every run
uses fresh keys unless --seed is given.

Usage:
    python scripts/benchmark_modpow.py
    python scripts/benchmark_modpow.py --bits 2048 3072 --iterations 200
    python scripts/benchmark_modpow.py --output-dir outputs/bench --seed 7
"""

import argparse
import random
import sys
import time
from pathlib import Path

import sympy

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from modgmp import (
    mod_pow_insecure, mod_pow_secure, PreparedOperand, HAS_NATIVE_GMP,
)
from modgmp.config import default_config
from modgmp.logging import RunLogger, create_manifest

E = 65537


def make_key_half(bits: int, rng: random.Random):
    """Prime p of about ``bits`` bits with gcd(E, p-1) == 1, and dp = E^-1 mod p-1.

    The starting point is drawn from ``rng`` so --seed reproduces the keys.
    """
    while True:
        p = sympy.nextprime(rng.getrandbits(bits) | (1 << (bits - 1)))
        if (p - 1) % E:
            return p, pow(E, -1, p - 1)


def time_case(fn, args, iterations: int) -> float:
    t0 = time.perf_counter()
    for _ in range(iterations):
        fn(*args)
    return time.perf_counter() - t0


def main(argv=None):
    parser = argparse.ArgumentParser(description="modgmp modPow benchmark")
    parser.add_argument("--bits", type=int, nargs="+", default=[1024, 1536, 2048],
                        help="Prime sizes in bits (RSA modulus is twice this)")
    parser.add_argument("--iterations", type=int, default=100,
                        help="Calls per case")
    parser.add_argument("--seed", type=int, default=None,
                        help="Seed for reproducible keys and messages")
    parser.add_argument("--output-dir", type=str,
                        default=default_config().metrics_dir,
                        help="Write manifest.json and timings.jsonl here "
                             "(default: MODGMP_METRICS_DIR)")
    args = parser.parse_args(argv)

    if not HAS_NATIVE_GMP:
        print("ERROR: libgmp not available (install GMP or set MODGMP_LIB)")
        return 1

    rng = random.Random(args.seed)
    run_id = f"bench_{int(time.time())}"

    logger = None
    if args.output_dir:
        output_dir = Path(args.output_dir)
        create_manifest(run_id).save(output_dir / "manifest.json")
        logger = RunLogger(output_dir)

    print("=" * 60)
    print("modgmp modPow benchmark")
    print("=" * 60)
    print(f"  Run ID:      {run_id}")
    print(f"  Prime bits:  {args.bits}")
    print(f"  Iterations:  {args.iterations}")
    print("=" * 60)

    for bits in args.bits:
        p, dp = make_key_half(bits, rng)
        message = rng.getrandbits(2 * bits) % p
        prepared = (PreparedOperand(message), PreparedOperand(dp), PreparedOperand(p))

        expected = pow(message, dp, p)
        assert mod_pow_secure(*prepared) == expected

        cases = [
            ("builtin_pow", pow, (message, dp, p)),
            ("insecure", mod_pow_insecure, (message, dp, p)),
            ("insecure_prepared", mod_pow_insecure, prepared),
            ("secure", mod_pow_secure, (message, dp, p)),
            ("secure_prepared", mod_pow_secure, prepared),
        ]

        print(f"\n  {bits}-bit prime:")
        for name, fn, fn_args in cases:
            seconds = time_case(fn, fn_args, args.iterations)
            per_call_us = 1e6 * seconds / args.iterations
            print(f"    {name:<20s} {per_call_us:10.1f} us/call")
            if logger is not None:
                logger.log_timing({
                    "run_id": run_id,
                    "case": name,
                    "bits": bits,
                    "iterations": args.iterations,
                    "seconds": seconds,
                    "us_per_call": per_call_us,
                })

    if logger is not None:
        logger.close()
        print(f"\n  Output: {args.output_dir} ({logger.summary['timings_logged']} timings)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
