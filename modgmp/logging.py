"""
Structured run records for validation and benchmark runs.

Produces:
  - manifest.json:  one-time run metadata (git hash, GMP build, config, node)
  - timings.jsonl:  one line per timed benchmark case
  - checks.jsonl:   one line per validation check
"""

import json
import os
import platform
import subprocess
import sys
import time
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Dict, Any, Optional

from .config import GmpConfig, default_config


@dataclass
class RunManifest:
    """Run-level metadata, saved once per run."""
    run_id: str
    timestamp: str
    git_commit: str
    gmp_version: str
    gmp_library: str
    bits_per_limb: int
    python_version: str
    node_name: str
    config: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def save(self, path: Path):
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2, default=str)


def _get_git_commit() -> str:
    """Get current git commit hash, or 'unknown'."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "HEAD"],
            capture_output=True, text=True, timeout=5,
        )
        return result.stdout.strip() if result.returncode == 0 else "unknown"
    except (OSError, subprocess.SubprocessError):
        return "unknown"


def create_manifest(run_id: str, config: Optional[GmpConfig] = None) -> RunManifest:
    """Create a RunManifest describing the loaded libgmp."""
    from .native.bindings import HAS_NATIVE_GMP, get_library

    config = config or default_config()
    if HAS_NATIVE_GMP:
        gmp = get_library()
        version, path, limb = gmp.version, gmp.path, gmp.bits_per_limb
    else:
        version, path, limb = "unavailable", "", 0

    return RunManifest(
        run_id=run_id,
        timestamp=time.strftime("%Y-%m-%dT%H:%M:%S%z"),
        git_commit=_get_git_commit(),
        gmp_version=version,
        gmp_library=path,
        bits_per_limb=limb,
        python_version=sys.version,
        node_name=os.environ.get("HOSTNAME", platform.node()),
        config=config.to_dict(),
    )


class RunLogger:
    """Structured JSONL logger for one validation or benchmark run."""

    def __init__(self, output_dir: Path):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

        self._timings_path = self.output_dir / "timings.jsonl"
        self._checks_path = self.output_dir / "checks.jsonl"

        # Append mode so reruns into the same directory accumulate
        self._timings_f = open(self._timings_path, 'a')
        self._checks_f = open(self._checks_path, 'a')

        self._timings_count = 0
        self._checks_count = 0
        self._failures_count = 0

    def log_timing(self, record: Dict[str, Any]):
        """Log one benchmark case (name, iterations, seconds, ...)."""
        record["timestamp"] = time.time()
        self._timings_f.write(json.dumps(record, default=str) + "\n")
        self._timings_f.flush()
        self._timings_count += 1

    def log_check(self, name: str, passed: bool, detail: str = ""):
        """Log one validation check."""
        record = {
            "name": name,
            "passed": bool(passed),
            "detail": detail,
            "timestamp": time.time(),
        }
        self._checks_f.write(json.dumps(record) + "\n")
        self._checks_f.flush()
        self._checks_count += 1
        if not passed:
            self._failures_count += 1

    def close(self):
        """Flush and close all log files."""
        for f in [self._timings_f, self._checks_f]:
            if not f.closed:
                f.flush()
                f.close()

    @property
    def summary(self) -> Dict[str, int]:
        return {
            "timings_logged": self._timings_count,
            "checks_logged": self._checks_count,
            "checks_failed": self._failures_count,
        }

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
