"""
Runtime configuration for modgmp.

Values come from the environment (MODGMP_*) unless a GmpConfig is passed
explicitly.  The process-wide default is built lazily on first use.
"""

import os
from dataclasses import dataclass, asdict
from typing import Any, Dict, Mapping, Optional

SUPPORTED_WORD_BYTES = (4, 8)
MIN_SCRATCH_SLOTS = 4   # result + three operands (powm)


@dataclass
class GmpConfig:
    """Configuration for library discovery and native marshaling."""
    library_path: Optional[str] = None   # libgmp file or directory to try first
    word_bytes: int = 8                  # word size of prepared operand buffers
    scratch_slots: int = MIN_SCRATCH_SLOTS  # mpz_t slots per thread context
    metrics_dir: Optional[str] = None    # default output dir for scripts

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "GmpConfig":
        env = os.environ if environ is None else environ
        cfg = cls(
            library_path=env.get("MODGMP_LIB") or None,
            word_bytes=int(env.get("MODGMP_WORD_BYTES", cls.word_bytes)),
            scratch_slots=int(env.get("MODGMP_SCRATCH_SLOTS", cls.scratch_slots)),
            metrics_dir=env.get("MODGMP_METRICS_DIR") or None,
        )
        cfg.validate()
        return cfg

    def validate(self):
        if self.word_bytes not in SUPPORTED_WORD_BYTES:
            raise ValueError(
                f"word_bytes must be one of {SUPPORTED_WORD_BYTES}, "
                f"got {self.word_bytes}"
            )
        if self.scratch_slots < MIN_SCRATCH_SLOTS:
            raise ValueError(
                f"scratch_slots must be >= {MIN_SCRATCH_SLOTS}, "
                f"got {self.scratch_slots}"
            )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


_default: Optional[GmpConfig] = None


def default_config() -> GmpConfig:
    """Return the process-wide config, reading the environment on first call."""
    global _default
    if _default is None:
        _default = GmpConfig.from_env()
    return _default


def set_default_config(config: GmpConfig) -> None:
    """Replace the process-wide config.

    Only affects operands and contexts created afterwards; the loaded
    library is not reloaded.
    """
    global _default
    config.validate()
    _default = config
