from __future__ import annotations
import logging
import math
import os
from dataclasses import dataclass, asdict
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

_ENV_PREFIX = 'SEQUIN_'


@dataclass(frozen=True)
class ParallelConfig:
    """configuration for parallel evaluation"""
    max_workers: int = os.cpu_count() or 4
    min_partition_size: int = 1024  # sized sources at or below this are not split further
    max_split_depth: Optional[int] = None  # none derives it from max_workers
    split_batch_unit: int = 1024  # batch growth when splitting iterator-backed sources

    def __post_init__(self):
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be positive, got {self.max_workers}")
        if self.min_partition_size < 1:
            raise ValueError(f"min_partition_size must be positive, got {self.min_partition_size}")
        if self.split_batch_unit < 1:
            raise ValueError(f"split_batch_unit must be positive, got {self.split_batch_unit}")
        if self.max_split_depth is None:
            # aim for roughly four leaves per worker
            object.__setattr__(self, 'max_split_depth', math.ceil(math.log2(self.max_workers)) + 2)
        elif self.max_split_depth < 0:
            raise ValueError(f"max_split_depth cannot be negative, got {self.max_split_depth}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'ParallelConfig':
        """build a config from SEQUIN_* environment variables, falling back to defaults"""
        environ = os.environ if environ is None else environ
        overrides = {}
        for name in ('max_workers', 'min_partition_size', 'max_split_depth', 'split_batch_unit'):
            raw = environ.get(_ENV_PREFIX + name.upper())
            if raw is None or raw.strip() == '':
                continue
            try:
                overrides[name] = int(raw)
            except ValueError:
                raise ValueError(f"{_ENV_PREFIX + name.upper()} must be an integer, got {raw!r}") from None
        config = cls(**overrides)
        logger.debug(f"parallel config: {asdict(config)}")
        return config


_default_config: Optional[ParallelConfig] = None


def get_default_config() -> ParallelConfig:
    """the process-wide config used by stream.parallel() when none is given"""
    global _default_config
    if _default_config is None:
        _default_config = ParallelConfig.from_env()
    return _default_config


def set_default_config(config: Optional[ParallelConfig]) -> None:
    """replace the process-wide config; none re-reads the environment on next use"""
    global _default_config
    _default_config = config
