"""
Runtime settings for the compiler front end.

Values come from constructor arguments first, then SQLFRONT_* environment
variables, then the defaults below.
"""

import os
from dataclasses import dataclass
from typing import Optional

ENV_PREFIX = "SQLFRONT_"

DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_MAX_DEPTH = 100
DEFAULT_TREE_FORMAT = "png"


def _env(name, default=None):
    return os.environ.get(ENV_PREFIX + name, default)


@dataclass
class Settings:
    """Front end settings"""

    log_level: Optional[str] = None
    # Deepest nesting of parenthesised / NOT conditions the parser will follow
    max_condition_depth: Optional[int] = None
    tree_format: Optional[str] = None

    def __post_init__(self):
        if self.log_level is None:
            self.log_level = _env("LOG_LEVEL", DEFAULT_LOG_LEVEL)
        self.log_level = self.log_level.upper()

        if self.max_condition_depth is None:
            raw = _env("MAX_DEPTH")
            try:
                self.max_condition_depth = int(raw) if raw else DEFAULT_MAX_DEPTH
            except ValueError:
                raise ValueError(f"{ENV_PREFIX}MAX_DEPTH must be an integer, got {raw!r}") from None
        if self.max_condition_depth < 1:
            raise ValueError("max_condition_depth must be at least 1")

        if self.tree_format is None:
            self.tree_format = _env("TREE_FORMAT", DEFAULT_TREE_FORMAT)

    @classmethod
    def from_env(cls):
        return cls()
