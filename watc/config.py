"""
Compiler configuration.

Options are a plain dataclass. The CLI builds them from its flags; library
callers construct them directly or read them from the environment.

Author: watc developers
"""

import logging
import os
from dataclasses import dataclass, fields, replace
from typing import Mapping, Optional

ENV_PREFIX = "WATC_"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean (1/0, true/false, yes/no, on/off), got {value!r}")


@dataclass
class CompilerOptions:
    """Settings for one compilation."""
    optimize: bool = True           # run constant folding and dead-code elimination
    recover: bool = False           # collect every lexical/syntax error instead of stopping at the first
    filename: str = "<string>"      # name used in diagnostics
    log_level: str = "WARNING"

    def __post_init__(self):
        self.log_level = self.log_level.upper()
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ValueError(f"unknown log level {self.log_level!r}")

    @property
    def log_level_value(self) -> int:
        return logging.getLevelName(self.log_level)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "CompilerOptions":
        """
        Build options from WATC_OPTIMIZE, WATC_RECOVER and WATC_LOG_LEVEL.

        Keyword overrides win over the environment.

        Raises:
            ValueError: If a variable holds an invalid value
        """
        environ = os.environ if environ is None else environ
        values = {}

        optimize = environ.get(ENV_PREFIX + "OPTIMIZE")
        if optimize is not None:
            values["optimize"] = _parse_bool(ENV_PREFIX + "OPTIMIZE", optimize)

        recover = environ.get(ENV_PREFIX + "RECOVER")
        if recover is not None:
            values["recover"] = _parse_bool(ENV_PREFIX + "RECOVER", recover)

        log_level = environ.get(ENV_PREFIX + "LOG_LEVEL")
        if log_level:
            values["log_level"] = log_level

        values.update(overrides)
        return cls(**values)

    def with_overrides(self, **changes) -> "CompilerOptions":
        """Return a copy with the given fields replaced; None values are ignored."""
        known = {f.name for f in fields(self)}
        unknown = set(changes) - known
        if unknown:
            raise TypeError(f"unknown option(s): {', '.join(sorted(unknown))}")
        return replace(self, **{k: v for k, v in changes.items() if v is not None})
