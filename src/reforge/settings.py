"""Runtime settings for reforge, read from the environment."""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEBUG_ENV_VAR = "REFORGE_DEBUG"

_FALSE_VALUES = {"", "0", "false", "no", "off"}


@dataclass
class Settings:
    """Process-wide settings.

    debug: log the full error chain (PII scrubbed) before the
        user-facing message is printed. Set via REFORGE_DEBUG.
    """
    debug: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        raw = env.get(DEBUG_ENV_VAR)
        return cls(debug=raw is not None and raw.strip().lower() not in _FALSE_VALUES)
