from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

ENV_ENGINE = "LAZYGRAPH_ENGINE"
ENV_LOG_LEVEL = "LAZYGRAPH_LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    engine: str = "numpy"
    log_level: str = "WARNING"


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Read settings from the environment, falling back to defaults."""
    env = os.environ if environ is None else environ
    defaults = Settings()
    engine = env.get(ENV_ENGINE, "").strip() or defaults.engine
    log_level = env.get(ENV_LOG_LEVEL, "").strip().upper() or defaults.log_level
    return Settings(engine=engine, log_level=log_level)
