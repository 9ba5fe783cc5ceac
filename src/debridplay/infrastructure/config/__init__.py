from __future__ import annotations

from .load import load_config
from .schema import AppConfig, EnvOverrides, StreamingConfig

__all__ = ["AppConfig", "EnvOverrides", "StreamingConfig", "load_config"]
