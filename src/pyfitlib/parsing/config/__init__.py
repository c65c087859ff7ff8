"""Fitting configuration and YAML key definitions."""

from .fit_config import FitConfig, FitConfigParser, load_fit_config
from . import yaml_keys as _yk

# Re-export everything defined in yaml_keys.__all__
globals().update({k: getattr(_yk, k) for k in _yk.__all__})

__all__ = [
    "FitConfig",
    "FitConfigParser",
    "load_fit_config",
    *_yk.__all__,
]
