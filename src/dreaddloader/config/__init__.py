"""
config package - Pipeline configuration models and YAML loading.
"""

from .models import ColumnHeaders, KnownException, PipelineConfig, create_config
from .yaml_config import load_config

__all__ = [
    "ColumnHeaders",
    "KnownException",
    "PipelineConfig",
    "create_config",
    "load_config",
]
