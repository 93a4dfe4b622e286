"""Configuration parsing modules for appbin."""

from .pipeline_config import (
    CONFIG_FILENAME,
    PipelineConfig,
    PipelineConfigError,
    load_config,
)
from .target_specs import TargetSpec, get_target_spec

__all__ = [
    "CONFIG_FILENAME",
    "PipelineConfig",
    "PipelineConfigError",
    "load_config",
    "TargetSpec",
    "get_target_spec",
]
