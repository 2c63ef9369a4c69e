"""Configuration module for SiteMix parameters."""

# Structured parameter system
from .params import (
    AlgorithmParams,
    IOParams,
    RuntimeParams,
    SitemixParams,
)
from .loader import DEFAULT_CONFIG_PATH, load_yaml as load_sitemix_params

__all__ = [
    "AlgorithmParams",
    "IOParams",
    "RuntimeParams",
    "SitemixParams",
    "DEFAULT_CONFIG_PATH",
    "load_sitemix_params",
]
