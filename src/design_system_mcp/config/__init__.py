"""
Configuration for design system extraction.
"""

from .settings import (
    DesignLibrary,
    DesignSystemConfig,
    Framework,
    OutputMode,
    OutputSettings,
    StorybookSettings,
    get_default_chain_config,
    get_default_config,
    load_config,
)

__all__ = [
    "DesignLibrary",
    "DesignSystemConfig",
    "Framework",
    "OutputMode",
    "OutputSettings",
    "StorybookSettings",
    "get_default_chain_config",
    "get_default_config",
    "load_config",
]
