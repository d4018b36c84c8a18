"""bmadkit core: shared config, errors, and logging."""
from __future__ import annotations

from bmadkit_core._version import __version__
from bmadkit_core.config import BmadkitConfig, LayoutConfig, LoggingConfig
from bmadkit_core.errors import (
    AgentNotFoundError,
    BmadkitError,
    ConfigError,
    DefinitionError,
    NotFoundError,
    ParseError,
    ResolutionError,
    WorkflowNotFoundError,
)
from bmadkit_core.logging import get_logger, setup_logging

__all__ = [
    # Errors
    "AgentNotFoundError",
    # Config
    "BmadkitConfig",
    "BmadkitError",
    "ConfigError",
    "DefinitionError",
    "LayoutConfig",
    "LoggingConfig",
    "NotFoundError",
    "ParseError",
    "ResolutionError",
    "WorkflowNotFoundError",
    # Version
    "__version__",
    # Logging
    "get_logger",
    "setup_logging",
]
