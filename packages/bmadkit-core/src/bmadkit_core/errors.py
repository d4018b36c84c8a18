from __future__ import annotations


class BmadkitError(Exception):
    """Base exception for all bmadkit errors."""


# ── Config Errors ────────────────────────────────────────────────────

class ConfigError(BmadkitError):
    """Invalid or missing configuration."""


# ── Definition Errors ────────────────────────────────────────────────

class DefinitionError(BmadkitError):
    """Base for agent/workflow definition errors."""


class ParseError(DefinitionError):
    """Definition document is malformed or missing a required part."""


class ResolutionError(DefinitionError):
    """Template variable resolution exceeded its recursion bound."""


class NotFoundError(DefinitionError):
    """A named definition does not exist under the definitions root."""


class AgentNotFoundError(NotFoundError):
    """No agent document declares the requested name."""


class WorkflowNotFoundError(NotFoundError):
    """No workflow manifest declares the requested name."""
