"""Tool-facing entry points: run a query, return text, never raise.

These are what a transport (an MCP server, a CLI, ...) calls.  Each takes
the *project* root, derives the definitions root from the layout
configuration and renders the query result as Markdown.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

from bmadkit_core.config import LayoutConfig
from bmadkit_core.errors import BmadkitError, NotFoundError
from bmadkit_core.logging import get_logger

from bmadkit_definitions import queries
from bmadkit_definitions.render import (
    render_agent_menu,
    render_workflow_context,
    render_workflow_listing,
)
from bmadkit_definitions.types import ToolResponse

if TYPE_CHECKING:
    from pathlib import Path

    from bmadkit_core.config import BmadkitConfig

logger = get_logger("definitions.handlers")

# Undecodable documents surface as UnicodeDecodeError rather than OSError.
_QUERY_ERRORS = (BmadkitError, OSError, UnicodeDecodeError)


def handle_list_workflows(
    project_root: Path | str,
    category: str | None = None,
    standalone_only: bool = False,
    config: BmadkitConfig | None = None,
) -> ToolResponse:
    layout = _layout(config)
    try:
        listing = queries.list_workflows(
            layout.bmad_root(project_root),
            category=category,
            standalone_only=standalone_only,
        )
    except _QUERY_ERRORS as exc:
        return _failure("list workflows", exc)
    return ToolResponse(text=render_workflow_listing(listing))


def handle_get_workflow_context(
    project_root: Path | str,
    workflow_name: str,
    load_instructions: bool = True,
    resolve_config: bool = True,
    config: BmadkitConfig | None = None,
) -> ToolResponse:
    layout = _layout(config)
    bmad_root = layout.bmad_root(project_root)
    try:
        context = queries.get_workflow_context(
            bmad_root,
            project_root,
            workflow_name,
            load_instructions,
            resolve_config,
            config_path=layout.config_path(bmad_root),
        )
    except _QUERY_ERRORS as exc:
        return _failure("get workflow context", exc)
    return ToolResponse(text=render_workflow_context(context))


def handle_get_agent_menu(
    project_root: Path | str,
    agent_name: str,
    config: BmadkitConfig | None = None,
) -> ToolResponse:
    layout = _layout(config)
    bmad_root = layout.bmad_root(project_root)
    try:
        menu = queries.get_agent_menu(
            bmad_root,
            agent_name,
            agents_dir=layout.agents_path(bmad_root),
        )
    except _QUERY_ERRORS as exc:
        return _failure("get agent menu", exc)
    return ToolResponse(text=render_agent_menu(menu))


def _layout(config: BmadkitConfig | None) -> LayoutConfig:
    return config.layout if config is not None else LayoutConfig()


def _failure(action: str, exc: BaseException) -> ToolResponse:
    if isinstance(exc, NotFoundError):
        logger.info("%s", exc)
        return ToolResponse(text=str(exc), is_error=True, error_kind="not_found")
    logger.warning("Failed to %s: %s", action, exc)
    return ToolResponse(
        text=f"Failed to {action}: {exc}",
        is_error=True,
        error_kind="failure",
    )
