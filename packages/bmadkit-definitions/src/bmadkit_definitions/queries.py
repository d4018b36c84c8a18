"""Read-only queries over a definitions root.

Each query scans and parses from scratch; nothing is cached between
calls.  Lookups that find nothing raise a NotFoundError subclass here
and nowhere else.
"""
from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from bmadkit_core.config import LayoutConfig
from bmadkit_core.errors import AgentNotFoundError, WorkflowNotFoundError
from bmadkit_core.logging import get_logger

from bmadkit_definitions.agent_parser import parse_agent_file
from bmadkit_definitions.manifest_parser import load_workflow
from bmadkit_definitions.render import build_execution_guide
from bmadkit_definitions.resolver import create_resolve_context, resolve_object
from bmadkit_definitions.scanner import DefinitionTreeScanner, derive_category
from bmadkit_definitions.types import AgentMenu, WorkflowContext, WorkflowListing

if TYPE_CHECKING:
    from bmadkit_definitions.types import ResolveContext

logger = get_logger("definitions.queries")

# Manifest fields that describe the workflow rather than parameterise it.
_NON_VARIABLE_FIELDS = frozenset({"name", "description", "author"})


def get_agent_menu(
    root: Path | str,
    agent_name: str,
    *,
    agents_dir: Path | str | None = None,
) -> AgentMenu:
    """Load the menu of the agent called *agent_name*.

    Args:
        root: Definitions root.
        agent_name: File stem or declared name of the agent.
        agents_dir: Directory holding agent documents; defaults to the
            conventional location under *root*.

    Raises:
        AgentNotFoundError: If no agent document matches.
        ParseError: If the matching document is malformed.
    """
    root = Path(root)
    if agents_dir is None:
        agents_dir = LayoutConfig().agents_path(root)

    path = DefinitionTreeScanner(root).find_agent_by_name(agents_dir, agent_name)
    if path is None:
        msg = f"Agent not found: {agent_name}"
        raise AgentNotFoundError(msg)

    return AgentMenu(agent=parse_agent_file(path), path=path)


def get_workflow_context(
    root: Path | str,
    project_root: Path | str,
    workflow_name: str,
    load_instructions: bool = True,
    resolve_config: bool = True,
    *,
    config_path: Path | str | None = None,
) -> WorkflowContext:
    """Gather everything needed to execute the workflow *workflow_name*.

    With *resolve_config*, every string in the manifest is passed through
    the resolver and the result includes ``resolved_variables``: the
    three built-in variables plus each other string-valued manifest
    field.

    Raises:
        WorkflowNotFoundError: If no manifest declares the name.
        ParseError: If the manifest is malformed.
        ResolutionError: If configuration references form a cycle.
    """
    root = Path(root)
    scanner = DefinitionTreeScanner(root)

    workflow_dir = scanner.find_workflow_by_name(workflow_name)
    if workflow_dir is None:
        msg = f"Workflow not found: {workflow_name}"
        raise WorkflowNotFoundError(msg)

    loaded = load_workflow(workflow_dir, load_instructions=load_instructions)
    relative = scanner.relative_path(workflow_dir)
    category = derive_category(relative)

    config: dict[str, Any] = loaded.descriptor.as_mapping()
    resolved_variables: dict[str, str] | None = None

    if resolve_config:
        context = create_resolve_context(
            project_root,
            bmad_root=root,
            config_path=config_path,
            workflow_dir=workflow_dir,
        )
        config = resolve_object(config, context)
        resolved_variables = _collect_variables(config, context)

    return WorkflowContext(
        name=loaded.name,
        description=loaded.descriptor.description,
        category=category,
        path=workflow_dir,
        relative_path=relative,
        standalone=loaded.descriptor.standalone,
        author=loaded.descriptor.author,
        config=config,
        resolved_variables=resolved_variables,
        instructions=loaded.instructions,
        execution_guide=build_execution_guide(loaded, resolved_variables),
    )


def list_workflows(
    root: Path | str,
    category: str | None = None,
    standalone_only: bool = False,
) -> WorkflowListing:
    """List workflows under *root*, optionally filtered.

    ``categories`` lists the distinct categories of the workflows that
    survive the filters, sorted.
    """
    discovered = DefinitionTreeScanner(root).discover()

    workflows = tuple(
        wf
        for wf in discovered.workflows
        if (not category or wf.category == category)
        and (not standalone_only or wf.descriptor.standalone)
    )
    categories = tuple(sorted({wf.category for wf in workflows}))

    logger.debug(
        "Listing %d of %d workflow(s) (category=%s, standalone_only=%s)",
        len(workflows),
        len(discovered.workflows),
        category,
        standalone_only,
    )
    return WorkflowListing(workflows=workflows, categories=categories)


def _collect_variables(
    resolved_config: dict[str, Any], context: ResolveContext
) -> dict[str, str]:
    variables: dict[str, str] = {
        "project-root": context.project_root,
        "config_source": context.config_path,
        "installed_path": context.workflow_dir or "",
    }
    for key, value in resolved_config.items():
        if isinstance(value, str) and key not in _NON_VARIABLE_FIELDS:
            variables[key] = value
    return variables
