"""Workflow and agent definitions: parsing, discovery, variable resolution, queries."""
from __future__ import annotations

from bmadkit_definitions.agent_parser import parse_agent_document, parse_agent_file
from bmadkit_definitions.handlers import (
    handle_get_agent_menu,
    handle_get_workflow_context,
    handle_list_workflows,
)
from bmadkit_definitions.manifest_parser import (
    is_workflow_directory,
    load_workflow,
    parse_manifest,
)
from bmadkit_definitions.queries import get_agent_menu, get_workflow_context, list_workflows
from bmadkit_definitions.resolver import (
    MAX_RESOLVE_DEPTH,
    create_resolve_context,
    load_config_document,
    resolve_object,
    resolve_variable,
)
from bmadkit_definitions.scanner import DefinitionTreeScanner, derive_category
from bmadkit_definitions.types import (
    AgentDescriptor,
    AgentIdentity,
    AgentMenu,
    DiscoveredWorkflow,
    DiscoveryResult,
    LoadedWorkflow,
    MenuItem,
    Persona,
    ResolveContext,
    ToolResponse,
    WorkflowContext,
    WorkflowDescriptor,
    WorkflowListing,
)

__all__ = [
    "MAX_RESOLVE_DEPTH",
    "AgentDescriptor",
    "AgentIdentity",
    "AgentMenu",
    "DefinitionTreeScanner",
    "DiscoveredWorkflow",
    "DiscoveryResult",
    "LoadedWorkflow",
    "MenuItem",
    "Persona",
    "ResolveContext",
    "ToolResponse",
    "WorkflowContext",
    "WorkflowDescriptor",
    "WorkflowListing",
    "create_resolve_context",
    "derive_category",
    "get_agent_menu",
    "get_workflow_context",
    "handle_get_agent_menu",
    "handle_get_workflow_context",
    "handle_list_workflows",
    "is_workflow_directory",
    "list_workflows",
    "load_config_document",
    "load_workflow",
    "parse_agent_document",
    "parse_agent_file",
    "parse_manifest",
    "resolve_object",
    "resolve_variable",
]
