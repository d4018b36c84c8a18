"""Markdown rendering of query results."""
from __future__ import annotations

from typing import TYPE_CHECKING

from bmadkit_definitions.manifest_parser import MANIFEST_FILENAME

if TYPE_CHECKING:
    from bmadkit_definitions.types import (
        AgentMenu,
        LoadedWorkflow,
        WorkflowContext,
        WorkflowListing,
    )


def build_execution_guide(
    workflow: LoadedWorkflow,
    resolved_variables: dict[str, str] | None = None,
) -> str:
    """Step-by-step guide for running *workflow*.

    Paths shown under "Configuration" are the manifest's own values,
    before resolution; resolved values get their own section.
    """
    manifest = workflow.descriptor
    sections: list[str] = [f"# Workflow Execution Guide: {workflow.name}\n"]

    if manifest.description:
        sections.append(f"**Description**: {manifest.description}\n")

    if manifest.standalone:
        sections.append("**Type**: Standalone workflow (can be executed independently)\n")

    sections.append("## Configuration\n")
    sections.append(f"- **Workflow Path**: `{workflow.path}`")
    if manifest.config_source:
        sections.append(f"- **Config Source**: `{manifest.config_source}`")
    if isinstance(manifest.instructions, str) and manifest.instructions:
        sections.append(f"- **Instructions**: `{manifest.instructions}`")

    if resolved_variables:
        sections.append("\n## Resolved Variables\n")
        for key, value in resolved_variables.items():
            sections.append(f"- **{{{key}}}**: `{value}`")

    sections.append("\n## Execution Steps\n")
    sections.append(
        f"1. Load the workflow configuration from `{workflow.path / MANIFEST_FILENAME}`"
    )
    sections.append("2. Resolve all template variables using the config source")
    sections.append("3. Load instructions from the specified path")
    sections.append("4. Execute the workflow according to the instructions")

    return "\n".join(sections) + "\n"


def render_workflow_listing(listing: WorkflowListing) -> str:
    lines: list[str] = [f"Found {listing.total_count} workflow(s)\n"]

    if listing.categories:
        lines.append(f"**Categories**: {', '.join(listing.categories)}\n")

    if not listing.workflows:
        lines.append("No workflows found matching the criteria.")
        return "\n".join(lines)

    lines.append("**Workflows**:")
    for wf in listing.workflows:
        marker = " [standalone]" if wf.descriptor.standalone else ""
        lines.append(f"\n- **{wf.descriptor.name}** ({wf.category}){marker}")
        if wf.descriptor.description:
            lines.append(f"  {wf.descriptor.description}")
        lines.append(f"  Path: {wf.relative_path}")

    return "\n".join(lines) + "\n"


def render_workflow_context(context: WorkflowContext) -> str:
    lines: list[str] = [f"# Workflow Context: {context.name}\n"]
    lines.append(f"**Category**: {context.category}")
    lines.append(f"**Path**: `{context.relative_path}`")
    if context.description:
        lines.append(f"**Description**: {context.description}")
    if context.standalone:
        lines.append("**Type**: Standalone")
    if context.author:
        lines.append(f"**Author**: {context.author}")

    lines.append("")
    lines.append(context.execution_guide)

    if context.instructions:
        lines.append("## Instructions\n")
        lines.append(context.instructions)

    return "\n".join(lines)


def render_agent_menu(menu: AgentMenu) -> str:
    agent = menu.agent
    title = agent.agent.title
    if agent.agent.icon:
        title = f"{title} {agent.agent.icon}"

    lines: list[str] = [f"# Agent Menu: {agent.name}\n"]
    lines.append(f"**Title**: {title}")
    if agent.description:
        lines.append(f"**Description**: {agent.description}")
    lines.append(f"**Path**: `{menu.path}`")

    persona = agent.persona
    if persona is not None:
        lines.append("\n## Persona\n")
        if persona.role:
            lines.append(f"**Role**: {persona.role}")
        if persona.identity:
            lines.append(f"**Identity**: {persona.identity}")
        if persona.communication_style:
            lines.append(f"**Communication Style**: {persona.communication_style}")

    lines.append(f"\n## Menu Items ({len(agent.menu)})\n")
    for item in agent.menu:
        lines.append(f"### {item.label}\n")
        if item.cmd:
            lines.append(f"- **Command**: `{item.cmd}`")
        lines.append(f"- **Type**: {item.type}")
        if item.workflow:
            lines.append(f"- **Workflow**: `{item.workflow}`")
        if item.exec:
            lines.append(f"- **Execute**: `{item.exec}`")
        lines.append("")

    return "\n".join(lines)
