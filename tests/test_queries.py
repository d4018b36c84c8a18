"""Tests for the list/context/menu queries."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest
from bmadkit_core.errors import (
    AgentNotFoundError,
    NotFoundError,
    ParseError,
    ResolutionError,
    WorkflowNotFoundError,
)
from bmadkit_definitions.queries import get_agent_menu, get_workflow_context, list_workflows

from samples import write_file

if TYPE_CHECKING:
    from pathlib import Path


class TestListWorkflows:
    """Tests for list_workflows."""

    def test_lists_dev_story(self, bmad_root: Path) -> None:
        listing = list_workflows(bmad_root)

        entries = {wf["name"]: wf for wf in listing.to_dict()["workflows"]}
        assert entries["dev-story"]["category"] == "4-implementation"
        assert entries["dev-story"]["standalone"] is True
        assert entries["dev-story"]["relativePath"] == "bmm/workflows/4-implementation/dev-story"
        assert listing.total_count == 2
        assert listing.categories == ("1-analysis", "4-implementation")

    def test_category_filter(self, bmad_root: Path) -> None:
        listing = list_workflows(bmad_root, category="1-analysis")

        assert [wf.descriptor.name for wf in listing.workflows] == ["brainstorm-project"]
        assert listing.categories == ("1-analysis",)

    def test_unmatched_category_is_empty(self, bmad_root: Path) -> None:
        listing = list_workflows(bmad_root, category="9-nothing")

        assert listing.workflows == ()
        assert listing.total_count == 0
        assert listing.to_dict()["total_count"] == 0

    def test_empty_category_means_no_filter(self, bmad_root: Path) -> None:
        listing = list_workflows(bmad_root, category="")

        assert listing.total_count == 2

    def test_standalone_only(self, bmad_root: Path) -> None:
        listing = list_workflows(bmad_root, standalone_only=True)

        assert [wf.descriptor.name for wf in listing.workflows] == ["dev-story"]

    def test_bad_manifest_skipped(
        self, bmad_root: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        write_file(
            bmad_root / "bmm" / "workflows" / "2-plan" / "broken" / "workflow.yaml",
            "description: missing name\n",
        )

        with caplog.at_level(logging.WARNING, logger="bmadkit"):
            listing = list_workflows(bmad_root)

        assert listing.total_count == 2
        assert "2-plan" not in listing.categories
        assert "Failed to parse workflow" in caplog.text

    def test_missing_root(self, tmp_path: Path) -> None:
        listing = list_workflows(tmp_path / "missing")

        assert listing.total_count == 0
        assert listing.categories == ()


class TestGetWorkflowContext:
    """Tests for get_workflow_context."""

    def test_resolved_variables(self, project_root: Path, bmad_root: Path) -> None:
        context = get_workflow_context(bmad_root, str(project_root), "dev-story", True, True)

        variables = context.resolved_variables
        assert variables is not None
        assert variables["project-root"] == str(project_root)
        assert "dev-story" in variables["installed_path"]
        assert variables["config_source"] == str(bmad_root / "bmm" / "config.yaml")
        assert variables["user_name"] == "Ada"
        assert variables["output_folder"] == f"{project_root}/docs"
        assert variables["instructions"].endswith("dev-story/instructions.xml")
        assert "name" not in variables
        assert "description" not in variables
        assert "author" not in variables

    def test_whole_manifest_resolved(self, project_root: Path, bmad_root: Path) -> None:
        context = get_workflow_context(bmad_root, project_root, "dev-story")

        assert context.config["communication_language"] == "English"
        assert context.config["standalone"] is True
        assert context.config["template"] is False
        assert "{" not in context.config["installed_path"]

    def test_metadata(self, project_root: Path, bmad_root: Path) -> None:
        context = get_workflow_context(bmad_root, project_root, "dev-story")

        assert context.name == "dev-story"
        assert context.category == "4-implementation"
        assert context.relative_path == "bmm/workflows/4-implementation/dev-story"
        assert context.path == bmad_root / "bmm" / "workflows" / "4-implementation" / "dev-story"
        assert context.standalone is True
        assert context.author == "BMad"
        assert context.instructions == '<workflow><step n="1">Load story</step></workflow>\n'

    def test_without_resolution(self, project_root: Path, bmad_root: Path) -> None:
        context = get_workflow_context(
            bmad_root, project_root, "dev-story", load_instructions=False, resolve_config=False
        )

        assert context.resolved_variables is None
        assert context.instructions is None
        assert context.config["user_name"] == "{config_source}:user_name"
        assert "## Resolved Variables" not in context.execution_guide

    def test_execution_guide(self, project_root: Path, bmad_root: Path) -> None:
        guide = get_workflow_context(bmad_root, project_root, "dev-story").execution_guide

        assert guide.startswith("# Workflow Execution Guide: dev-story")
        assert "**Type**: Standalone workflow" in guide
        assert f"- **{{project-root}}**: `{project_root}`" in guide
        assert "## Execution Steps" in guide

    def test_disabled_instructions_field(self, project_root: Path, bmad_root: Path) -> None:
        quick = bmad_root / "bmm" / "workflows" / "2-plan" / "quick"
        write_file(quick / "workflow.yaml", "name: quick\ninstructions: false\n")
        write_file(quick / "instructions.md", "ignored\n")

        context = get_workflow_context(bmad_root, project_root, "quick")

        assert context.instructions is None
        assert context.config["instructions"] is False
        assert "instructions" not in context.resolved_variables
        assert "**Instructions**" not in context.execution_guide

    def test_missing_config_still_resolves_paths(
        self, project_root: Path, bmad_root: Path
    ) -> None:
        (bmad_root / "bmm" / "config.yaml").unlink()

        context = get_workflow_context(bmad_root, project_root, "dev-story")

        assert context.resolved_variables["project-root"] == str(project_root)
        assert context.config["user_name"] == "{config_source}:user_name"

    def test_config_cycle_is_fatal(self, project_root: Path, bmad_root: Path) -> None:
        write_file(
            bmad_root / "bmm" / "config.yaml",
            "user_name: '{config_source}:output_folder'\noutput_folder: '{config_source}:user_name'\n",
        )

        with pytest.raises(ResolutionError):
            get_workflow_context(bmad_root, project_root, "dev-story")

    def test_not_found(self, project_root: Path, bmad_root: Path) -> None:
        with pytest.raises(WorkflowNotFoundError, match="Workflow not found: ghost"):
            get_workflow_context(bmad_root, project_root, "ghost")


class TestGetAgentMenu:
    """Tests for get_agent_menu."""

    def test_menu(self, bmad_root: Path) -> None:
        menu = get_agent_menu(bmad_root, "dev")

        assert menu.path == bmad_root / "bmm" / "agents" / "dev.md"
        assert menu.agent.agent.title == "Developer Agent"
        data = menu.to_dict()
        assert data["agent"]["name"] == "dev"
        assert data["agent"]["icon"] == "💻"
        assert data["persona"]["role"] == "Senior Software Engineer"
        assert [item["type"] for item in data["menu_items"]] == [
            "other",
            "workflow",
            "exec",
            "action",
            "other",
        ]
        assert data["menu_items"][0]["cmd"] == "*help"

    def test_custom_agents_dir(self, tmp_path: Path, bmad_root: Path) -> None:
        agents = tmp_path / "elsewhere"
        write_file(agents / "dev.md", (bmad_root / "bmm" / "agents" / "dev.md").read_text(encoding="utf-8"))

        menu = get_agent_menu(bmad_root, "dev", agents_dir=agents)

        assert menu.path == agents / "dev.md"

    def test_not_found(self, bmad_root: Path) -> None:
        with pytest.raises(AgentNotFoundError, match="Agent not found: nonexistent-agent") as exc:
            get_agent_menu(bmad_root, "nonexistent-agent")

        assert isinstance(exc.value, NotFoundError)

    def test_malformed_agent_propagates(self, bmad_root: Path) -> None:
        write_file(bmad_root / "bmm" / "agents" / "broken.md", "---\nname: broken\n---\nno xml\n")

        with pytest.raises(ParseError, match="no structured block"):
            get_agent_menu(bmad_root, "broken")
