"""Descriptor types for agent documents, workflow manifests and queries."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

MenuItemType = Literal["workflow", "exec", "action", "other"]


# ── Agent documents ──────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class AgentIdentity:
    """Attributes of the ``<agent>`` element."""

    id: str
    name: str
    title: str
    icon: str | None = None


@dataclass(frozen=True, slots=True)
class Persona:
    role: str | None = None
    identity: str | None = None
    communication_style: str | None = None
    principles: str | None = None


@dataclass(frozen=True, slots=True)
class MenuItem:
    """One ``<item>`` of an agent menu.

    Every XML attribute of the item is kept in ``attributes`` exactly as
    written, including names this class knows nothing about.  The
    properties below are conveniences over that bag.
    """

    label: str
    attributes: dict[str, str] = field(default_factory=dict)

    def get(self, name: str) -> str | None:
        return self.attributes.get(name)

    @property
    def cmd(self) -> str | None:
        return self.attributes.get("cmd")

    @property
    def workflow(self) -> str | None:
        return self.attributes.get("workflow")

    @property
    def exec(self) -> str | None:
        return self.attributes.get("exec")

    @property
    def tmpl(self) -> str | None:
        return self.attributes.get("tmpl")

    @property
    def data(self) -> str | None:
        return self.attributes.get("data")

    @property
    def action(self) -> str | None:
        return self.attributes.get("action")

    @property
    def validate_workflow(self) -> str | None:
        return self.attributes.get("validate-workflow")

    @property
    def type(self) -> MenuItemType:
        """Classification by precedence: workflow > exec > action > other."""
        if self.workflow:
            return "workflow"
        if self.exec:
            return "exec"
        if self.action:
            return "action"
        return "other"


@dataclass(frozen=True, slots=True)
class AgentDescriptor:
    """A fully parsed agent document.

    Combines the optional YAML metadata block with the contents of the
    fenced XML block.  Instances only exist for documents whose
    ``<agent>`` element carries ``id``, ``name`` and ``title``.
    """

    name: str
    agent: AgentIdentity
    description: str | None = None
    persona: Persona | None = None
    menu: tuple[MenuItem, ...] = ()
    activation: str | None = None
    source_path: Path | None = None


# ── Workflow manifests ───────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class WorkflowDescriptor:
    """A parsed ``workflow.yaml`` manifest.

    Recognised fields are typed attributes; everything else is kept in
    ``extra`` untouched so that later variable resolution sees it.
    """

    name: str
    description: str | None = None
    author: str | None = None
    standalone: bool | None = None
    config_source: str | None = None
    installed_path: str | None = None
    instructions: str | bool | None = None
    validation: str | bool | None = None
    template: str | bool | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def as_mapping(self) -> dict[str, Any]:
        """Return the manifest as a plain mapping (absent fields omitted)."""
        mapping: dict[str, Any] = {"name": self.name}
        for key in (
            "description",
            "author",
            "standalone",
            "config_source",
            "installed_path",
            "instructions",
            "validation",
            "template",
        ):
            value = getattr(self, key)
            if value is not None:
                mapping[key] = value
        mapping.update(self.extra)
        return mapping


@dataclass(frozen=True, slots=True)
class LoadedWorkflow:
    """A manifest plus whichever sibling documents were requested and found."""

    descriptor: WorkflowDescriptor
    path: Path
    instructions: str | None = None
    validation: str | None = None
    template: str | None = None

    @property
    def name(self) -> str:
        return self.descriptor.name


# ── Discovery ────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class DiscoveredWorkflow:
    descriptor: WorkflowDescriptor
    absolute_path: Path
    relative_path: str
    category: str


@dataclass(frozen=True, slots=True)
class DiscoveryResult:
    """Workflows found under a root, in traversal order."""

    workflows: tuple[DiscoveredWorkflow, ...] = ()
    categories: tuple[str, ...] = ()


# ── Variable resolution ──────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class ResolveContext:
    """Values available to placeholder substitution.

    ``config_data`` is ``None`` when the configuration document could not
    be loaded; ``{config_source}:KEY`` tokens are then left as written.
    """

    project_root: str
    bmad_root: str
    config_path: str
    workflow_dir: str | None = None
    config_data: Mapping[str, Any] | None = None


# ── Query results ────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class AgentMenu:
    agent: AgentDescriptor
    path: Path

    def to_dict(self) -> dict[str, Any]:
        persona = self.agent.persona
        return {
            "agent": {
                "name": self.agent.name,
                "description": self.agent.description,
                "title": self.agent.agent.title,
                "icon": self.agent.agent.icon,
                "path": str(self.path),
            },
            "persona": (
                {
                    "role": persona.role,
                    "identity": persona.identity,
                    "communication_style": persona.communication_style,
                }
                if persona is not None
                else None
            ),
            "menu_items": [
                {
                    "cmd": item.cmd,
                    "label": item.label,
                    "workflow": item.workflow,
                    "exec": item.exec,
                    "type": item.type,
                }
                for item in self.agent.menu
            ],
        }


@dataclass(frozen=True, slots=True)
class WorkflowContext:
    """Everything needed to execute one workflow."""

    name: str
    category: str
    path: Path
    relative_path: str
    config: dict[str, Any]
    execution_guide: str
    description: str | None = None
    standalone: bool | None = None
    author: str | None = None
    resolved_variables: dict[str, str] | None = None
    instructions: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "workflow": {
                "name": self.name,
                "description": self.description,
                "category": self.category,
                "path": str(self.path),
                "relativePath": self.relative_path,
                "standalone": self.standalone,
                "author": self.author,
                "config": self.config,
            },
            "resolved_variables": self.resolved_variables,
            "instructions": self.instructions,
            "execution_guide": self.execution_guide,
        }


@dataclass(frozen=True, slots=True)
class WorkflowListing:
    workflows: tuple[DiscoveredWorkflow, ...] = ()
    categories: tuple[str, ...] = ()

    @property
    def total_count(self) -> int:
        return len(self.workflows)

    def to_dict(self) -> dict[str, Any]:
        return {
            "workflows": [
                {
                    "name": wf.descriptor.name,
                    "description": wf.descriptor.description,
                    "category": wf.category,
                    "path": str(wf.absolute_path),
                    "relativePath": wf.relative_path,
                    "standalone": wf.descriptor.standalone,
                    "author": wf.descriptor.author,
                }
                for wf in self.workflows
            ],
            "total_count": self.total_count,
            "categories": list(self.categories),
        }


@dataclass(frozen=True, slots=True)
class ToolResponse:
    """Text handed back to a tool caller.

    ``error_kind`` is ``"not_found"`` for a missing agent/workflow and
    ``"failure"`` for every other error; ``None`` on success.
    """

    text: str
    is_error: bool = False
    error_kind: Literal["not_found", "failure"] | None = None
