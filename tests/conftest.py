from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from samples import (
    BRAINSTORM_WORKFLOW_YAML,
    CONFIG_YAML,
    DEV_AGENT_MD,
    DEV_STORY_WORKFLOW_YAML,
    write_file,
)

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """A project with a populated ``_bmad`` definitions root."""
    project = tmp_path / "project"
    bmad = project / "_bmad"

    write_file(bmad / "bmm" / "config.yaml", CONFIG_YAML)
    write_file(bmad / "bmm" / "agents" / "dev.md", DEV_AGENT_MD)

    dev_story = bmad / "bmm" / "workflows" / "4-implementation" / "dev-story"
    write_file(dev_story / "workflow.yaml", DEV_STORY_WORKFLOW_YAML)
    write_file(dev_story / "instructions.xml", "<workflow><step n=\"1\">Load story</step></workflow>\n")
    write_file(dev_story / "checklist.md", "- [ ] All tests pass\n")

    write_file(
        bmad / "bmm" / "workflows" / "1-analysis" / "brainstorm-project" / "workflow.yaml",
        BRAINSTORM_WORKFLOW_YAML,
    )
    return project


@pytest.fixture
def bmad_root(project_root: Path) -> Path:
    return project_root / "_bmad"
