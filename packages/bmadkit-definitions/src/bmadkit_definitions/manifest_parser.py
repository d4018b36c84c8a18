"""workflow.yaml parser and sibling document loading."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from bmadkit_core.errors import ParseError
from bmadkit_core.logging import get_logger

from bmadkit_definitions.types import LoadedWorkflow, WorkflowDescriptor

logger = get_logger("definitions.manifest")

MANIFEST_FILENAME = "workflow.yaml"
INSTRUCTIONS_FILENAMES = ("instructions.xml", "instructions.md")
VALIDATION_FILENAME = "checklist.md"
TEMPLATE_FILENAME = "template.md"

_OPTIONAL_STR_FIELDS = ("description", "author", "config_source", "installed_path")
# Sibling document fields: a path string, or a boolean switch such as ``false``.
_DOCUMENT_FIELDS = ("instructions", "validation", "template")
_RECOGNISED_FIELDS = frozenset((*_OPTIONAL_STR_FIELDS, *_DOCUMENT_FIELDS, "name", "standalone"))


def parse_manifest(path: Path) -> WorkflowDescriptor:
    """Parse a workflow manifest into a WorkflowDescriptor.

    Args:
        path: Path to the ``workflow.yaml`` file.

    Returns:
        The descriptor; unrecognised keys land in ``extra`` unchanged.

    Raises:
        ParseError: If the YAML is malformed, not a mapping, or has no
            non-empty ``name``.
        OSError: If the file cannot be read.
    """
    text = Path(path).read_text(encoding="utf-8")

    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        msg = f"Invalid YAML in workflow manifest {path}: {exc}"
        raise ParseError(msg) from exc

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        msg = f"workflow manifest must be a mapping, got {type(raw).__name__}: {path}"
        raise ParseError(msg)

    name = raw.get("name")
    if name is None or not str(name).strip():
        msg = f"workflow manifest missing name field: {path}"
        raise ParseError(msg)

    optional = {key: _as_optional_str(raw.get(key)) for key in _OPTIONAL_STR_FIELDS}
    documents = {key: _as_document_field(raw.get(key)) for key in _DOCUMENT_FIELDS}

    return WorkflowDescriptor(
        name=str(name),
        standalone=_as_optional_bool(raw.get("standalone")),
        extra={k: v for k, v in raw.items() if k not in _RECOGNISED_FIELDS},
        **optional,
        **documents,
    )


def load_workflow(
    directory: Path,
    *,
    load_instructions: bool = True,
    load_validation: bool = False,
    load_template: bool = False,
) -> LoadedWorkflow:
    """Load a workflow directory: its manifest plus requested siblings.

    Sibling documents are read only when requested *and* declared in the
    manifest.  A sibling that cannot be read is left as ``None``; the
    manifest itself must parse.

    Raises:
        ParseError: If the manifest is invalid.
        OSError: If the manifest cannot be read.
    """
    directory = Path(directory)
    descriptor = parse_manifest(directory / MANIFEST_FILENAME)

    instructions = None
    if load_instructions and descriptor.instructions:
        for filename in INSTRUCTIONS_FILENAMES:
            instructions = _read_sibling(directory / filename)
            if instructions is not None:
                break

    validation = None
    if load_validation and descriptor.validation:
        validation = _read_sibling(directory / VALIDATION_FILENAME)

    template = None
    if load_template and isinstance(descriptor.template, str) and descriptor.template:
        template = _read_sibling(directory / TEMPLATE_FILENAME)

    return LoadedWorkflow(
        descriptor=descriptor,
        path=directory,
        instructions=instructions,
        validation=validation,
        template=template,
    )


def is_workflow_directory(directory: Path) -> bool:
    """True if a readable manifest sits directly inside *directory*."""
    manifest = Path(directory) / MANIFEST_FILENAME
    try:
        return manifest.is_file() and os.access(manifest, os.R_OK)
    except OSError:
        return False


def _read_sibling(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.debug("Optional workflow document not present: %s", path)
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Could not read workflow document %s: %s", path, exc)
    return None


def _as_optional_str(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def _as_document_field(value: Any) -> str | bool | None:
    if value is None or isinstance(value, bool):
        return value
    return str(value)


def _as_optional_bool(value: Any) -> bool | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value.strip().lower() in {"true", "yes", "on", "1"}
    return bool(value)
