"""Placeholder substitution for workflow manifests and agent menus.

Supported tokens:

``{project-root}``
    the project root directory.
``{config_source}:KEY``
    value of ``KEY`` in the loaded configuration document.  String
    values are themselves resolved, so configuration entries may refer
    to each other or to ``{project-root}``.
``{config_source}``
    path of the configuration document.
``{installed_path}``
    directory of the workflow being resolved.

Tokens that cannot be resolved are left in place.
"""
from __future__ import annotations

import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from bmadkit_core.config import LayoutConfig
from bmadkit_core.errors import ConfigError, ResolutionError
from bmadkit_core.logging import get_logger

from bmadkit_definitions.types import ResolveContext

logger = get_logger("definitions.resolver")

MAX_RESOLVE_DEPTH = 10

_PROJECT_ROOT_TOKEN = "{project-root}"
_INSTALLED_PATH_TOKEN = "{installed_path}"
# Keys are flat identifiers; dotted paths are not looked up.
_CONFIG_KEY_RE = re.compile(r"\{config_source\}:(\w+)")
_CONFIG_PATH_RE = re.compile(r"\{config_source\}(?!:\w)")


def resolve_variable(value: str, context: ResolveContext) -> str:
    """Substitute every placeholder token in *value*.

    Raises:
        ResolutionError: If configuration references nest deeper than
            ``MAX_RESOLVE_DEPTH`` (which any reference cycle does).
    """
    return _resolve(value, context, 0, value)


def resolve_object(value: Any, context: ResolveContext) -> Any:
    """Resolve every string leaf of a nested structure.

    Mappings and sequences are rebuilt, never modified in place; other
    scalars are returned as they are.
    """
    if isinstance(value, str):
        return resolve_variable(value, context)
    if isinstance(value, Mapping):
        return {key: resolve_object(item, context) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        items = [resolve_object(item, context) for item in value]
        return tuple(items) if isinstance(value, tuple) else items
    return value


def _resolve(value: str, context: ResolveContext, depth: int, origin: str) -> str:
    if depth > MAX_RESOLVE_DEPTH:
        msg = f"Variable resolution depth exceeded for: {origin}"
        raise ResolutionError(msg)

    resolved = value.replace(_PROJECT_ROOT_TOKEN, context.project_root)

    def _config_value(match: re.Match[str]) -> str:
        key = match.group(1)
        data = context.config_data
        found = data.get(key) if data is not None else None
        # Only scalars substitute; sections and lists stay unresolved.
        if found is None or isinstance(found, (Mapping, list, tuple)):
            return match.group(0)
        if isinstance(found, str):
            return _resolve(found, context, depth + 1, origin)
        return _scalar_text(found)

    resolved = _CONFIG_KEY_RE.sub(_config_value, resolved)
    resolved = _CONFIG_PATH_RE.sub(lambda _: context.config_path, resolved)

    if context.workflow_dir is not None:
        resolved = resolved.replace(_INSTALLED_PATH_TOKEN, context.workflow_dir)

    return resolved


def _scalar_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def load_config_document(path: Path | str) -> dict[str, Any]:
    """Load the layered configuration document (YAML).

    Raises:
        ConfigError: If the document is not a mapping.
        OSError: If the file cannot be read.
        yaml.YAMLError: If the YAML is malformed.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        msg = f"Configuration document must be a mapping, got {type(data).__name__}: {path}"
        raise ConfigError(msg)
    return data


def create_resolve_context(
    project_root: Path | str,
    *,
    bmad_root: Path | str | None = None,
    config_path: Path | str | None = None,
    workflow_dir: Path | str | None = None,
    layout: LayoutConfig | None = None,
) -> ResolveContext:
    """Build a ResolveContext, loading configuration when possible.

    ``bmad_root`` and ``config_path`` default to the conventional
    locations from *layout*.  A configuration document that cannot be
    loaded is logged and leaves ``config_data`` as ``None``.
    """
    layout = layout or LayoutConfig()
    root = Path(bmad_root) if bmad_root is not None else layout.bmad_root(project_root)
    config = Path(config_path) if config_path is not None else layout.config_path(root)

    try:
        config_data: dict[str, Any] | None = load_config_document(config)
    except (OSError, yaml.YAMLError, ConfigError, UnicodeDecodeError) as exc:
        logger.warning("Failed to load configuration from %s: %s", config, exc)
        config_data = None

    return ResolveContext(
        project_root=str(project_root),
        bmad_root=str(root),
        config_path=str(config),
        workflow_dir=str(workflow_dir) if workflow_dir is not None else None,
        config_data=config_data,
    )
