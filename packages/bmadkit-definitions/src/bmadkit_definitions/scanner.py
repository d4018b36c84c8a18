"""Workflow and agent discovery under a definitions root."""
from __future__ import annotations

import os
from pathlib import Path, PurePath
from typing import TYPE_CHECKING

from bmadkit_core.errors import ParseError
from bmadkit_core.logging import get_logger

from bmadkit_definitions.agent_parser import parse_agent_file
from bmadkit_definitions.manifest_parser import (
    MANIFEST_FILENAME,
    is_workflow_directory,
    parse_manifest,
)
from bmadkit_definitions.types import DiscoveredWorkflow, DiscoveryResult

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = get_logger("definitions.scanner")

_WORKFLOWS_SEGMENT = "workflows"
_AGENT_SUFFIX = ".md"


def derive_category(relative_path: PurePath | str) -> str:
    """Category of a workflow from its path relative to the scan root.

    ``bmm/workflows/4-implementation/dev-story`` → ``4-implementation``.
    Without a ``workflows`` segment the parent directory name is used,
    and ``"unknown"`` when there is no parent.
    """
    parts = PurePath(relative_path).parts
    if _WORKFLOWS_SEGMENT in parts:
        index = parts.index(_WORKFLOWS_SEGMENT)
        if index + 1 < len(parts):
            return parts[index + 1]
    if len(parts) >= 2:
        return parts[-2]
    return "unknown"


class DefinitionTreeScanner:
    """Walks a definitions root looking for workflow manifests and agents.

    The walk is depth-first and continues into workflow directories, so
    nested workflows are found too.  Unreadable directories are logged
    and skipped; a scan never fails as a whole.  Entries are visited in
    sorted order so that name lookups are deterministic.
    """

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def iter_workflow_directories(self) -> Iterator[Path]:
        """Yield every directory below the root that holds a manifest."""
        yield from self._walk(self._root)

    def discover(self) -> DiscoveryResult:
        """Parse every discovered manifest.

        Returns:
            All workflows that parsed, in traversal order, with their
            categories.  Manifests that fail to parse are logged and
            skipped.
        """
        workflows: list[DiscoveredWorkflow] = []
        seen_names: set[str] = set()

        for directory in self.iter_workflow_directories():
            try:
                descriptor = parse_manifest(directory / MANIFEST_FILENAME)
            except (ParseError, OSError, UnicodeDecodeError):
                logger.warning(
                    "Failed to parse workflow in %s",
                    directory,
                    exc_info=True,
                )
                continue

            if descriptor.name in seen_names:
                # Both are listed; name lookups return the first one.
                logger.warning(
                    "Duplicate workflow name '%s' at %s",
                    descriptor.name,
                    directory,
                )
            seen_names.add(descriptor.name)

            relative = self.relative_path(directory)
            workflows.append(
                DiscoveredWorkflow(
                    descriptor=descriptor,
                    absolute_path=directory,
                    relative_path=relative,
                    category=derive_category(relative),
                )
            )

        categories = tuple(sorted({wf.category for wf in workflows}))
        logger.info("Discovered %d workflow(s) under %s", len(workflows), self._root)
        return DiscoveryResult(workflows=tuple(workflows), categories=categories)

    def find_workflow_by_name(self, name: str) -> Path | None:
        """Directory of the first workflow declaring *name*, or None."""
        for directory in self.iter_workflow_directories():
            try:
                descriptor = parse_manifest(directory / MANIFEST_FILENAME)
            except (ParseError, OSError, UnicodeDecodeError) as exc:
                logger.debug("Skipping unparsable workflow %s: %s", directory, exc)
                continue
            if descriptor.name == name:
                return directory
        return None

    def find_agent_by_name(self, agents_dir: Path | str, name: str) -> Path | None:
        """Agent document in *agents_dir* matching *name*, or None.

        The directory is not searched recursively.  A file matches when
        its stem equals *name* or when its metadata declares that name.
        """
        agents_dir = Path(agents_dir)
        try:
            with os.scandir(agents_dir) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as exc:
            logger.warning("Failed to scan agents directory %s: %s", agents_dir, exc)
            return None

        for entry in entries:
            if not entry.name.endswith(_AGENT_SUFFIX) or not _is_file(entry):
                continue
            path = Path(entry.path)
            if path.stem == name:
                return path
            try:
                agent = parse_agent_file(path)
            except (ParseError, OSError, UnicodeDecodeError) as exc:
                logger.debug("Skipping unparsable agent %s: %s", path, exc)
                continue
            if agent.name == name:
                return path
        return None

    def relative_path(self, path: Path) -> str:
        """*path* relative to the scan root, POSIX separators."""
        return Path(os.path.relpath(path, self._root)).as_posix()

    def _walk(self, directory: Path) -> Iterator[Path]:
        try:
            with os.scandir(directory) as it:
                subdirs = sorted(
                    (Path(entry.path) for entry in it if _is_dir(entry)),
                    key=lambda p: p.name,
                )
        except OSError as exc:
            logger.warning("Failed to scan directory %s: %s", directory, exc)
            return

        for subdir in subdirs:
            if is_workflow_directory(subdir):
                yield subdir
            yield from self._walk(subdir)


def _is_dir(entry: os.DirEntry[str]) -> bool:
    try:
        return entry.is_dir(follow_symlinks=False)
    except OSError:
        return False


def _is_file(entry: os.DirEntry[str]) -> bool:
    try:
        return entry.is_file(follow_symlinks=False)
    except OSError:
        return False
