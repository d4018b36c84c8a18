from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path

logger = logging.getLogger("bmadkit.core.config")


def _load_toml(path: Path) -> dict:
    """Settings table from *path*; an absent or broken file contributes nothing."""
    if not path.is_file():
        return {}
    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        logger.warning("Ignoring unreadable config file %s: %s", path, exc)
        data = {}
    return data


def _merge_sections(*layers: dict) -> dict:
    """Combine settings layers; later layers win key by key inside a section."""
    merged: dict = {}
    for layer in layers:
        for section, values in layer.items():
            current = merged.get(section)
            if isinstance(current, dict) and isinstance(values, dict):
                merged[section] = current | values
            else:
                merged[section] = values
    return merged


@dataclass(frozen=True, slots=True)
class LayoutConfig:
    """Where definitions live relative to a project root.

    ``agents_dir`` and ``config_file`` are relative to the definitions
    root (``bmad_dir``), which is itself relative to the project root.
    """

    bmad_dir: str = "_bmad"
    agents_dir: str = "bmm/agents"
    config_file: str = "bmm/config.yaml"

    def bmad_root(self, project_root: Path | str) -> Path:
        return Path(project_root) / self.bmad_dir

    def agents_path(self, bmad_root: Path | str) -> Path:
        return Path(bmad_root) / self.agents_dir

    def config_path(self, bmad_root: Path | str) -> Path:
        return Path(bmad_root) / self.config_file


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    level: str = "INFO"
    json_output: bool = False


@dataclass(frozen=True, slots=True)
class BmadkitConfig:
    """Settings for locating definitions and for diagnostics."""

    layout: LayoutConfig = field(default_factory=LayoutConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_toml(cls, path: Path | str = "bmadkit.toml") -> BmadkitConfig:
        return cls._from_raw(_load_toml(Path(path)))

    @classmethod
    def load(cls, project_dir: Path | str | None = None) -> BmadkitConfig:
        """Settings for *project_dir* (default: the working directory).

        The user file ``~/.bmadkit/config.toml`` is read first; the
        project's ``.bmadkit/config.toml``, or ``bmadkit.toml`` when that
        is absent, overrides it per key.
        """
        project = Path.cwd() if project_dir is None else Path(project_dir)
        project_file = project / ".bmadkit" / "config.toml"
        if not project_file.is_file():
            project_file = project / "bmadkit.toml"

        user_layer = _load_toml(Path.home() / ".bmadkit" / "config.toml")
        return cls._from_raw(_merge_sections(user_layer, _load_toml(project_file)))

    @classmethod
    def _from_raw(cls, raw: dict) -> BmadkitConfig:
        return cls(
            layout=LayoutConfig(**_known_keys(raw.get("layout"), LayoutConfig)),
            logging=LoggingConfig(**_known_keys(raw.get("logging"), LoggingConfig)),
        )


def _known_keys(section: object, section_type: type) -> dict:
    # Unknown keys and non-table sections are dropped.
    if not isinstance(section, dict):
        return {}
    names = {f.name for f in fields(section_type)}
    return {key: value for key, value in section.items() if key in names}
