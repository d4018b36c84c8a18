"""Agent document parser: YAML metadata plus a fenced XML agent block.

An agent document looks like::

    ---
    name: dev
    description: Developer agent
    ---

    ```xml
    <agent id="dev.agent.yaml" name="Amelia" title="Developer" icon="💻">
      <activation critical="MANDATORY">...</activation>
      <persona>
        <role>Senior Engineer</role>
        ...
      </persona>
      <menu>
        <item cmd="*dev-story" workflow="{project-root}/...">Execute story</item>
      </menu>
    </agent>
    ```

The XML block need not be well-formed; elements are located with
anchored regular expressions.
"""
from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import yaml
from bmadkit_core.errors import ParseError

from bmadkit_definitions.types import AgentDescriptor, AgentIdentity, MenuItem, Persona

_FRONTMATTER_RE = re.compile(r"\A---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)", re.DOTALL)
_XML_BLOCK_RE = re.compile(r"```xml[ \t]*\r?\n(.*?)\r?\n[ \t]*```", re.DOTALL)
_ATTRIBUTE_RE = re.compile(r"""([\w:.-]+)\s*=\s*(?:"([^"]*)"|'([^']*)')""")
# Attribute text up to the closing '>', allowing '>' inside quoted values.
_ATTR_TEXT = r"""((?:[^>"']|"[^"]*"|'[^']*')*)"""
_ITEM_RE = re.compile(r"<item(?=[\s>])" + _ATTR_TEXT + r">(.*?)</item>", re.DOTALL | re.IGNORECASE)

_PERSONA_FIELDS = ("role", "identity", "communication_style", "principles")


def parse_agent_file(path: Path) -> AgentDescriptor:
    """Read and parse an agent document.

    Raises:
        ParseError: If the document is missing its XML block or the
            ``<agent>`` element lacks a required attribute.
        OSError: If the file cannot be read.
    """
    text = Path(path).read_text(encoding="utf-8")
    return parse_agent_document(text, source=Path(path))


def parse_agent_document(text: str, source: Path | None = None) -> AgentDescriptor:
    """Parse agent document text into an :class:`AgentDescriptor`.

    Args:
        text: Full document contents.
        source: Where the text came from; used in error messages, as the
            name fallback and as ``source_path``.
    """
    where = str(source) if source is not None else "<agent document>"
    meta, body = _split_frontmatter(text, where)

    xml_match = _XML_BLOCK_RE.search(body)
    if xml_match is None:
        msg = f"no structured block (```xml ... ```) in agent document: {where}"
        raise ParseError(msg)
    xml = xml_match.group(1)

    attrs = _tag_attributes(xml, "agent")
    if attrs is None or not all(attrs.get(key) for key in ("id", "name", "title")):
        msg = f"missing required agent attributes (id, name, title) in {where}"
        raise ParseError(msg)

    persona_xml = _tag_content(xml, "persona")
    activation = _tag_content(xml, "activation", strip=False)
    menu_xml = _tag_content(xml, "menu")

    name = meta.get("name")
    if not name:
        name = source.stem if source is not None else "unknown"
    description = meta.get("description")

    return AgentDescriptor(
        name=str(name),
        description=str(description) if description else None,
        agent=AgentIdentity(
            id=attrs["id"],
            name=attrs["name"],
            title=attrs["title"],
            icon=attrs.get("icon") or None,
        ),
        persona=_parse_persona(persona_xml) if persona_xml is not None else None,
        menu=_parse_menu(menu_xml) if menu_xml is not None else (),
        activation=activation if activation and activation.strip() else None,
        source_path=source,
    )


def _split_frontmatter(text: str, where: str) -> tuple[dict[str, Any], str]:
    """Split off an optional leading ``---`` metadata block.

    Returns:
        A (metadata, body) tuple; metadata is empty when there is no block.
    """
    match = _FRONTMATTER_RE.match(text)
    if match is None:
        return {}, text

    try:
        meta = yaml.safe_load(match.group(1))
    except yaml.YAMLError as exc:
        msg = f"Invalid YAML metadata block in {where}: {exc}"
        raise ParseError(msg) from exc

    if meta is None:
        meta = {}
    if not isinstance(meta, dict):
        msg = f"metadata block must be a mapping, got {type(meta).__name__}: {where}"
        raise ParseError(msg)

    return meta, text[match.end():]


def _open_tag(tag: str) -> str:
    # The lookahead keeps <menu> from matching <menu-handlers>.
    return rf"<{tag}(?=[\s/>])"


def _tag_attributes(xml: str, tag: str) -> dict[str, str] | None:
    """Attributes of the first ``<tag ...>``, or None if the tag is absent."""
    match = re.search(_open_tag(tag) + _ATTR_TEXT + ">", xml, re.IGNORECASE)
    if match is None:
        return None
    return _parse_attributes(match.group(1))


def _tag_content(xml: str, tag: str, *, strip: bool = True) -> str | None:
    """Inner text of the first ``<tag>...</tag>``, or None if absent."""
    pattern = _open_tag(tag) + _ATTR_TEXT + rf">(.*?)</{tag}>"
    match = re.search(pattern, xml, re.DOTALL | re.IGNORECASE)
    if match is None:
        return None
    content = match.group(2)
    return content.strip() if strip else content


def _parse_attributes(attr_text: str) -> dict[str, str]:
    attrs: dict[str, str] = {}
    for match in _ATTRIBUTE_RE.finditer(attr_text):
        name, double_quoted, single_quoted = match.groups()
        attrs[name] = double_quoted if double_quoted is not None else single_quoted
    return attrs


def _parse_persona(persona_xml: str) -> Persona:
    values: dict[str, str | None] = {}
    for key in _PERSONA_FIELDS:
        content = _tag_content(persona_xml, key)
        values[key] = content or None
    return Persona(**values)


def _parse_menu(menu_xml: str) -> tuple[MenuItem, ...]:
    return tuple(
        MenuItem(label=match.group(2).strip(), attributes=_parse_attributes(match.group(1)))
        for match in _ITEM_RE.finditer(menu_xml)
    )
