"""Helpers for reading values out of XML configuration documents."""

from __future__ import annotations

from xml.etree.ElementTree import Element


class ConfigError(ValueError):
    """Raised when configuration or style content is missing or invalid."""


def xml_text(node: Element | None) -> str:
    """Return the text of an element, which must not be empty."""
    if node is None:
        raise ConfigError("Cannot get text from null element")
    text = node.text
    if text is None or not text.strip():
        raise ConfigError(f"Tag {node.tag} may not be empty")
    return text.strip()


def xml_query_all(root: Element, name: str) -> list[Element]:
    """Return all direct children of root with the given tag, in order."""
    return [child for child in root if child.tag == name]


def xml_query(root: Element, name: str) -> Element:
    """Return the one direct child of root with the given tag."""
    nodes = xml_query_all(root, name)
    if not nodes:
        raise ConfigError(f"Tag {name} not found")
    if len(nodes) > 1:
        raise ConfigError(f"Tag {name} must be unique")
    return nodes[0]