"""Append-only document builder used to emit pain.008 XML.

The collection only ever calls ``add_child``; it never reads the tree back.
``ElementTreeBuilder`` is the stdlib ElementTree implementation.
"""
from __future__ import annotations

import copy
import os
import xml.etree.ElementTree as ET
from typing import Mapping, Optional, Protocol

__all__ = ["NS", "DocumentBuilder", "ElementTreeBuilder"]

NS = "urn:iso:std:iso:20022:tech:xsd:pain.008.002.02"
ET.register_namespace("", NS)  # default NS


class DocumentBuilder(Protocol):
    """Hierarchical node-append primitive."""

    def add_child(
        self,
        name: str,
        text: Optional[str] = None,
        attrs: Optional[Mapping[str, str]] = None,
    ) -> "DocumentBuilder":  # pragma: no cover – protocol stub
        """Append child *name* and return a builder anchored at it."""


def _pretty_default() -> bool:
    return os.getenv("SEPA_XML_PRETTY", "1").lower() in {"1", "true", "yes", "on", "y"}


def _indent(elem: ET.Element, level: int = 0) -> None:
    """Pretty-print helper (in-place)."""

    pad = "\n" + level * "  "
    if len(elem):
        if not elem.text or not elem.text.strip():
            elem.text = pad + "  "
        for child in elem:
            _indent(child, level + 1)
        if not child.tail or not child.tail.strip():  # type: ignore[name-defined]
            child.tail = pad
    if level and (not elem.tail or not elem.tail.strip()):
        elem.tail = pad


class ElementTreeBuilder:
    """``DocumentBuilder`` over an ``xml.etree.ElementTree`` element."""

    def __init__(self, element: ET.Element, ns: Optional[str] = NS) -> None:
        self.element = element
        self.ns = ns

    @classmethod
    def new(cls, tag: str, ns: Optional[str] = NS) -> "ElementTreeBuilder":
        """Create a detached root element, e.g. ``ElementTreeBuilder.new("PmtInf")``."""
        return cls(ET.Element(cls._qualify(tag, ns)), ns)

    @staticmethod
    def _qualify(name: str, ns: Optional[str]) -> str:
        return ET.QName(ns, name).text if ns else name

    def add_child(
        self,
        name: str,
        text: Optional[str] = None,
        attrs: Optional[Mapping[str, str]] = None,
    ) -> "ElementTreeBuilder":
        child = ET.SubElement(self.element, self._qualify(name, self.ns), dict(attrs or {}))
        if text is not None:
            child.text = text
        return ElementTreeBuilder(child, self.ns)

    def to_string(self, pretty: Optional[bool] = None) -> str:
        """Render the subtree as text; the builder's own tree is left untouched."""
        if pretty is None:
            pretty = _pretty_default()
        elem = self.element
        if pretty:
            elem = copy.deepcopy(elem)
            _indent(elem)
        return ET.tostring(elem, encoding="unicode")
