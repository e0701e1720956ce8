"""Shared test fixtures for the xliff_envelope test suite.

WHY: Almost every test needs a pack folder on disk: a base XLIFF, a
manifest and an original document laid out the way the extraction
pipeline leaves them. Building them in one place keeps the tests about
behavior rather than setup.

HOW: The make_xliff fixture renders a pretty-printed XLIFF 1.2 document
(tabs and newlines included, like real extractor output) with any number
of <file> entries. The make_pack fixture writes a complete pack folder
under tmp_path and returns its ConversionPackage. file_entries reads an
output XLIFF back as its list of <file> elements.

RULES:
- All file I/O happens under tmp_path
- The default pack matches the reference scenario: one entry en → it,
  manifest bytes 01 02, original "a.docx" containing "hello"
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, List, Optional, Tuple

import pytest
from lxml import etree

from xliff_envelope.core.package import ConversionPackage

XLIFF_NS = "urn:oasis:names:tc:xliff:document:1.2"

# (original, source-language, target-language, segment text)
Entry = Tuple[str, str, str, str]

DEFAULT_ENTRIES: List[Entry] = [("a.docx", "en", "it", "Hello world")]


def _render_xliff(entries: List[Entry], namespace: Optional[str] = XLIFF_NS) -> str:
    xmlns = ' xmlns="{}"'.format(namespace) if namespace else ""
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<xliff version="1.2"{}>'.format(xmlns),
    ]
    for index, (original, src, tgt, text) in enumerate(entries, start=1):
        lines.extend([
            '\t<file original="{}" source-language="{}" target-language="{}" '
            'datatype="x-undefined">'.format(original, src, tgt),
            "\t\t<body>",
            '\t\t\t<trans-unit id="{}">'.format(index),
            "\t\t\t\t<source>{}</source>".format(text),
            "\t\t\t</trans-unit>",
            "\t\t</body>",
            "\t</file>",
        ])
    lines.append("</xliff>")
    return "\n".join(lines) + "\n"


def _file_entries(path: Path) -> List[etree._Element]:
    root = etree.parse(str(path)).getroot()
    return root.findall("{*}file")


@pytest.fixture
def xliff_ns() -> str:
    """The XLIFF 1.2 namespace used by make_xliff by default."""
    return XLIFF_NS


@pytest.fixture
def make_xliff() -> Callable[..., str]:
    """Render a pretty-printed XLIFF with one <file> per entry."""
    return _render_xliff


@pytest.fixture
def file_entries() -> Callable[[Path], List[etree._Element]]:
    """Parse an XLIFF on disk and return its <file> children in order."""
    return _file_entries


@pytest.fixture
def make_pack(tmp_path: Path) -> Callable[..., ConversionPackage]:
    """Factory writing a pack folder under tmp_path/<folder>/."""

    def _make(
        entries: Optional[List[Entry]] = None,
        original_name: str = "a.docx",
        original_bytes: bytes = b"hello",
        manifest_bytes: bytes = b"\x01\x02",
        xliff_text: Optional[str] = None,
        folder: str = "pack",
    ) -> ConversionPackage:
        pack = tmp_path / folder
        (pack / "original").mkdir(parents=True)
        (pack / "work").mkdir()

        (pack / "manifest.rkm").write_bytes(manifest_bytes)
        (pack / "original" / original_name).write_bytes(original_bytes)

        if xliff_text is None:
            xliff_text = _render_xliff(DEFAULT_ENTRIES if entries is None else entries)
        (pack / "work" / "{}.xlf".format(original_name)).write_text(xliff_text, encoding="utf-8")

        return ConversionPackage.from_folder(pack)

    return _make


@pytest.fixture
def sample_pack(make_pack) -> ConversionPackage:
    """The reference scenario pack."""
    return make_pack()
