"""Envelope builder: embed the original document and manifest into an XLIFF.

WHY: A translated XLIFF alone cannot be turned back into a document:
the merge step also needs the original file and the manifest describing
how it was extracted. Carrying both inside the XLIFF means the package
is a single self-contained file that survives any CAT tool round trip.

HOW: Four ordered steps, all local to one build() call:
  1. Validate the package and resolve the true pre-conversion format
  2. Base64-encode the original file and the manifest
  3. Read the base XLIFF, strip newlines/tabs, parse it with lxml and
     read source/target language from the first <file>
  4. Create two <file> entries, insert them in front of every existing
     child, serialize next to the pack folder and verify the result

The produced entries look like:

  <file tool-id="matecat-converter" original="{name}" datatype="x-{format}"
        source-language="{src}" target-language="{tgt}">
    <header><reference>
      <internal-file form="base64">{payload}</internal-file>
    </reference></header>
    <body/>
  </file>

RULES:
- Output has N+2 entries: [original document, manifest, ...existing entries]
- New entries copy source/target language from the first existing <file>
- Payloads are RFC 4648 base64, standard alphabet, no line wrapping
- When the caller passes an original format that differs from the current
  extension, the embedded filename takes that extension and the datatype
  follows the renamed file
- Output path: <pack_folder.parent>/<original filename>.xlf
- Every failure raises an EnvelopeError subclass; try_build() returns
  the same failures as a BuildResult instead
- Inputs are never modified or deleted
"""

from __future__ import annotations

import base64
import logging
import re
from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import Optional, Tuple, Union

from lxml import etree

from xliff_envelope.config import MANIFEST_FILENAME, OUTPUT_ENCODING, TOOL_ID
from xliff_envelope.core.errors import (
    EncodingFailureError,
    EnvelopeError,
    InvalidArgumentError,
    OutputVerificationError,
    XliffProcessingError,
)
from xliff_envelope.core.formats import Format, detect_format
from xliff_envelope.core.package import ConversionPackage

logger = logging.getLogger(__name__)

FormatHint = Union[Format, str, None]

# Characters removed from the raw XLIFF text before parsing
_WHITESPACE_RE = re.compile(r"[\n\r\t]")


@dataclass(frozen=True)
class BuildResult:
    """Outcome of try_build(): either the written path or the failure.

    RULES:
    - Exactly one of path / error is set
    - ok is True only when path is set
    """

    path: Optional[Path] = None
    error: Optional[EnvelopeError] = None

    def __post_init__(self) -> None:
        if (self.path is None) == (self.error is None):
            raise ValueError("BuildResult needs exactly one of path or error")

    @property
    def ok(self) -> bool:
        return self.path is not None and self.error is None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def build(package: Optional[ConversionPackage], original_format: FormatHint = None) -> Path:
    """Build a new XLIFF embedding the original file and the manifest.

    WHY: This is the single entry point the packaging layer calls after
    extraction has produced a pack.

    HOW: Validates, encodes both side files, parses the base XLIFF,
    creates and inserts the two entries, then writes and verifies.

    Args:
        package: The pack produced by the extraction pipeline.
        original_format: The document's format before any upstream
            conversion. None means the current extension is the truth.

    Returns:
        Path of the newly written XLIFF.

    Raises:
        InvalidArgumentError: package is None, or a format is unknown.
        EncodingFailureError: the original file or manifest is unreadable.
        XliffProcessingError: the base XLIFF cannot be parsed, or the
            result cannot be written.
        OutputVerificationError: the output file is missing after writing.
    """
    if package is None:
        raise InvalidArgumentError("The package cannot be None")

    # Step 1: resolve the true original format before touching any file
    filename = package.original_file.name
    detected = detect_format(filename)
    original_format = detected if original_format is None else Format.parse(original_format)
    output_path = package.output_path
    logger.info("Building enveloped XLIFF for %s (original format: %s)", filename, original_format)

    # Step 2: encode the side files
    encoded_manifest = encode_file(package.manifest)
    encoded_file = encode_file(package.original_file)
    logger.debug(
        "Encoded manifest (%d chars) and original file (%d chars)",
        len(encoded_manifest),
        len(encoded_file),
    )

    # Step 3: parse the base XLIFF
    root, source_language, target_language = parse_base(package.xlf)

    # Step 4: create, insert, write
    manifest_entry = make_file_element(
        root, source_language, target_language, MANIFEST_FILENAME, None, encoded_manifest
    )
    original_entry = make_file_element(
        root, source_language, target_language, filename, original_format, encoded_file
    )
    assemble(root, manifest_entry, original_entry)
    write_document(root, output_path)

    if not output_path.is_file():
        raise OutputVerificationError(f"The output XLIFF could not be created: {output_path}")

    logger.info("Wrote %s", output_path)
    return output_path


def try_build(package: Optional[ConversionPackage], original_format: FormatHint = None) -> BuildResult:
    """Run build() and return its outcome instead of raising.

    WHY: Batch callers want one result object per pack rather than a
    try/except around every call, without losing why a pack failed.

    RULES:
    - EnvelopeError subclasses become BuildResult(error=...)
    - Any other exception is a bug and propagates unchanged
    """
    try:
        return BuildResult(path=build(package, original_format))
    except EnvelopeError as exc:
        logger.warning("Envelope build failed: %s", exc)
        return BuildResult(error=exc)


# ---------------------------------------------------------------------------
# Steps
# ---------------------------------------------------------------------------


def encode_file(path: Path) -> str:
    """Read a file's bytes and return them as single-line base64 text.

    Raises:
        EncodingFailureError: If the file cannot be read.
    """
    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        raise EncodingFailureError(
            f"It was not possible to encode the file {PurePath(path).name}: {exc}"
        ) from exc
    return base64.b64encode(data).decode("ascii")


def normalize_whitespace(text: str) -> str:
    """Remove every newline, carriage return and tab from raw XML text.

    Pretty-printed XLIFF carries whitespace-only text between elements;
    removing it before parsing means the root's first child is always
    the first real node, whatever parser settings are in use.
    """
    return _WHITESPACE_RE.sub("", text)


def parse_base(path: Path) -> Tuple[etree._Element, str, str]:
    """Parse the base XLIFF and read its source and target language.

    WHY: The two new entries must declare the same languages as the
    rest of the package.

    HOW: Reads UTF-8 text, runs normalize_whitespace(), parses with a
    non-networked lxml parser, then reads the attributes of the first
    <file> element found (in any namespace).

    RULES:
    - Missing language attributes read as ""
    - A base without any <file> element yields ("", "") and a warning

    Raises:
        XliffProcessingError: stage "parse" if unreadable or malformed.
    """
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise XliffProcessingError("parse", f"cannot read {path}: {exc}") from exc

    try:
        root = etree.fromstring(normalize_whitespace(raw).encode("utf-8"), make_parser())
    except etree.XMLSyntaxError as exc:
        raise XliffProcessingError("parse", f"{PurePath(path).name} is not well-formed: {exc}") from exc

    sample = next(root.iter("{*}file"), None)
    if sample is None:
        logger.warning("Base XLIFF %s has no <file> entries; languages left empty", path)
        return root, "", ""

    return root, sample.get("source-language", ""), sample.get("target-language", "")


def resolve_name(filename: str, original_format: FormatHint = None) -> Tuple[str, Format]:
    """Work out the filename and format to declare for an embedded file.

    WHY: When an upstream step converted the document (e.g. .doc → .docx)
    before extraction, downstream consumers must still see the original
    type, not the intermediate one.

    RULES:
    - No hint, or hint equal to the detected format: unchanged
    - Different hint: "<stem>.<hint>", format re-detected from the new name
    - ("report.docx", None) → ("report.docx", DOCX)
    - ("report.docx", "doc") → ("report.doc", DOC)
    """
    detected = detect_format(filename)
    if original_format is None:
        return filename, detected

    hint = Format.parse(original_format)
    if hint == detected:
        return filename, detected

    renamed = f"{PurePath(filename).stem}.{hint.value}"
    return renamed, detect_format(renamed)


def make_file_element(
    root: etree._Element,
    source_language: str,
    target_language: str,
    filename: str,
    original_format: FormatHint,
    encoded: str,
) -> etree._Element:
    """Create one administrative <file> entry holding a base64 attachment.

    The element is created in the root's namespace but not attached;
    assemble() places it.
    """
    filename, fmt = resolve_name(filename, original_format)

    namespace = etree.QName(root).namespace

    def tag(name: str) -> str:
        return f"{{{namespace}}}{name}" if namespace else name

    file_element = etree.Element(tag("file"))
    file_element.set("tool-id", TOOL_ID)
    file_element.set("original", filename)
    file_element.set("datatype", f"x-{fmt.value}")
    file_element.set("source-language", source_language)
    file_element.set("target-language", target_language)

    header = etree.SubElement(file_element, tag("header"))
    reference = etree.SubElement(header, tag("reference"))
    internal_file = etree.SubElement(reference, tag("internal-file"))
    internal_file.set("form", "base64")
    internal_file.text = encoded

    # XLIFF 1.2 requires a body even when there is nothing to translate
    etree.SubElement(file_element, tag("body"))

    return file_element


def assemble(
    root: etree._Element,
    manifest_entry: etree._Element,
    original_entry: etree._Element,
) -> etree._Element:
    """Put the manifest entry, then the original entry, in front of all children.

    Net order: [original_entry, manifest_entry, ...previous children].
    """
    _insert_first(root, manifest_entry)
    _insert_first(root, original_entry)
    return root


def write_document(root: etree._Element, output_path: Path) -> None:
    """Serialize the whole document (prolog included) as UTF-8.

    Raises:
        XliffProcessingError: stage "serialize" if the file cannot be written.
    """
    try:
        root.getroottree().write(
            str(output_path),
            xml_declaration=True,
            encoding=OUTPUT_ENCODING,
        )
    except (OSError, etree.SerialisationError) as exc:
        raise XliffProcessingError("serialize", f"cannot write {output_path}: {exc}") from exc


def make_parser() -> etree.XMLParser:
    """Parser shared by the builder and the extractor.

    huge_tree lifts libxml2's text node size limit, which large base64
    payloads exceed.
    """
    return etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=True)


def _insert_first(parent: etree._Element, child: etree._Element) -> None:
    first = next(iter(parent), None)
    if first is None:
        parent.append(child)
    else:
        first.addprevious(child)
