"""Read embedded files back out of an enveloped XLIFF.

WHY: The envelope exists so a translated XLIFF can be turned back into a
document. The merge step needs the original file and the manifest on
disk again, laid out the way the extraction pipeline left them, plus the
XLIFF without the two administrative entries.

HOW: Parse the XLIFF with the builder's parser, collect every <file>
whose tool-id is ours and that carries a base64 internal-file, decode
the payloads, then optionally detach those entries and rewrite the pack
folder layout.

RULES:
- Only entries with tool-id == TOOL_ID are considered embedded files
- The manifest entry is the one whose original == MANIFEST_FILENAME
- The original entry is the first other embedded entry
- unpack() writes into an empty or new folder only
- All failures are EnvelopeError subclasses
"""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple

from lxml import etree

from xliff_envelope.config import (
    MANIFEST_FILENAME,
    ORIGINAL_DIRNAME,
    OUTPUT_ENCODING,
    TOOL_ID,
    WORK_DIRNAME,
    XLIFF_SUFFIX,
)
from xliff_envelope.core.builder import make_parser
from xliff_envelope.core.errors import (
    EncodingFailureError,
    InvalidArgumentError,
    XliffProcessingError,
)
from xliff_envelope.core.package import ConversionPackage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmbeddedFile:
    """One decoded attachment.

    RULES:
    - filename: the entry's original attribute
    - format: identifier from the datatype attribute, "x-" removed
    - content: decoded bytes
    """

    filename: str
    format: str
    content: bytes


def read_embedded_files(xlf_path: Path) -> List[EmbeddedFile]:
    """Decode every attachment this package wrote, in document order."""
    root = _parse(xlf_path)
    return [_decode_entry(entry) for entry in _embedded_entries(root)]


def split_envelope(xlf_path: Path) -> Tuple[EmbeddedFile, EmbeddedFile, etree._Element]:
    """Separate an enveloped XLIFF into original file, manifest and plain XLIFF.

    Returns:
        (original, manifest, root) where root no longer contains the
        envelope entries.

    Raises:
        XliffProcessingError: stage "extract" if either entry is missing.
    """
    root = _parse(xlf_path)
    entries = _embedded_entries(root)

    manifest_entry = next(
        (e for e in entries if e.get("original") == MANIFEST_FILENAME), None
    )
    original_entry = next(
        (e for e in entries if e.get("original") != MANIFEST_FILENAME), None
    )
    if manifest_entry is None:
        raise XliffProcessingError("extract", f"no embedded {MANIFEST_FILENAME} in {xlf_path}")
    if original_entry is None:
        raise XliffProcessingError("extract", f"no embedded original file in {xlf_path}")

    original = _decode_entry(original_entry)
    manifest = _decode_entry(manifest_entry)

    for entry in (original_entry, manifest_entry):
        entry.getparent().remove(entry)

    return original, manifest, root


def unpack(xlf_path: Path, pack_folder: Path) -> ConversionPackage:
    """Recreate a pack folder from an enveloped XLIFF.

    WHY: The merge pipeline expects the same layout extraction produced.

    HOW: split_envelope(), then write:
      <pack>/manifest.rkm
      <pack>/original/<original filename>
      <pack>/work/<original filename>.xlf   (envelope entries removed)

    Raises:
        InvalidArgumentError: pack_folder exists and is not an empty directory.
        XliffProcessingError: stage "extract" for an unusable embedded name,
            stage "serialize" if any part of the pack cannot be written.
    """
    pack_folder = Path(pack_folder)
    if pack_folder.exists() and (not pack_folder.is_dir() or any(pack_folder.iterdir())):
        raise InvalidArgumentError(f"Refusing to unpack into non-empty path: {pack_folder}")

    original, manifest, root = split_envelope(xlf_path)

    # Never let an embedded name escape the pack folder
    original_name = Path(original.filename).name
    if original_name in ("", ".", ".."):
        raise XliffProcessingError(
            "extract", f"embedded original file has no usable name in {xlf_path}"
        )

    original_dir = pack_folder / ORIGINAL_DIRNAME
    work_dir = pack_folder / WORK_DIRNAME
    try:
        original_dir.mkdir(parents=True)
        work_dir.mkdir()
        (pack_folder / MANIFEST_FILENAME).write_bytes(manifest.content)
        (original_dir / original_name).write_bytes(original.content)
    except OSError as exc:
        raise XliffProcessingError("serialize", f"cannot write pack into {pack_folder}: {exc}") from exc

    work_xlf = work_dir / f"{original_name}{XLIFF_SUFFIX}"
    try:
        root.getroottree().write(str(work_xlf), xml_declaration=True, encoding=OUTPUT_ENCODING)
    except (OSError, etree.SerialisationError) as exc:
        raise XliffProcessingError("serialize", f"cannot write {work_xlf}: {exc}") from exc

    logger.info("Unpacked %s into %s", Path(xlf_path).name, pack_folder)
    return ConversionPackage.from_folder(pack_folder)


# ---------------------------------------------------------------------------
# Internals
# ---------------------------------------------------------------------------


def _parse(xlf_path: Path) -> etree._Element:
    try:
        return etree.parse(str(xlf_path), make_parser()).getroot()
    except OSError as exc:
        raise XliffProcessingError("parse", f"cannot read {xlf_path}: {exc}") from exc
    except etree.XMLSyntaxError as exc:
        raise XliffProcessingError("parse", f"{Path(xlf_path).name} is not well-formed: {exc}") from exc


def _embedded_entries(root: etree._Element) -> List[etree._Element]:
    return [
        entry
        for entry in root.iter("{*}file")
        if entry.get("tool-id") == TOOL_ID and _payload_node(entry) is not None
    ]


def _payload_node(entry: etree._Element):
    return entry.find("{*}header/{*}reference/{*}internal-file[@form='base64']")


def _decode_entry(entry: etree._Element) -> EmbeddedFile:
    filename = entry.get("original", "")
    # CAT tools may re-indent the document; whitespace is never part of the payload
    payload = "".join((_payload_node(entry).text or "").split())
    try:
        content = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise EncodingFailureError(f"Invalid base64 payload for '{filename}': {exc}") from exc

    datatype = entry.get("datatype", "")
    fmt = datatype[2:] if datatype.startswith("x-") else datatype
    logger.debug("Decoded %s (%s, %d bytes)", filename, fmt or "unknown", len(content))
    return EmbeddedFile(filename=filename, format=fmt, content=content)
