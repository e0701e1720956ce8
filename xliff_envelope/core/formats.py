"""Canonical document formats and extension-based detection.

WHY: The builder writes ``datatype="x-<format>"`` on every entry it
creates and renames the embedded original when an upstream step changed
its type (e.g. a legacy .doc converted to .docx before extraction). Both
need a single, pure mapping from filename to format identifier.

HOW: Format is a str enum whose values are the lowercase extensions.
detect_format() takes the last extension of a filename, lowercases it,
and looks it up. Format.parse() normalizes caller-supplied hints.

RULES:
- Detection is case-insensitive and uses only the final extension
- Pure functions: no filesystem access, the file need not exist
- Unknown extensions raise UnsupportedFormatError
- str(Format.DOCX) == "docx" so formats drop straight into filenames
"""

from __future__ import annotations

import enum
from pathlib import PurePath

from xliff_envelope.core.errors import UnsupportedFormatError


class Format(str, enum.Enum):
    """File formats a document-conversion pipeline hands to the builder."""

    # Word processing
    DOC = "doc"
    DOT = "dot"
    DOCX = "docx"
    DOCM = "docm"
    DOTX = "dotx"
    DOTM = "dotm"
    RTF = "rtf"
    ODT = "odt"
    OTT = "ott"
    SXW = "sxw"
    PDF = "pdf"
    TXT = "txt"

    # Spreadsheets
    XLS = "xls"
    XLT = "xlt"
    XLSX = "xlsx"
    XLSM = "xlsm"
    XLTX = "xltx"
    XLTM = "xltm"
    ODS = "ods"
    OTS = "ots"
    SXC = "sxc"
    CSV = "csv"
    TSV = "tsv"

    # Presentations
    PPT = "ppt"
    POT = "pot"
    PPS = "pps"
    PPTX = "pptx"
    PPTM = "pptm"
    POTX = "potx"
    POTM = "potm"
    PPSX = "ppsx"
    PPSM = "ppsm"
    ODP = "odp"
    OTP = "otp"
    SXI = "sxi"

    # Graphics
    ODG = "odg"
    OTG = "otg"
    SXD = "sxd"

    # Markup and desktop publishing
    HTM = "htm"
    HTML = "html"
    XHTML = "xhtml"
    XML = "xml"
    DITA = "dita"
    IDML = "idml"
    MIF = "mif"
    INX = "inx"
    ICML = "icml"
    MD = "md"

    # Localisation and interchange
    XLF = "xlf"
    XLIFF = "xliff"
    SDLXLIFF = "sdlxliff"
    TMX = "tmx"
    TTX = "ttx"
    ITD = "itd"
    PO = "po"
    PROPERTIES = "properties"
    RESX = "resx"
    STRINGS = "strings"
    JSON = "json"
    YAML = "yaml"
    YML = "yml"
    SRT = "srt"
    VTT = "vtt"
    DTD = "dtd"
    RC = "rc"
    WIX = "wix"

    # Extraction manifest written alongside every pack
    RKM = "rkm"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: Format | str) -> Format:
        """Normalize a Format or identifier string (".DOCX", "docx") to a Format.

        Raises:
            UnsupportedFormatError: If the identifier is not a known format.
        """
        if isinstance(value, cls):
            return value
        key = str(value).strip().lstrip(".").lower()
        try:
            return cls(key)
        except ValueError:
            raise UnsupportedFormatError(f"Unsupported format: '{value}'") from None


def detect_format(filename: str | PurePath) -> Format:
    """Detect the Format of a filename from its final extension.

    RULES:
    - "report.DOCX" → Format.DOCX
    - "archive.tar.docx" → Format.DOCX (last extension only)
    - No extension, or an unknown one, raises UnsupportedFormatError

    Args:
        filename: Bare filename or path; only the name part is inspected.

    Returns:
        The matching Format member.
    """
    suffix = PurePath(filename).suffix
    if not suffix:
        raise UnsupportedFormatError(f"Cannot detect format, no extension: '{filename}'")
    try:
        return Format.parse(suffix)
    except UnsupportedFormatError:
        raise UnsupportedFormatError(
            f"Unsupported file extension '{suffix}' for '{PurePath(filename).name}'"
        ) from None
