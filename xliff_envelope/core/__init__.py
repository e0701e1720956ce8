"""Core envelope building and extraction.

WHY: The core holds the stable heart of the package: the format lookup,
the pack model, the envelope builder and its inverse. The CLI is a thin
layer over these functions.

HOW: formats.py maps filenames to Format, package.py describes and
discovers packs, builder.py writes the enveloped XLIFF, extractor.py
reads it back. errors.py holds the shared failure types.

RULES:
- All operations are plain functions with no module-level mutable state
- Every failure is an EnvelopeError subclass
"""

from xliff_envelope.core.builder import BuildResult, build, try_build
from xliff_envelope.core.errors import (
    EncodingFailureError,
    EnvelopeError,
    InvalidArgumentError,
    OutputVerificationError,
    UnsupportedFormatError,
    XliffProcessingError,
)
from xliff_envelope.core.extractor import EmbeddedFile, read_embedded_files, unpack
from xliff_envelope.core.formats import Format, detect_format
from xliff_envelope.core.package import ConversionPackage

__all__ = [
    "BuildResult",
    "ConversionPackage",
    "EmbeddedFile",
    "EncodingFailureError",
    "EnvelopeError",
    "Format",
    "InvalidArgumentError",
    "OutputVerificationError",
    "UnsupportedFormatError",
    "XliffProcessingError",
    "build",
    "detect_format",
    "read_embedded_files",
    "try_build",
    "unpack",
]
