"""Typed failures raised by the envelope builder and extractor.

WHY: Callers must be able to tell "nothing was written because the input
was bad" from "the XLIFF could not be parsed" from "the disk write
failed". A null result carries none of that, so every failure point
raises one of these classes instead.

HOW: One base class, EnvelopeError, so callers can catch everything this
package raises in one clause. Subclasses map to the failure points of a
build: argument checks, reading side files, XML parse/serialize, and the
final output check.

RULES:
- InvalidArgumentError is also a ValueError (bad caller input)
- XliffProcessingError.stage is one of "parse", "serialize", "extract"
- Underlying causes are chained with ``raise ... from exc``
- None of these are retried; they all surface to the immediate caller
"""

from __future__ import annotations


class EnvelopeError(Exception):
    """Base class for every failure raised by xliff_envelope."""


class InvalidArgumentError(EnvelopeError, ValueError):
    """Raised when the package or pack folder handed to us is unusable.

    Raised before any file is read or written.
    """


class UnsupportedFormatError(InvalidArgumentError):
    """Raised when a filename extension or format hint is not a known Format."""


class EncodingFailureError(EnvelopeError):
    """Raised when a side file cannot be read, or a payload cannot be decoded.

    On the build path this always happens before the XLIFF is touched.
    """


class XliffProcessingError(EnvelopeError):
    """Raised when an XLIFF cannot be parsed, serialized, or split apart.

    WHY: The parse and serialize steps fail for different reasons (bad
    input vs. bad output location). The stage attribute keeps them apart.

    RULES:
    - stage: "parse", "serialize", or "extract"
    - message is prefixed with the stage for log readability
    """

    def __init__(self, stage: str, message: str) -> None:
        self.stage = stage
        self.message = message
        super().__init__(f"XLIFF {stage} failed: {message}")


class OutputVerificationError(EnvelopeError):
    """Raised when the output XLIFF is missing after serialization."""
