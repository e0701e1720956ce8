"""Configuration constants, pack layout names, and .env loading.

WHY: Centralizes every value the envelope builder and extractor agree on
(tool identifier, manifest filename, pack folder layout, output encoding)
so both sides of the round trip read the same names. Deployments that
stamp a different tool id or want louder logs override them from the
environment instead of editing code.

HOW: python-dotenv loads the .env file on import. Constants are defined
as module-level strings. configure_logging() wires the stdlib logging
module up for the CLI.

RULES:
- TOOL_ID marks the entries this package writes; the extractor only
  decodes entries carrying it
- MANIFEST_FILENAME is fixed; downstream consumers look for it by name
- Pack layout: <pack>/manifest.rkm, <pack>/original/<file>, <pack>/work/<file>.xlf
- All overridable defaults come from XLIFF_ENVELOPE_* environment variables
"""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()

# ---------------------------------------------------------------------------
# Envelope entries
# ---------------------------------------------------------------------------

TOOL_ID = os.getenv("XLIFF_ENVELOPE_TOOL_ID", "matecat-converter")
"""Value of the tool-id attribute on every entry the builder creates."""

MANIFEST_FILENAME = "manifest.rkm"
XLIFF_SUFFIX = ".xlf"
OUTPUT_ENCODING = "UTF-8"

# ---------------------------------------------------------------------------
# Pack folder layout
# ---------------------------------------------------------------------------

ORIGINAL_DIRNAME = "original"
WORK_DIRNAME = "work"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

LOG_LEVEL = os.getenv("XLIFF_ENVELOPE_LOG_LEVEL", "WARNING").upper()
LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


def configure_logging(verbose: bool = False) -> None:
    """Configure root logging for command-line use.

    WHY: Library modules only create loggers; the process entry point
    decides where records go and at which level.

    HOW: logging.basicConfig with LOG_FORMAT. ``verbose`` forces DEBUG,
    otherwise LOG_LEVEL applies. Unknown level names fall back to WARNING.

    RULES:
    - Called from the CLI only, never on import
    - Records go to stderr so stdout stays pipeable
    """
    level = logging.DEBUG if verbose else getattr(logging, LOG_LEVEL, logging.WARNING)
    logging.basicConfig(level=level, format=LOG_FORMAT)
