"""XLIFF Envelope: carry the original document and manifest inside an XLIFF.

WHY: A document extracted for translation is only mergeable again if the
original file and the extraction manifest are available. Embedding both
as base64 attachments makes the translated XLIFF self-contained.

HOW: Two-way core, build (pack folder → enveloped XLIFF) and unpack
(enveloped XLIFF → pack folder), behind a small argparse CLI.

RULES:
- The envelope adds two <file> entries in front of the existing ones
- Existing entries are preserved unchanged
- Extraction and format conversion happen elsewhere
"""

__version__ = "0.1.0"
