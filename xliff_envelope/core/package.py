"""The conversion package handed to the builder, and pack-folder discovery.

WHY: The extraction pipeline leaves three files behind (the XLIFF it
produced, the manifest describing the extraction, and the original
document) inside a pack folder. The builder needs all three plus the
folder itself (the output path is anchored next to it).

HOW: ConversionPackage is a plain dataclass of paths. from_folder()
discovers the three files from the standard pack layout:

  <pack>/manifest.rkm
  <pack>/original/<original filename>
  <pack>/work/<original filename>.xlf

RULES:
- The package is read-only to this library; nothing here writes files
- from_folder() raises InvalidArgumentError naming the missing piece
- original/ must hold exactly one regular file
- The work XLIFF is matched by name first, then by the single .xlf present
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from xliff_envelope.config import (
    MANIFEST_FILENAME,
    ORIGINAL_DIRNAME,
    WORK_DIRNAME,
    XLIFF_SUFFIX,
)
from xliff_envelope.core.errors import InvalidArgumentError


@dataclass(frozen=True)
class ConversionPackage:
    """References to the files produced by one extraction run.

    RULES:
    - xlf: base XLIFF whose entries are preserved unchanged
    - manifest: extraction manifest, embedded as manifest.rkm
    - original_file: the document before any conversion, embedded first
    - pack_folder: the output XLIFF is written into its parent directory
    """

    xlf: Path
    manifest: Path
    original_file: Path
    pack_folder: Path

    @property
    def output_path(self) -> Path:
        """Where the builder writes: ``<pack_folder.parent>/<original name>.xlf``."""
        return self.pack_folder.parent / f"{self.original_file.name}{XLIFF_SUFFIX}"

    @classmethod
    def from_folder(cls, pack_folder: str | Path) -> ConversionPackage:
        """Discover a package from a pack folder with the standard layout.

        Args:
            pack_folder: Directory containing manifest.rkm, original/ and work/.

        Returns:
            A ConversionPackage with resolved absolute paths.

        Raises:
            InvalidArgumentError: If any part of the layout is missing.
        """
        folder = Path(pack_folder).resolve()
        if not folder.is_dir():
            raise InvalidArgumentError(f"Pack folder does not exist: {folder}")

        manifest = folder / MANIFEST_FILENAME
        if not manifest.is_file():
            raise InvalidArgumentError(f"Pack folder has no {MANIFEST_FILENAME}: {folder}")

        original_file = _find_original(folder / ORIGINAL_DIRNAME)
        xlf = _find_work_xliff(folder / WORK_DIRNAME, original_file.name)

        return cls(
            xlf=xlf,
            manifest=manifest,
            original_file=original_file,
            pack_folder=folder,
        )


def _find_original(original_dir: Path) -> Path:
    if not original_dir.is_dir():
        raise InvalidArgumentError(f"Missing '{ORIGINAL_DIRNAME}' folder: {original_dir}")
    files = sorted(p for p in original_dir.iterdir() if p.is_file())
    if len(files) != 1:
        raise InvalidArgumentError(
            f"Expected exactly one original file in {original_dir}, found {len(files)}"
        )
    return files[0]


def _find_work_xliff(work_dir: Path, original_name: str) -> Path:
    if not work_dir.is_dir():
        raise InvalidArgumentError(f"Missing '{WORK_DIRNAME}' folder: {work_dir}")

    expected = work_dir / f"{original_name}{XLIFF_SUFFIX}"
    if expected.is_file():
        return expected

    # Some extraction runs name the work file after the stem only
    candidates = sorted(work_dir.glob(f"*{XLIFF_SUFFIX}"))
    if len(candidates) == 1:
        return candidates[0]
    raise InvalidArgumentError(
        f"Cannot locate the work XLIFF for '{original_name}' in {work_dir}"
    )
