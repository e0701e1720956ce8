"""Tests for reading embedded files back out of an enveloped XLIFF.

WHY: The envelope is only useful if the original document and manifest
come back out byte for byte and the remaining XLIFF is exactly what the
extraction pipeline produced.

HOW: Each test builds an enveloped XLIFF with the real builder, then
reads, splits, or unpacks it.
"""

from pathlib import Path

import pytest
from lxml import etree

from xliff_envelope.core.builder import build
from xliff_envelope.core.errors import (
    EncodingFailureError,
    InvalidArgumentError,
    XliffProcessingError,
)
from xliff_envelope.core.extractor import (
    EmbeddedFile,
    read_embedded_files,
    split_envelope,
    unpack,
)


class TestReadEmbeddedFiles:
    def test_returns_both_attachments(self, sample_pack):
        files = read_embedded_files(build(sample_pack))
        assert files == [
            EmbeddedFile(filename="a.docx", format="docx", content=b"hello"),
            EmbeddedFile(filename="manifest.rkm", format="rkm", content=b"\x01\x02"),
        ]

    def test_plain_xliff_has_none(self, tmp_path, make_xliff):
        path = tmp_path / "plain.xlf"
        path.write_text(make_xliff([("a.docx", "en", "it", "x")]), encoding="utf-8")
        assert read_embedded_files(path) == []

    def test_invalid_payload(self, tmp_path):
        path = tmp_path / "bad.xlf"
        path.write_text(
            '<xliff version="1.2"><file tool-id="matecat-converter" original="a.docx" '
            'datatype="x-docx"><header><reference><internal-file form="base64">'
            "not*base64</internal-file></reference></header><body/></file></xliff>",
            encoding="utf-8",
        )
        with pytest.raises(EncodingFailureError, match="a.docx"):
            read_embedded_files(path)

    def test_reindented_payload(self, tmp_path):
        path = tmp_path / "wrapped.xlf"
        path.write_text(
            '<xliff version="1.2"><file tool-id="matecat-converter" original="a.docx" '
            'datatype="x-docx"><header><reference><internal-file form="base64">\n'
            "    aGVs\n    bG8=\n  </internal-file></reference></header><body/></file></xliff>",
            encoding="utf-8",
        )
        assert read_embedded_files(path)[0].content == b"hello"

    def test_ignores_other_tools(self, tmp_path):
        path = tmp_path / "other.xlf"
        path.write_text(
            '<xliff version="1.2"><file tool-id="someone-else" original="a.docx" '
            'datatype="x-docx"><header><reference><internal-file form="base64">'
            "aGVsbG8=</internal-file></reference></header><body/></file></xliff>",
            encoding="utf-8",
        )
        assert read_embedded_files(path) == []

    def test_missing_file(self, tmp_path):
        with pytest.raises(XliffProcessingError) as exc_info:
            read_embedded_files(tmp_path / "nope.xlf")
        assert exc_info.value.stage == "parse"


class TestSplitEnvelope:
    def test_removes_envelope_entries(self, make_pack):
        package = make_pack(entries=[("x.docx", "en", "it", "a"), ("y.docx", "en", "it", "b")])
        original, manifest, root = split_envelope(build(package))

        assert original.content == b"hello"
        assert manifest.content == b"\x01\x02"
        assert [e.get("original") for e in root.findall("{*}file")] == ["x.docx", "y.docx"]

    def test_missing_manifest(self, tmp_path):
        path = tmp_path / "half.xlf"
        path.write_text(
            '<xliff version="1.2"><file tool-id="matecat-converter" original="a.docx" '
            'datatype="x-docx"><header><reference><internal-file form="base64">'
            "aGVsbG8=</internal-file></reference></header><body/></file></xliff>",
            encoding="utf-8",
        )
        with pytest.raises(XliffProcessingError) as exc_info:
            split_envelope(path)
        assert exc_info.value.stage == "extract"

    def test_plain_xliff(self, tmp_path, make_xliff):
        path = tmp_path / "plain.xlf"
        path.write_text(make_xliff([("a.docx", "en", "it", "x")]), encoding="utf-8")
        with pytest.raises(XliffProcessingError, match="manifest.rkm"):
            split_envelope(path)


class TestUnpack:
    def test_recreates_pack_layout(self, make_pack, tmp_path, file_entries):
        package = make_pack(original_bytes=b"\x00docx bytes\xff")
        enveloped = build(package)

        restored = unpack(enveloped, tmp_path / "restored")

        assert restored.original_file.name == "a.docx"
        assert restored.original_file.read_bytes() == b"\x00docx bytes\xff"
        assert restored.manifest.read_bytes() == b"\x01\x02"
        assert restored.xlf.name == "a.docx.xlf"

        entries = file_entries(restored.xlf)
        assert len(entries) == 1
        assert entries[0].findtext("{*}body/{*}trans-unit/{*}source") == "Hello world"

    def test_rebuild_after_unpack(self, make_pack, tmp_path, file_entries):
        enveloped = build(make_pack())
        restored = unpack(enveloped, tmp_path / "jobs" / "restored")

        rebuilt = build(restored)

        assert rebuilt == tmp_path / "jobs" / "a.docx.xlf"
        assert [e.get("original") for e in file_entries(rebuilt)] == [
            "a.docx",
            "manifest.rkm",
            "a.docx",
        ]

    def test_uses_renamed_original(self, make_pack, tmp_path):
        enveloped = build(make_pack(original_name="report.docx"), "doc")
        restored = unpack(enveloped, tmp_path / "restored")
        assert restored.original_file.name == "report.doc"

    def test_refuses_non_empty_folder(self, sample_pack, tmp_path):
        enveloped = build(sample_pack)
        target = tmp_path / "busy"
        target.mkdir()
        (target / "keep.txt").write_text("x", encoding="utf-8")

        with pytest.raises(InvalidArgumentError):
            unpack(enveloped, target)
        assert [p.name for p in target.iterdir()] == ["keep.txt"]

    def test_accepts_empty_existing_folder(self, sample_pack, tmp_path):
        enveloped = build(sample_pack)
        target = tmp_path / "empty"
        target.mkdir()
        assert unpack(enveloped, target).original_file.read_bytes() == b"hello"

    def test_strips_directory_from_embedded_name(self, tmp_path):
        path = tmp_path / "sneaky.xlf"
        path.write_text(
            '<xliff version="1.2">'
            '<file tool-id="matecat-converter" original="../../evil.docx" datatype="x-docx">'
            '<header><reference><internal-file form="base64">aGVsbG8=</internal-file>'
            "</reference></header><body/></file>"
            '<file tool-id="matecat-converter" original="manifest.rkm" datatype="x-rkm">'
            '<header><reference><internal-file form="base64">AQI=</internal-file>'
            "</reference></header><body/></file>"
            "</xliff>",
            encoding="utf-8",
        )
        restored = unpack(path, tmp_path / "out")
        assert restored.original_file == (tmp_path / "out" / "original" / "evil.docx").resolve()
        assert not (tmp_path / "evil.docx").exists()

    def test_work_xliff_is_well_formed(self, sample_pack, tmp_path):
        restored = unpack(build(sample_pack), tmp_path / "restored")
        root = etree.parse(str(restored.xlf)).getroot()
        assert etree.QName(root).localname == "xliff"

    @pytest.mark.parametrize("name", ["a/..", ".."])
    def test_rejects_dot_dot_name(self, tmp_path, name):
        path = tmp_path / "dotdot.xlf"
        path.write_text(
            '<xliff version="1.2">'
            '<file tool-id="matecat-converter" original="{}" datatype="x-docx">'
            '<header><reference><internal-file form="base64">aGVsbG8=</internal-file>'
            "</reference></header><body/></file>"
            '<file tool-id="matecat-converter" original="manifest.rkm" datatype="x-rkm">'
            '<header><reference><internal-file form="base64">AQI=</internal-file>'
            "</reference></header><body/></file>"
            "</xliff>".format(name),
            encoding="utf-8",
        )
        with pytest.raises(XliffProcessingError) as exc_info:
            unpack(path, tmp_path / "out")
        assert exc_info.value.stage == "extract"
        assert not (tmp_path / "out").exists()

    def test_write_failure_is_processing_error(self, sample_pack, tmp_path, monkeypatch):
        enveloped = build(sample_pack)

        def _fail(self, data):
            raise PermissionError("read-only")

        monkeypatch.setattr(Path, "write_bytes", _fail)
        with pytest.raises(XliffProcessingError) as exc_info:
            unpack(enveloped, tmp_path / "out")
        assert exc_info.value.stage == "serialize"
        assert isinstance(exc_info.value.__cause__, PermissionError)
