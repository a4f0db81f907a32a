from __future__ import annotations

from pathlib import Path

import pytest

from home_energy.hes_parser import extract
from home_energy.hes_parser.extract import extract_pdf_text
from home_energy.hes_parser.pipeline import NoTextExtractedError, parse_hes_pdf

BACKENDS = ["pypdf", "pdfminer"]

REPORT_LINES = [
    "HOME ENERGY SCORE",
    "This Home's Score 4 out of 10",
    "PRIORITY ENERGY IMPROVEMENTS",
    "Air Conditioner 8.0 SEER When replacing, install a 16 SEER unit",
    "Water Heater Gas storage When replacing, install a heat pump water heater",
    "ADDITIONAL ENERGY RECOMMENDATIONS",
    "Attic insulation Ceiling insulated to R-19 Insulate to R-49",
]


def build_pdf(lines: list[str]) -> bytes:
    """Single-page Helvetica PDF with one text line per entry."""

    operations = ["BT", "/F1 11 Tf"]
    y = 760
    for line in lines:
        escaped = line.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")
        operations.append(f"1 0 0 1 40 {y} Tm ({escaped}) Tj")
        y -= 18
    operations.append("ET")
    stream = "\n".join(operations).encode("latin-1")
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Count 1 /Kids [3 0 R] >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] /Contents 4 0 R "
        b"/Resources << /Font << /F1 5 0 R >> >> >>",
        b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]
    output = bytearray(b"%PDF-1.4\n")
    offsets: list[int] = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(output))
        output += b"%d 0 obj\n" % number + body + b"\nendobj\n"
    xref_offset = len(output)
    output += b"xref\n0 %d\n" % (len(objects) + 1)
    output += b"0000000000 65535 f \n"
    for offset in offsets:
        output += b"%010d 00000 n \n" % offset
    output += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (
        len(objects) + 1,
        xref_offset,
    )
    return bytes(output)


@pytest.fixture()
def report_pdf(tmp_path: Path) -> Path:
    path = tmp_path / "hes_report.pdf"
    path.write_bytes(build_pdf(REPORT_LINES))
    return path


@pytest.fixture()
def image_only_pdf(tmp_path: Path) -> Path:
    path = tmp_path / "scanned.pdf"
    path.write_bytes(build_pdf([]))
    return path


def test_extract_pdf_text_from_bytes_and_path(report_pdf: Path) -> None:
    text, meta = extract_pdf_text(report_pdf.read_bytes(), min_chars=50, prefer_backends=BACKENDS)
    assert "PRIORITY ENERGY IMPROVEMENTS" in text
    assert meta["backend"] in set(BACKENDS)
    assert meta["bytes"] == report_pdf.stat().st_size
    assert meta["error"] is None

    text_from_path, meta_from_path = extract_pdf_text(
        report_pdf, min_chars=50, prefer_backends=BACKENDS
    )
    assert "Air Conditioner" in text_from_path
    assert meta_from_path["chars"] >= 50


def test_extract_pdf_text_image_only_returns_empty(image_only_pdf: Path) -> None:
    text, meta = extract_pdf_text(image_only_pdf, min_chars=50, prefer_backends=BACKENDS)
    assert text == ""
    assert meta["backend"] == "none"
    assert meta["chars"] == 0
    assert meta["warnings"]


def test_parse_hes_pdf(report_pdf: Path) -> None:
    output = parse_hes_pdf(report_pdf, min_chars=50, prefer_backends=BACKENDS)
    assert output.hes_score == 4
    rows = {row.feature: row for row in output.suggestions}
    assert rows["Air Conditioner"].todays_condition == "8.0 SEER"
    assert rows["Water Heater"].recommendation.startswith("When replacing")
    assert rows["Attic insulation"].recommendation == "Insulate to R-49"
    assert output.debug["source"]["filename"] == "hes_report.pdf"
    assert output.debug["parser_used"].startswith("pdf-")


def test_parse_hes_pdf_without_text_raises(image_only_pdf: Path) -> None:
    with pytest.raises(NoTextExtractedError) as excinfo:
        parse_hes_pdf(image_only_pdf, min_chars=50, prefer_backends=BACKENDS)
    assert excinfo.value.meta["pdf_meta"]["backend"] == "none"


def test_backend_order_and_min_chars_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HES_PDF_BACKENDS", "pdfminer, pypdf, pdfminer")
    assert extract.resolve_backend_order(None) == ["pdfminer", "pypdf"]
    assert extract.resolve_backend_order(["pypdf"]) == ["pypdf"]
    monkeypatch.setenv("HES_MIN_PDF_CHARS", "not-a-number")
    assert extract.resolve_min_pdf_chars(None) == extract.DEFAULT_MIN_PDF_CHARS
    monkeypatch.setenv("HES_MIN_PDF_CHARS", "75")
    assert extract.resolve_min_pdf_chars(None) == 75
    assert extract.resolve_min_pdf_chars(-5) == 0
