# tests/test_exporter.py
from datetime import datetime

import pytest

from racikpc.errors import ExportError
from racikpc.exporter import build_rows, export_filename, format_printed_at, render_pdf
from racikpc.models import Part, PartCategory
from racikpc.partlist import BuildSession


def _make_build(cpu_specs="LGA1700", mobo_specs="LGA 1700"):
    build = BuildSession()
    build.select_part(PartCategory.CPU, Part(id=1, name="Intel Core i5-13400F",
                                             category=PartCategory.CPU, price=3500000, specs=cpu_specs))
    build.select_part(PartCategory.MOTHERBOARD, Part(id=3, name="MSI PRO B760M-A",
                                                     category=PartCategory.MOTHERBOARD, price=2400000,
                                                     specs=mobo_specs))
    return build


def test_build_rows_for_compatible_build():
    rows = build_rows(_make_build())
    assert rows[0] == ("CPU", "Intel Core i5-13400F", "Rp3.500.000")
    assert rows[1] == ("Motherboard", "MSI PRO B760M-A", "Rp2.400.000")
    assert rows[-1] == ("", "Total Harga", "Rp5.900.000")


def test_build_rows_refuses_empty_build():
    with pytest.raises(ExportError, match="no parts selected"):
        build_rows(BuildSession())


def test_build_rows_refuses_incompatible_build():
    with pytest.raises(ExportError, match="Socket mismatch"):
        build_rows(_make_build(cpu_specs="AM5", mobo_specs="AM4"))


def test_render_pdf_returns_pdf_bytes():
    document = render_pdf(_make_build(), printed_at=datetime(2026, 10, 19, 14, 5, 3))
    assert isinstance(document, bytes)
    assert document.startswith(b"%PDF")


def test_render_pdf_handles_non_latin_names():
    build = BuildSession()
    build.select_part(PartCategory.GPU, Part(id=5, name="RTX 4060 – ゲーム",
                                             category=PartCategory.GPU, price=8000000))
    assert render_pdf(build).startswith(b"%PDF")


def test_render_pdf_skips_missing_logo(tmp_path):
    document = render_pdf(_make_build(), logo_path=str(tmp_path / "missing.png"))
    assert document.startswith(b"%PDF")


def test_format_printed_at_matches_id_locale():
    assert format_printed_at(datetime(2026, 10, 9, 7, 5, 3)) == "9/10/2026, 07.05.03"


def test_export_filename_uses_epoch_millis():
    moment = datetime(2026, 10, 19, 12, 0, 0)
    expected = int(moment.timestamp() * 1000)
    assert export_filename(moment) == f"Rakitan-NPC-{expected}.pdf"
