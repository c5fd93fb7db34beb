import io

import pandas as pd
import pytest

from roster_core.importer import (
    ImportDecodeError, build_session, decode_workbook, extract_rows,
    hydrate_record, load_import, validate_rows,
)

def _xlsx(headers, rows) -> bytes:
    buf = io.BytesIO()
    pd.DataFrame(rows, columns=headers).to_excel(buf, index=False)
    return buf.getvalue()

def test_scenario_nombre_back_squat_unknown_column():
    session = build_session(["Nombre", "Back Squat", "XYZ"],
                            [["Juan", "100", "ignored"], ["", "90", ""]])
    assert session.records == [{"name": "Juan", "back_squat": "100"}]
    assert session.dropped_count == 1

def test_same_scenario_from_xlsx_bytes():
    data = _xlsx(["Nombre", "Back Squat", "XYZ"], [["Juan", "100", "ignored"], ["", "90", ""]])
    session = load_import(data, filename="roster.xlsx")
    assert session.headers == ["Nombre", "Back Squat", "XYZ"]
    assert session.records == [{"name": "Juan", "back_squat": "100"}]

def test_numeric_cells_are_stringified():
    data = _xlsx(["Nombre", "Deadlift", "Bench"], [["Ana", 120, 62.5], ["Luis", 140.0, None]])
    session = load_import(data)
    assert session.records == [
        {"name": "Ana", "deadlift": "120", "bench_press": "62.5"},
        {"name": "Luis", "deadlift": "140"},
    ]

def test_blank_rows_dropped_and_values_trimmed():
    rows = [["  Ana  ", " 8:30 "], [None, None], ["", ""], ["Bo", None]]
    records = extract_rows(["Nombre", "Karen"], rows, {"Nombre": "name", "Karen": "karen"})
    assert records == [{"name": "Ana", "karen": "8:30"}, {"name": "Bo"}]

def test_row_without_name_never_survives():
    records = [{"back_squat": "100", "deadlift": "150", "karen": "7:00"}, {"name": "   "}, {"name": "Eva"}]
    assert validate_rows(records) == [{"name": "Eva"}]

def test_remap_reruns_extraction():
    session = build_session(["Atleta Nombre", "Squat"], [["Ana", "90"], ["Bo", "80"]])
    assert session.records == []
    session.remap("Atleta Nombre", "name")
    session.remap("Squat", "back_squat")
    assert session.records == [{"name": "Ana", "back_squat": "90"}, {"name": "Bo", "back_squat": "80"}]
    session.remap("Squat", None)
    assert session.records == [{"name": "Ana"}, {"name": "Bo"}]

def test_remap_rejects_unknown_targets():
    session = build_session(["Nombre"], [["Ana"]])
    with pytest.raises(ValueError):
        session.remap("Nombre", "shoe_size")
    with pytest.raises(KeyError):
        session.remap("Apellido", "name")

def test_import_is_deterministic():
    data = _xlsx(["Cliente", "Peso Muerto", "Corte"],
                 [["Ana", "100", "05"], ["Bo", "120", "15"], ["Cy", "90", "01"]])
    first = load_import(data)
    second = load_import(data)
    first.remap("Corte", None)
    second.remap("Corte", None)
    assert first.records == second.records
    assert [r["name"] for r in first.records] == ["Ana", "Bo", "Cy"]

def test_csv_upload_is_read_as_single_sheet():
    session = load_import(b"Nombre,Deadlift\nAna,120\n,\nBo,130\n", filename="roster.csv")
    assert session.records == [{"name": "Ana", "deadlift": "120"}, {"name": "Bo", "deadlift": "130"}]

def test_decode_rejects_garbage():
    with pytest.raises(ImportDecodeError):
        decode_workbook(b"definitely not a spreadsheet")

def test_legacy_xls_is_refused_with_clear_message():
    ole_header = b"\xD0\xCF\x11\xE0\xA1\xB1\x1A\xE1" + b"\x00" * 4096
    with pytest.raises(ImportDecodeError, match=r"\.xls no es compatible"):
        decode_workbook(ole_header, filename="Roster.XLS")

def test_decode_rejects_header_only_file():
    with pytest.raises(ImportDecodeError):
        decode_workbook(_xlsx(["Nombre", "Deadlift"], []))

def test_hydrate_fills_commit_defaults():
    rec = hydrate_record({"name": "Ana"})
    assert rec["payment_status"] == "pending"
    assert len(rec["access_code"]) == 4
    kept = hydrate_record({"name": "Bo", "access_code": "BO99", "payment_status": "active"})
    assert kept["access_code"] == "BO99"
    assert kept["payment_status"] == "active"
