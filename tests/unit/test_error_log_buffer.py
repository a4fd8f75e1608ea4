from __future__ import annotations

import json
import re
from pathlib import Path

from delivery_converter.logging.error_log import ErrorLogBuffer, ErrorRecord
from delivery_converter.models.error_record import FILE_LEVEL_SHEET, MAPPING_FAILED, WORKBOOK_READ_ERROR
from delivery_converter.models.records import MappingFailure

KEYS = {"timestamp", "file", "sheet", "row", "error_type", "message"}


def test_error_record_creation_and_json_line():
    rec = ErrorRecord.create(
        file="week.xlsx",
        sheet="월",
        row=31,
        error_type="MAPPING_FAILED",
        message="store name not in mapping table: Downtown Store",
    )
    data = json.loads(rec.to_json_line())

    assert data["file"] == "week.xlsx"
    assert data["sheet"] == "월"
    assert data["row"] == 31
    assert data["error_type"] == "MAPPING_FAILED"
    assert data["timestamp"].endswith("Z")
    assert set(data.keys()) == KEYS
    # 非 ASCII はそのまま出力
    assert "월" in rec.to_json_line()


def test_record_for_mapping_failure():
    rec = ErrorRecord.for_mapping_failure("week.xlsx", MappingFailure("수", "Downtown Store", 40))

    assert (rec.sheet, rec.row, rec.error_type) == ("수", 40, MAPPING_FAILED)
    assert rec.message == "store name not in mapping table: Downtown Store"
    assert rec.is_file_level is False


def test_record_for_file():
    rec = ErrorRecord.for_file("mapping.xlsx", WORKBOOK_READ_ERROR, "cannot read workbook")

    assert (rec.file, rec.sheet, rec.row) == ("mapping.xlsx", FILE_LEVEL_SHEET, -1)
    assert rec.is_file_level is True


def test_error_log_buffer_flush(temp_workdir: Path):
    buf = ErrorLogBuffer()
    buf.append(ErrorRecord.create("week.xlsx", "월", 31, "MAPPING_FAILED", "Downtown Store"))
    buf.append(ErrorRecord.create("week.xlsx", "화", 31, "MAPPING_FAILED", "Downtown Store"))

    path = buf.flush()

    assert path is not None and path.exists()
    assert buf.path == path
    assert path.parent.resolve() == (temp_workdir / "logs").resolve()
    assert re.fullmatch(r"errors-\d{8}-\d{6}\.log", path.name)
    lines = path.read_text(encoding="utf-8").strip().splitlines()
    assert len(lines) == 2
    for raw in lines:
        assert set(json.loads(raw).keys()) == KEYS
    assert len(buf) == 0
    assert buf.written == 2


def test_empty_buffer_writes_nothing(tmp_path: Path):
    buf = ErrorLogBuffer(logs_dir=tmp_path / "logs")
    assert buf.flush() is None
    assert buf.path is None
    assert not (tmp_path / "logs").exists()


def test_extend_and_counts(tmp_path: Path):
    buf = ErrorLogBuffer(logs_dir=tmp_path)
    failures = [MappingFailure("월", "A", 31), MappingFailure("화", "A", 31)]
    buf.extend(ErrorRecord.for_mapping_failure("w.xlsx", f) for f in failures)
    buf.append(ErrorRecord.for_file("w.xlsx", WORKBOOK_READ_ERROR, "x"))

    assert len(buf) == 3
    assert buf.counts() == {MAPPING_FAILED: 2, WORKBOOK_READ_ERROR: 1}


def test_multiple_flushes_append_to_same_file(tmp_path: Path):
    buf = ErrorLogBuffer(logs_dir=tmp_path / "nested" / "logs")
    buf.append(ErrorRecord.create("f.xlsx", "월", 1, "MAPPING_FAILED", "a"))
    path = buf.flush()
    size1 = path.stat().st_size

    buf.append(ErrorRecord.create("f.xlsx", "화", 2, "MAPPING_FAILED", "b"))
    path2 = buf.flush()

    assert path == path2
    assert path2.stat().st_size > size1
    assert len(path2.read_text(encoding="utf-8").splitlines()) == 2
