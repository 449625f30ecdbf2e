from __future__ import annotations

import json
from pathlib import Path

import jsonschema
import pytest
from jsonschema.exceptions import ValidationError

from erp_toolkit.logging.error_log import ErrorLogBuffer, records_from_result
from erp_toolkit.models.error_record import FILE_ERROR, ROW_VALIDATION, ErrorRecord
from erp_toolkit.models.parsed_row import ParsedRow, ParseResult
from erp_toolkit.models.rate_guide import RateGuidePayload

"""Error log JSON Lines contract: every written record matches the shipped schema."""

SCHEMA_PATH = Path(__file__).resolve().parents[2] / "erp_toolkit" / "contracts" / "error_log_schema.json"


@pytest.fixture(scope="module")
def schema() -> dict:
    return json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))


def test_written_records_validate(schema, tmp_path: Path):
    payload = RateGuidePayload(90, 12.0, 6.0, 40.0, 50.0, 70.0, 30.0, 100.0, 200.0)
    result = ParseResult(rows=[ParsedRow(2, payload, ("Ethica + Customer Ratio must equal 100% (got 90%)",))])
    buf = ErrorLogBuffer(logs_dir=tmp_path)
    buf.extend(records_from_result("rates.xlsx", result))
    buf.extend(records_from_result("broken.csv", ParseResult.failed("No data rows found in the file.")))
    path = buf.flush()

    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    for line in lines:
        jsonschema.validate(json.loads(line), schema)


def test_file_level_row_is_minus_one(schema):
    rec = ErrorRecord.create("rates.xlsx", -1, FILE_ERROR, "Failed to read the file.")
    jsonschema.validate(json.loads(rec.to_json_line()), schema)


def test_extra_keys_rejected(schema):
    data = json.loads(ErrorRecord.create("a.csv", 2, ROW_VALIDATION, "x").to_json_line())
    data["column"] = "tenor"
    with pytest.raises(ValidationError):
        jsonschema.validate(data, schema)


def test_row_below_minus_one_rejected(schema):
    data = json.loads(ErrorRecord.create("a.csv", -2, ROW_VALIDATION, "x").to_json_line())
    with pytest.raises(ValidationError):
        jsonschema.validate(data, schema)


def test_non_ascii_message_kept(schema):
    line = ErrorRecord.create("料率.csv", 2, ROW_VALIDATION, "Tenor must be a positive whole number").to_json_line()
    assert "料率.csv" in line
    jsonschema.validate(json.loads(line), schema)
