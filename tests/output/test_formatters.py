"""Tests for output mode selection."""

import json

from nclctl.output.formatters import OutputSettings, format_result
from nclctl.services.result import ServiceError, ServiceResult

OK = ServiceResult(ok=True, op="compile", data={"truth": True, "variables": ["x"]})
FAILED = ServiceResult(
    ok=False, op="inspect", error=ServiceError(code="IO_ERROR", message="No such file")
)


class TestFormatResult:
    def test_json(self) -> None:
        parsed = json.loads(format_result(OK, settings=OutputSettings(json_output=True)))
        assert parsed["ok"] is True
        assert parsed["data"]["truth"] is True

    def test_json_wins_over_quiet(self) -> None:
        out = format_result(OK, settings=OutputSettings(json_output=True, quiet=True))
        assert json.loads(out)["op"] == "compile"

    def test_quiet(self) -> None:
        assert format_result(OK, settings=OutputSettings(quiet=True)) == "OK: compile"

    def test_default_is_rich(self) -> None:
        assert format_result(OK).startswith("OK  compile")

    def test_error(self) -> None:
        out = format_result(FAILED, settings=OutputSettings(quiet=True))
        assert out == "ERROR: inspect: No such file"

