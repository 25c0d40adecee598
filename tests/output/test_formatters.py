"""Tests for format_result in JSON and human modes."""

import json
from typing import Any

from restodesk.domain.errors import BusinessRuleError, NotFoundError
from restodesk.output.formatters import format_result
from restodesk.services.result import Fail, Ok, fail, ok
from tests.conftest import make_action, make_ticket_message


def format_result_json(result: Ok[Any] | Fail) -> dict[str, Any]:
    return json.loads(format_result(result, json_output=True))


class TestFormatResultJSON:
    def test_ok_payload(self) -> None:
        output = format_result_json(ok(make_action(), op="create_action"))
        assert output["ok"] is True
        assert output["op"] == "create_action"
        assert output["data"]["id"] == "action-1"
        assert output["data"]["week_start"] == "2024-03-04"

    def test_error_carries_kind(self) -> None:
        output = format_result_json(
            fail(NotFoundError.for_entity("report", "r-1"), op="send_report")
        )
        assert output["ok"] is False
        assert output["error"]["kind"] == "not_found"
        assert output["error"]["entity"] == "report"


class TestFormatResultHuman:
    def test_ok_mapping(self) -> None:
        output = format_result(ok({"path": "/tmp/x.csv", "bytes": 120}, op="export"))
        assert output.splitlines()[0] == "OK: export"
        assert "  path: /tmp/x.csv" in output
        assert "  bytes: 120" in output

    def test_model_skips_none_fields(self) -> None:
        output = format_result(ok(make_action(), op="create_action"))
        assert "  title: Shorten prep time" in output
        assert "done_evidence" not in output

    def test_list_renders_table(self) -> None:
        rows = [make_action(id="a1"), make_action(id="a2", title="Add a lunch combo")]
        output = format_result(ok(rows, op="list_actions"))
        lines = output.splitlines()
        assert lines[0] == "OK: list_actions"
        assert "id" in lines[1] and "status" in lines[1] and "title" in lines[1]
        assert any("a2" in line and "Add a lunch combo" in line for line in lines)

    def test_long_cells_truncated(self) -> None:
        message = make_ticket_message(content="x" * 200)
        output = format_result(ok([message], op="get_ticket_messages"))
        assert "x" * 60 not in output
        assert "…" in output

    def test_empty_list(self) -> None:
        assert "(none)" in format_result(ok([], op="list_reports"))

    def test_error_line(self) -> None:
        output = format_result(
            fail(BusinessRuleError(message="Only planned actions", rule="ACTION_CANNOT_DISCARD"))
        )
        assert output.startswith("ERROR:")
        assert "(ACTION_CANNOT_DISCARD) Only planned actions" in output
