"""Unit tests for the report models and surrealkit.testing.report."""

from __future__ import annotations

import json
from datetime import UTC, datetime

import pytest
from surrealkit.models.report import AssertionReport, CaseReport, RunReport, SuiteReport
from surrealkit.testing.report import render_summary, report_json, write_json_report


def _passed(name: str) -> CaseReport:
    return CaseReport(
        name=name,
        kind="sql_expect",
        assertions=[AssertionReport(name="outcome", passed=True, message="query succeeded as expected")],
    )


def _failed(name: str) -> CaseReport:
    return CaseReport(
        name=name,
        kind="permissions_matrix",
        message="one or more permission rules failed",
        assertions=[
            AssertionReport(name="rule_1", passed=True, message="query succeeded as expected"),
            AssertionReport(name="rule_2", passed=False, message="expected failure, query succeeded"),
        ],
    )


@pytest.fixture()
def run_report() -> RunReport:
    now = datetime(2025, 1, 1, tzinfo=UTC)
    return RunReport(
        started_at=now,
        finished_at=now,
        duration_ms=42,
        suites=[
            SuiteReport(
                suite_file="database/tests/suites/auth.toml",
                suite_name="auth",
                namespace="ns1",
                database="db1",
                cases=[_passed("select"), _failed("matrix")],
            ),
            SuiteReport(
                suite_file="database/tests/suites/posts.toml",
                suite_name="posts",
                namespace="ns2",
                database="db2",
                cases=[_passed("list")],
            ),
        ],
    )


class TestReportModels:
    def test_counts_fold_over_children(self, run_report):
        assert run_report.suites_total == 2
        assert run_report.suites_failed == 1
        assert run_report.cases_total == 3
        assert run_report.cases_passed == 2
        assert run_report.cases_failed == 1
        assert run_report.passed is False

    def test_empty_case_passes(self):
        assert CaseReport(name="c", kind="sql_expect").passed is True

    def test_from_error(self):
        case = CaseReport.from_error("c", "api_request", ValueError("boom"))
        assert case.passed is False
        assert case.message == "boom"
        assert case.assertions == [AssertionReport(name="outcome", passed=False, message="boom")]


class TestRenderSummary:
    def test_only_failures_are_detailed(self, run_report):
        assert render_summary(run_report) == "\n".join(
            [
                "Test run summary:",
                "  suites: 2 total, 1 failed",
                "  cases: 3 total, 2 passed, 1 failed",
                "  duration_ms: 42",
                "suite auth [ns1 / db1]: 1 passed, 1 failed",
                "  FAIL matrix (permissions_matrix) one or more permission rules failed",
                "    - rule_2: expected failure, query succeeded",
                "suite posts [ns2 / db2]: 1 passed, 0 failed",
            ]
        )

    def test_missing_message(self):
        now = datetime(2025, 1, 1, tzinfo=UTC)
        case = CaseReport(
            name="c", kind="sql_expect", assertions=[AssertionReport(name="outcome", passed=False, message="x")]
        )
        report = RunReport(
            started_at=now,
            finished_at=now,
            suites=[SuiteReport(suite_file="a", suite_name="a", namespace="n", database="d", cases=[case])],
        )
        assert "  FAIL c (sql_expect) unknown failure" in render_summary(report).splitlines()


class TestJsonReport:
    def test_shape(self, run_report):
        payload = json.loads(report_json(run_report))
        assert payload["cases_failed"] == 1
        suite = payload["suites"][0]
        assert suite["cases_total"] == 2
        assert suite["cases"][1]["passed"] is False
        assert suite["cases"][1]["assertions"][1]["name"] == "rule_2"

    def test_write_creates_parent_directories(self, run_report, tmp_path):
        target = tmp_path / "reports" / "nested" / "run.json"
        write_json_report(target, run_report)
        assert json.loads(target.read_text(encoding="utf-8"))["suites_total"] == 2
