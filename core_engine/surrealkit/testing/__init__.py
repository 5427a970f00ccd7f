"""Declarative test orchestration: spec loading, filtering, actors and the runner."""

from surrealkit.testing.actors import ActorSession, build_actor_sessions, close_sessions, require_actor
from surrealkit.testing.api import ApiResult, execute_api_case
from surrealkit.testing.assertions import assert_header_value, assert_json_value, lookup_path
from surrealkit.testing.filters import apply_filters, glob_match
from surrealkit.testing.loader import load_global_config, load_specs, load_suites
from surrealkit.testing.report import render_summary, report_json, write_json_report
from surrealkit.testing.runner import TestRunner, resolve_base_url, resolve_timeout_ms, run_test_suites

__all__ = [
    "ActorSession",
    "ApiResult",
    "TestRunner",
    "apply_filters",
    "assert_header_value",
    "assert_json_value",
    "build_actor_sessions",
    "close_sessions",
    "execute_api_case",
    "glob_match",
    "load_global_config",
    "load_specs",
    "load_suites",
    "lookup_path",
    "render_summary",
    "report_json",
    "require_actor",
    "resolve_base_url",
    "resolve_timeout_ms",
    "run_test_suites",
    "write_json_report",
]
