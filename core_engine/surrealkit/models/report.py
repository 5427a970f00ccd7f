"""Test run report models.

Reports nest strictly: run -> suites -> cases -> assertions.  Every count on
a parent is a computed fold over its children's ``passed`` flags so totals
can never drift from the detail they summarise.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, computed_field


class AssertionReport(BaseModel):
    name: str
    passed: bool
    message: str


class CaseReport(BaseModel):
    """Result of one test case.

    A case passes when every recorded assertion passed.  Unexpected errors are captured as a single failed
    ``outcome`` assertion, so a case with an error is always failed.
    """

    name: str
    kind: str
    duration_ms: int = 0
    message: str | None = None
    assertions: list[AssertionReport] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def passed(self) -> bool:
        return all(a.passed for a in self.assertions)

    @classmethod
    def from_error(cls, name: str, kind: str, error: Exception | str, duration_ms: int = 0) -> CaseReport:
        text = str(error)
        return cls(
            name=name,
            kind=kind,
            duration_ms=duration_ms,
            message=text,
            assertions=[AssertionReport(name="outcome", passed=False, message=text)],
        )


class SuiteReport(BaseModel):
    suite_file: str
    suite_name: str
    namespace: str
    database: str
    duration_ms: int = 0
    cases: list[CaseReport] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def cases_total(self) -> int:
        return len(self.cases)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def cases_passed(self) -> int:
        return sum(1 for c in self.cases if c.passed)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def cases_failed(self) -> int:
        return self.cases_total - self.cases_passed

    @property
    def passed(self) -> bool:
        return self.cases_failed == 0


class RunReport(BaseModel):
    started_at: datetime
    finished_at: datetime
    duration_ms: int = 0
    suites: list[SuiteReport] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def suites_total(self) -> int:
        return len(self.suites)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def suites_failed(self) -> int:
        return sum(1 for s in self.suites if not s.passed)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def cases_total(self) -> int:
        return sum(s.cases_total for s in self.suites)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def cases_passed(self) -> int:
        return sum(s.cases_passed for s in self.suites)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def cases_failed(self) -> int:
        return sum(s.cases_failed for s in self.suites)

    @property
    def passed(self) -> bool:
        return self.cases_failed == 0
