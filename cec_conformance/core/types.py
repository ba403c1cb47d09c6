# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Core types for conformance verdicts and run reporting."""

import re
from dataclasses import dataclass, field
from enum import Enum

from cec_conformance.core.constants import EXIT_ERROR, EXIT_FAILURE_CAP, EXIT_OK
from cec_conformance.core.errors import OperatorInputError


class Verdict(Enum):
    """Outcome of one test case run against one remote logical address.

    The value is the numeric code accepted by the expected-result syntax.
    """

    PASS = 0
    FAIL = 1
    OK_PRESUMED = 2
    OK_NOT_SUPPORTED = 3
    OK_REFUSED = 4
    OK_UNEXPECTED = 5
    FAIL_CRITICAL = 7
    NOT_APPLICABLE = 8

    @property
    def label(self) -> str:
        return _VERDICT_LABELS[self]

    @property
    def is_failure(self) -> bool:
        return self in (Verdict.FAIL, Verdict.FAIL_CRITICAL)

    @classmethod
    def parse(cls, token: str) -> "Verdict":
        """Parse an operator-supplied verdict token.

        Accepts the numeric code (``"2"``) or the member name with any
        case and ``-``/``_``/space separators (``"ok-presumed"``). ``OK``
        is an alias for PASS.

        Raises:
            OperatorInputError: If the token names no verdict.
        """
        text = token.strip()
        if text.isdigit():
            try:
                return cls(int(text))
            except ValueError:
                raise OperatorInputError(f"Unknown verdict code: {token}") from None
        normalized = re.sub(r"[\s\-]+", "_", text).upper()
        if normalized == "OK":
            return cls.PASS
        if normalized in ("N/A", "NA", "NOTAPPLICABLE"):
            return cls.NOT_APPLICABLE
        try:
            return cls[normalized]
        except KeyError:
            raise OperatorInputError(f"Unknown verdict: {token}") from None


_VERDICT_LABELS = {
    Verdict.PASS: "OK",
    Verdict.FAIL: "FAIL",
    Verdict.OK_PRESUMED: "OK (Presumed)",
    Verdict.OK_NOT_SUPPORTED: "OK (Not Supported)",
    Verdict.OK_REFUSED: "OK (Refused)",
    Verdict.OK_UNEXPECTED: "OK (Unexpected)",
    Verdict.FAIL_CRITICAL: "FAIL CRITICAL",
    Verdict.NOT_APPLICABLE: "N/A",
}


class ReportStatus(str, Enum):
    """How a verdict was reconciled with the operator's expectation.

    AS_OBSERVED: No expectation, or the expectation matched; report the verdict
    EXPECTED_FAIL: The case failed and FAIL was the expected result
    EXPECTATION_MISMATCH: An explicit expectation differs from the verdict
    UNEXPECTED_WARNINGS: Expectation matched but warnings were emitted
        although "no warnings" was requested
    """

    AS_OBSERVED = "as_observed"
    EXPECTED_FAIL = "expected_fail"
    EXPECTATION_MISMATCH = "expectation_mismatch"
    UNEXPECTED_WARNINGS = "unexpected_warnings"


@dataclass
class CaseResult:
    """Result of a single test case against a single remote device."""

    area: str
    name: str
    target: int
    verdict: Verdict
    status: ReportStatus = ReportStatus.AS_OBSERVED
    expected: Verdict | None = None
    warnings: int = 0
    message: str | None = None

    @property
    def is_reported_failure(self) -> bool:
        """True if this result counts against the run's exit status."""
        if self.status in (
            ReportStatus.EXPECTATION_MISMATCH,
            ReportStatus.UNEXPECTED_WARNINGS,
        ):
            return True
        if self.status == ReportStatus.EXPECTED_FAIL:
            return False
        return self.verdict.is_failure

    @property
    def is_printed(self) -> bool:
        """N/A results are only shown when an expectation was set."""
        return self.verdict != Verdict.NOT_APPLICABLE or self.expected is not None

    def render(self) -> str:
        """Verdict text as it appears on the result line."""
        if self.status == ReportStatus.EXPECTATION_MISMATCH:
            assert self.expected is not None
            return (
                f"{Verdict.FAIL.label} (Expected '{self.expected.label}', "
                f"got '{self.verdict.label}')"
            )
        if self.status == ReportStatus.UNEXPECTED_WARNINGS:
            return (
                f"{Verdict.FAIL.label} (Expected no warnings, but got {self.warnings})"
            )
        if self.status == ReportStatus.EXPECTED_FAIL:
            return "OK (Expected Failure)"
        return self.verdict.label

    def __str__(self) -> str:
        return f"{self.name}: {self.render()}"


@dataclass
class RunReport:
    """Aggregated results of one conformance run.

    Attributes:
        results: Every case result in execution order
        critical_targets: Logical addresses whose schedule was aborted
        skipped_targets: Logical addresses skipped before testing (standby)
        errors: Setup or transport errors that prevented testing
    """

    results: list[CaseResult] = field(default_factory=list)
    critical_targets: list[int] = field(default_factory=list)
    skipped_targets: list[int] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def add(self, result: CaseResult) -> None:
        self.results.append(result)

    @property
    def passed(self) -> int:
        return sum(
            1
            for r in self.results
            if not r.is_reported_failure and r.verdict != Verdict.NOT_APPLICABLE
        )

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if r.is_reported_failure)

    @property
    def skipped(self) -> int:
        return sum(1 for r in self.results if r.verdict == Verdict.NOT_APPLICABLE)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def has_failures(self) -> bool:
        return self.failed > 0

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def exit_code(self) -> int:
        """Exit status for the CLI.

        Exit codes:
            0: No reportable failure
            1-250: Number of reportable failures (capped at 250)
            255: The run could not be performed
        """
        if self.has_errors:
            return EXIT_ERROR
        if self.has_failures:
            return min(self.failed, EXIT_FAILURE_CAP)
        return EXIT_OK

    def __str__(self) -> str:
        """Concise string representation: total/passed/failed/skipped."""
        return f"{self.total}/{self.passed}/{self.failed}/{self.skipped}"
