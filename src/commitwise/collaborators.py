"""
commitwise — language-model collaborator interfaces.

The verification engine hands its ``CheckResult`` to collaborators that talk
to a model and to the user. Only their seams live here; concrete clients are
provided by the embedding application and driven by ``review_staged_change``
within the bounds of ``ReviewSettings``.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Final, Protocol

from commitwise.checks.models import CheckResult
from commitwise.config.settings import ReviewSettings
from commitwise.constants import MAX_CHECK_OUTPUT_CHARS, MAX_ISSUES_TO_DISPLAY
from commitwise.project.context import ProjectContext

logger = logging.getLogger(__name__)

SYSTEM_PROMPT_CHECKS_PASSED: Final[str] = """\
You are a pre-commit reviewer. The project's automated checks passed on this
staged change, so do not repeat what type checkers, linters, builds, or tests
would catch. Report only concrete problems evidenced by the diff: logic errors,
runtime failures, race conditions, meaningful performance regressions, and
security mistakes.

Respond with JSON only: {"issues": [{"file": "<path>", "issue": "<description>"}]}.
Return {"issues": []} when the diff shows no such problem.
"""

SYSTEM_PROMPT_NO_CHECKS: Final[str] = """\
You are a pre-commit reviewer acting as a semantic code scanner. Automated
checks did not run or did not pass on this staged change. Report only concrete
problems evidenced by the diff: runtime errors, crashes, logic errors,
meaningful performance regressions, and security mistakes. A definition that is
removed and re-added in the same diff is a refactoring, not a duplicate.

Respond with JSON only: {"issues": [{"file": "<path>", "issue": "<description>"}]}.
Return {"issues": []} when the diff shows no such problem.
"""


@dataclass(frozen=True, slots=True)
class Issue:
    """One finding; ``file`` is the path from the diff header when known."""

    issue: str
    file: str | None = None

    def render(self) -> str:
        return f"[{self.file}] {self.issue}" if self.file else self.issue


@dataclass(frozen=True, slots=True)
class CheckSummary:
    """Model explanation of a failed check; issues are most actionable first."""

    summary: str
    top_issues: tuple[Issue, ...] = ()

    def displayed_issues(self, limit: int = MAX_ISSUES_TO_DISPLAY) -> tuple[Issue, ...]:
        return self.top_issues[: max(0, limit)]


class CheckOutputSummarizer(Protocol):
    def summarize(self, check_name: str, output: str) -> CheckSummary: ...


class DiffScanner(Protocol):
    def scan(self, diff: str, system_prompt: str, context: str) -> Sequence[Issue]: ...


class ApprovalFlow(Protocol):
    def confirm_proceed(self, result: CheckResult) -> bool: ...


def scan_prompt_for(result: CheckResult) -> str:
    """Pick the scanner prompt for a verification outcome.

    Only a check that ran and passed earns the "checks passed" prompt. A failed
    check the user chose to proceed past is scanned as if nothing ran.
    """

    if result.ran and result.ok:
        return SYSTEM_PROMPT_CHECKS_PASSED
    return SYSTEM_PROMPT_NO_CHECKS


def truncate_for_model(text: str, limit: int = MAX_CHECK_OUTPUT_CHARS) -> str:
    """Keep the first ``limit`` characters of ``text``."""

    if limit < 0:
        raise ValueError("limit must be >= 0")
    return text if len(text) <= limit else text[:limit]


def build_framework_context(context: ProjectContext) -> str:
    return "\n".join(
        (
            "Project context:",
            f"- framework: {context.framework.value}",
            f"- language: {context.language.value}",
            "",
            "Guardrails:",
            "- Do not report framework best-practice advice as an issue.",
            "- Report state-update problems only when the diff shows a broken update path.",
            "- Report performance problems only for meaningful regressions.",
            "- Avoid may/might/could wording unless the diff shows a definite failure path.",
        )
    )


@dataclass(frozen=True, slots=True)
class ReviewOutcome:
    """What the commit flow should do after verification and model review.

    ``summary`` is set only for a failed check and carries at most
    ``max_issues_displayed`` issues. ``issues`` are the diff scanner's findings.
    """

    proceed: bool
    summary: CheckSummary | None = None
    issues: tuple[Issue, ...] = ()


def review_staged_change(
    result: CheckResult,
    diff: str,
    context: ProjectContext,
    *,
    scanner: DiffScanner,
    settings: ReviewSettings | None = None,
    summarizer: CheckOutputSummarizer | None = None,
    approval: ApprovalFlow | None = None,
) -> ReviewOutcome:
    """Drive the model collaborators over one verification outcome.

    A failed check is summarized (when a summarizer is given) and the user is
    asked whether to continue; without an approval flow a failed check stops
    the commit. Once the commit may proceed, the staged diff is scanned unless
    ``settings.scan_enabled`` is off.
    """

    review = settings if settings is not None else ReviewSettings()

    summary: CheckSummary | None = None
    if result.failed:
        if summarizer is not None:
            output = truncate_for_model(result.output or "", review.max_check_output_chars)
            full = summarizer.summarize(result.name or "", output)
            summary = CheckSummary(
                summary=full.summary,
                top_issues=full.displayed_issues(review.max_issues_displayed),
            )
        if approval is None or not approval.confirm_proceed(result):
            logger.info("commit stopped after failed check %s", result.name)
            return ReviewOutcome(proceed=False, summary=summary)

    if not review.scan_enabled:
        logger.debug("diff scan disabled")
        return ReviewOutcome(proceed=True, summary=summary)

    found = scanner.scan(
        truncate_for_model(diff, review.max_diff_chars),
        scan_prompt_for(result),
        build_framework_context(context),
    )
    logger.debug("diff scan reported %d issue(s)", len(found))
    return ReviewOutcome(proceed=True, summary=summary, issues=tuple(found))


__all__ = [
    "MAX_CHECK_OUTPUT_CHARS",
    "MAX_ISSUES_TO_DISPLAY",
    "SYSTEM_PROMPT_CHECKS_PASSED",
    "SYSTEM_PROMPT_NO_CHECKS",
    "ApprovalFlow",
    "CheckOutputSummarizer",
    "CheckSummary",
    "DiffScanner",
    "Issue",
    "ReviewOutcome",
    "build_framework_context",
    "review_staged_change",
    "scan_prompt_for",
    "truncate_for_model",
]
