"""
Module containing the aggregation of report outcomes into a single result.
"""

from typing import Iterable

from .exceptions import ReportCollectionFailed
from .models import AnalysisRecord, ReportOutcome, RunResult


def aggregate(record: AnalysisRecord, outcomes: Iterable[ReportOutcome]) -> RunResult:
    """
    Combine the analysis record and the report outcomes into a run result.

    If any report failed, ``ReportCollectionFailed`` is raised listing every failure.
    The result is attached to the exception so that callers can still inspect it.
    """
    outcomes = list(outcomes)
    failures = [outcome for outcome in outcomes if not outcome.succeeded]
    result = RunResult(
        digest = record.digest,
        final_status = record.status,
        report_outcomes = outcomes,
        overall_success = not failures
    )
    if failures:
        raise ReportCollectionFailed(failures, result)
    return result
