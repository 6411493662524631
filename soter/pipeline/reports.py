"""
Module containing the collection of reports for an analysed image.
"""

import logging
import pathlib
from typing import Iterable, List, Mapping, Optional

from .client import is_success
from .exceptions import ServiceUnavailable
from .models import ReportKind, ReportOutcome, ReportRequest


logger = logging.getLogger(__name__)


def report_requests(
    digest,
    image_reference,
    outputs: Mapping[ReportKind, pathlib.Path],
    policy_bundle_id: Optional[str] = None
) -> List[ReportRequest]:
    """
    Returns the requests for every report kind, in fetch order.
    """
    requests = []
    for kind in ReportKind:
        params = {}
        if kind is ReportKind.POLICY_EVALUATION:
            params.update(tag = image_reference, detail = 'true')
            # Without a bundle id, the service evaluates against the active bundle
            if policy_bundle_id:
                params.update(bundle_id = policy_bundle_id)
        requests.append(
            ReportRequest(
                kind = kind,
                endpoint_path = kind.path_template.format(digest = digest),
                params = params,
                output_target = outputs[kind]
            )
        )
    return requests


def write_report(target: pathlib.Path, content: bytes):
    """
    Write the report body to the target exactly as received.
    """
    target.parent.mkdir(parents = True, exist_ok = True)
    target.write_bytes(content)


def fetch_report(client, request: ReportRequest) -> ReportOutcome:
    """
    Fetch a single report and write it to the output target.

    Failures are returned as an unsuccessful outcome rather than raised.
    """
    logger.info('Fetching %s report', request.kind.value)
    try:
        response = client.get(request.endpoint_path, params = request.params or None)
    except ServiceUnavailable as exc:
        outcome = ReportOutcome(kind = request.kind, succeeded = False, error_body = exc.detail)
    else:
        if is_success(response):
            try:
                write_report(request.output_target, response.content)
            except OSError as exc:
                error_body = f'could not write {request.output_target}: {exc}'
            else:
                logger.info('Wrote %s report to %s', request.kind.value, request.output_target)
                return ReportOutcome(
                    kind = request.kind,
                    http_status = response.status_code,
                    succeeded = True
                )
        else:
            error_body = response.text
        outcome = ReportOutcome(
            kind = request.kind,
            http_status = response.status_code,
            succeeded = False,
            error_body = error_body
        )
    logger.warning('%s', outcome.as_error())
    return outcome


def collect_reports(client, requests: Iterable[ReportRequest]) -> List[ReportOutcome]:
    """
    Fetch every requested report, returning the outcomes in the same order.

    Every request is attempted, regardless of whether earlier requests failed.
    """
    return [fetch_report(client, request) for request in requests]
