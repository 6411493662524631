"""
Module containing the polling loop that waits for analysis to complete.
"""

import logging
import time

from .client import is_success
from .exceptions import (
    PollingTimeoutError,
    PollingTransportError,
    ServiceUnavailable,
    UnexpectedAnalysisStatus
)
from .models import AnalysisRecord, AnalysisStatus


logger = logging.getLogger(__name__)


def fetch_record(client, digest) -> AnalysisRecord:
    """
    Fetch the current analysis record for the given digest.
    """
    try:
        response = client.get(f'/images/{digest}')
    except ServiceUnavailable as exc:
        raise PollingTransportError(exc.detail) from exc
    if not is_success(response):
        raise PollingTransportError(digest, response.status_code, response.text)
    try:
        record = AnalysisRecord.from_response(response.content)
    except ValueError as exc:
        raise PollingTransportError(
            f'{digest}: invalid response ({exc})',
            response.status_code,
            response.text
        ) from exc
    # The digest identifies the image for the whole run, so it must never change
    if record.digest != digest:
        raise PollingTransportError(
            f'requested {digest} but service returned {record.digest}',
            response.status_code,
            response.text
        )
    return record


def wait_for_analysis(
    client,
    digest,
    timeout,
    interval,
    sleep = time.sleep,
    clock = time.monotonic
) -> AnalysisRecord:
    """
    Poll the analysis status for the given digest until the analysis completes.

    ``timeout`` and ``interval`` are both in seconds. Returns the analysis record once the
    image is analyzed. The status is checked before the first sleep, so an image that is
    already analyzed returns immediately.
    """
    deadline = clock() + timeout
    last_status = None
    while True:
        if clock() >= deadline:
            raise PollingTimeoutError(f'{digest} not analyzed after {timeout:g}s')
        record = fetch_record(client, digest)
        if record.raw_status != last_status:
            logger.info('Analysis status for %s: %s', digest, record.raw_status)
            last_status = record.raw_status
        status = record.status
        if status is AnalysisStatus.ANALYZED:
            return record
        elif not status.is_pending:
            # Anything that is not known to lead to analyzed is fatal, including failed
            raise UnexpectedAnalysisStatus(record.raw_status)
        # Never sleep past the deadline
        remaining = deadline - clock()
        if remaining <= 0:
            raise PollingTimeoutError(f'{digest} not analyzed after {timeout:g}s')
        logger.debug('Waiting %.1fs before checking analysis status again', min(interval, remaining))
        sleep(min(interval, remaining))
