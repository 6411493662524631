"""
Module containing the end-to-end scan of an image in a build pipeline.
"""

import logging
import time

from .client import AnalysisClient
from .models import AnalysisRequest, RunResult
from .outcome import aggregate
from .poll import wait_for_analysis
from .reports import collect_reports, report_requests
from .submit import submit_image


logger = logging.getLogger(__name__)


def run_scan(
    settings,
    client = None,
    sleep = time.sleep,
    clock = time.monotonic,
    transport = None
) -> RunResult:
    """
    Submit the configured image, wait for the analysis and collect every report.

    Submission and polling errors are raised immediately, before any report is fetched.
    Report errors are raised together once every report has been attempted.

    If no client is given, one is created from the settings, using the given transport
    if there is one, and closed afterwards.
    """
    if client is None:
        with AnalysisClient(
            settings.url,
            settings.username,
            settings.password.get_secret_value(),
            timeout = settings.request_timeout,
            transport = transport
        ) as client:
            return run_scan(settings, client, sleep, clock)
    request = AnalysisRequest(image_reference = settings.image)
    record = submit_image(client, request)
    record = wait_for_analysis(
        client,
        record.digest,
        timeout = settings.analysis_timeout * 60,
        interval = settings.poll_interval,
        sleep = sleep,
        clock = clock
    )
    if record.analyzed_at:
        logger.info('Analysis of %s completed at %s', record.digest, record.analyzed_at.isoformat())
    requests = report_requests(
        record.digest,
        request.image_reference,
        settings.output_paths(),
        settings.policy_bundle_id
    )
    outcomes = collect_reports(client, requests)
    result = aggregate(record, outcomes)
    logger.info('All %d reports collected for %s', len(outcomes), record.digest)
    return result
