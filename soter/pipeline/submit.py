"""
Module containing the submission of images to the analysis service.
"""

import logging

from .client import is_success
from .exceptions import ServiceUnavailable, SubmissionError
from .models import AnalysisRecord, AnalysisRequest


logger = logging.getLogger(__name__)


def submit_image(client, request: AnalysisRequest) -> AnalysisRecord:
    """
    Submit the image for analysis and return the initial analysis record.

    Images are submitted without subscribing to tag updates, since the pipeline only
    cares about the image as it is now.
    """
    logger.info('Submitting image for analysis: %s', request.image_reference)
    try:
        response = client.post(
            '/images',
            json = dict(tag = request.image_reference),
            params = dict(autosubscribe = 'false')
        )
    except ServiceUnavailable as exc:
        raise SubmissionError(exc.detail) from exc
    if not is_success(response):
        raise SubmissionError(request.image_reference, response.status_code, response.text)
    try:
        record = AnalysisRecord.from_response(response.content)
    except ValueError as exc:
        raise SubmissionError(
            f'{request.image_reference}: invalid response ({exc})',
            response.status_code,
            response.text
        ) from exc
    logger.info(
        'Image submitted: %s (digest: %s, status: %s)',
        request.image_reference,
        record.digest,
        record.raw_status
    )
    return record
