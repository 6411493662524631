"""
Module containing models for the data exchanged with the analysis service.
"""

import datetime
import pathlib
from enum import Enum
from typing import Dict, List, Optional

from dateutil.parser import isoparse
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, constr, field_validator

from .exceptions import ReportFetchError


class AnalysisStatus(str, Enum):
    """
    Enumeration of the possible analysis states for an image.
    """
    NOT_ANALYZED = "not_analyzed"
    ANALYZING = "analyzing"
    ANALYZED = "analyzed"
    FAILED = "failed"
    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value):
        # Any status the service invents is treated as unknown
        return cls.UNKNOWN

    @property
    def is_pending(self):
        """
        Indicates if the analysis is still expected to complete.
        """
        return self in {AnalysisStatus.NOT_ANALYZED, AnalysisStatus.ANALYZING}


class AnalysisRequest(BaseModel):
    """
    Model for a request to analyse an image.
    """
    model_config = ConfigDict(frozen = True)

    #: The image reference as given to the service, e.g. docker.io/library/nginx:latest
    image_reference: constr(strip_whitespace = True, min_length = 1)


class AnalysisRecord(BaseModel):
    """
    Model for an image analysis record returned by the service.
    """
    model_config = ConfigDict(populate_by_name = True)

    #: The content-derived digest that identifies the image
    digest: constr(min_length = 1) = Field(alias = 'imageDigest')
    #: The status string exactly as reported by the service
    raw_status: constr(min_length = 1) = Field(alias = 'analysis_status')
    #: The time that analysis completed, if it has
    analyzed_at: Optional[datetime.datetime] = None
    #: The raw response body that the record was parsed from
    body: Optional[bytes] = Field(default = None, repr = False)

    @field_validator('analyzed_at', mode = 'before')
    @classmethod
    def parse_analyzed_at(cls, value):
        # The service sends an empty string or null until analysis completes
        if not value:
            return None
        if isinstance(value, str):
            return isoparse(value)
        return value

    @property
    def status(self) -> AnalysisStatus:
        """
        The analysis status as an ``AnalysisStatus``.
        """
        return AnalysisStatus(self.raw_status)

    @classmethod
    def from_response(cls, body: bytes) -> 'AnalysisRecord':
        """
        Parse the first analysis record from a raw response body.

        The service always responds with a list of records, even for a single image.
        Raises ``ValueError`` if the body is not a non-empty list of records. Note that
        pydantic's ``ValidationError`` is a subclass of ``ValueError``.
        """
        if isinstance(body, str):
            body = body.encode()
        records = ANALYSIS_RECORDS.validate_json(body)
        if not records:
            raise ValueError('response contains no analysis records')
        return records[0].model_copy(update = dict(body = body))


#: Adapter used to parse the list of records in a service response
ANALYSIS_RECORDS = TypeAdapter(List[AnalysisRecord])


class ReportKind(str, Enum):
    """
    Enumeration of the reports collected for an analysed image.

    The order of the members is the order in which the reports are fetched.
    """
    VULNERABILITIES = "vulnerabilities"
    POLICY_EVALUATION = "policy_evaluation"
    CONTENT_OS = "content_os"
    CONTENT_FILES = "content_files"
    CONTENT_NPM = "content_npm"
    CONTENT_GEM = "content_gem"
    CONTENT_PYTHON = "content_python"
    CONTENT_JAVA = "content_java"

    @property
    def path_template(self):
        """
        The endpoint path for the report, with a ``{digest}`` placeholder.
        """
        if self is ReportKind.VULNERABILITIES:
            return '/images/{digest}/vuln/all'
        elif self is ReportKind.POLICY_EVALUATION:
            return '/images/{digest}/check'
        else:
            # Content reports are named for the content type
            return '/images/{digest}/content/' + self.value[len('content_'):]


class ReportRequest(BaseModel):
    """
    Model describing a single report to fetch.
    """
    model_config = ConfigDict(frozen = True)

    #: The kind of the report
    kind: ReportKind
    #: The path of the endpoint, relative to the service URL
    endpoint_path: constr(min_length = 1)
    #: Query parameters for the request
    params: Dict[str, str] = Field(default_factory = dict)
    #: The file that the report body is written to
    output_target: pathlib.Path


class ReportOutcome(BaseModel):
    """
    Model for the result of fetching a single report.
    """
    #: The kind of the report
    kind: ReportKind
    #: The HTTP status of the response, or None if no response was received
    http_status: Optional[int] = None
    #: Indicates if the report was fetched and written successfully
    succeeded: bool
    #: The response body (or error description) for a failed report
    error_body: Optional[str] = None

    def as_error(self):
        """
        Return a ``ReportFetchError`` describing this outcome, or None if it succeeded.
        """
        if self.succeeded:
            return None
        return ReportFetchError(self.kind.value, self.http_status, self.error_body)


class RunResult(BaseModel):
    """
    Model for the result of a complete scan.
    """
    #: The digest of the analysed image
    digest: constr(min_length = 1)
    #: The final analysis status of the image
    final_status: AnalysisStatus
    #: The outcome of each report, in fetch order
    report_outcomes: List[ReportOutcome]
    #: Indicates if every stage of the scan succeeded
    overall_success: bool

    @property
    def failures(self):
        return [outcome for outcome in self.report_outcomes if not outcome.succeeded]
