"""
Module containing exceptions that can be raised during a pipeline scan.
"""


class ScanError(Exception):
    """
    Base class for all pipeline scan errors.

    Each concrete error has a unique code, which is also used as the exit status
    of the command line tool.
    """
    __seen__ = dict()

    #: The code for the error
    code = None
    #: The default message for the error
    message = "Scan error"

    def __init_subclass__(cls):
        # Make sure that the code has not been used for another error
        if cls.code is None:
            return
        if cls.code in ScanError.__seen__:
            message = 'code {} already in use by {}'.format(
                cls.code,
                ScanError.__seen__[cls.code].__name__
            )
            raise TypeError(message)
        ScanError.__seen__[cls.code] = cls

    def __init__(self, detail = None):
        self.detail = detail
        super().__init__(f'{self.message}: {detail}' if detail else self.message)


class HttpError(ScanError):
    """
    Base class for errors caused by an unexpected response from the analysis service.
    """
    def __init__(self, detail = None, status_code = None, body = None):
        self.status_code = status_code
        self.body = body
        if status_code is not None:
            detail = f'{detail} (HTTP {status_code}): {body}'
        elif body:
            detail = f'{detail}: {body}'
        super().__init__(detail)


class ServiceUnavailable(ScanError):
    """
    Raised when the analysis service cannot be reached at all.
    """
    message = "Analysis service unavailable"
    code = 1


class SubmissionError(HttpError):
    """
    Raised when an image cannot be submitted for analysis.
    """
    message = "Image submission failed"
    code = 10


class PollingTransportError(HttpError):
    """
    Raised when the analysis service returns an unexpected response while polling.
    """
    message = "Analysis status request failed"
    code = 20


class PollingTimeoutError(ScanError):
    """
    Raised when the analysis does not complete within the timeout.
    """
    message = "Timed out waiting for analysis"
    code = 21


class UnexpectedAnalysisStatus(ScanError):
    """
    Raised when the analysis service reports a status that is neither a success nor
    a state that will eventually lead to one.
    """
    message = "Unexpected analysis status"
    code = 22

    def __init__(self, status):
        self.status = status
        super().__init__(repr(status))


class ReportFetchError(HttpError):
    """
    Raised for a single report that could not be fetched.

    These are never raised by the collector directly. Instead, they are attached to the
    report outcomes and surfaced together by ``ReportCollectionFailed``.
    """
    message = "Report fetch failed"
    code = 30


class ReportCollectionFailed(ScanError):
    """
    Raised once all reports have been attempted if at least one of them failed.
    """
    message = "One or more reports could not be fetched"
    code = 31

    def __init__(self, failures, result = None):
        #: The failed report outcomes
        self.failures = list(failures)
        #: The run result containing every outcome, successful or not
        self.result = result
        super().__init__('; '.join(outcome.as_error().detail for outcome in self.failures))


class ConfigurationError(ScanError):
    """
    Raised when the scan settings are invalid.
    """
    message = "Invalid configuration"
    code = 40
