"""
Module providing the HTTP client for the image analysis service.
"""

import logging

import httpx

from .exceptions import ServiceUnavailable


logger = logging.getLogger(__name__)


#: The status codes that the service uses to indicate success
SUCCESS_CODES = {200, 202}


class AnalysisClient:
    """
    Thin client for the analysis service API.

    All requests are made with basic authentication against the configured URL, and
    return the raw ``httpx.Response`` so that callers can decide how to treat the
    status code. Request failures, including transport errors and undecodable bodies,
    are raised as ``ServiceUnavailable``.
    """
    def __init__(self, url, username, password, timeout = 30.0, transport = None):
        self.url = url.rstrip('/')
        #: The URL without any credentials, for logging
        self.display_url = str(httpx.URL(self.url).copy_with(userinfo = b''))
        self._client = httpx.Client(
            base_url = self.url,
            auth = httpx.BasicAuth(username, password),
            timeout = timeout,
            headers = {'Accept': 'application/json'},
            transport = transport
        )

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def close(self):
        self._client.close()

    def request(self, method, path, **kwargs) -> httpx.Response:
        """
        Make a request to the given path, relative to the service URL.
        """
        logger.debug('%s %s%s', method, self.display_url, path)
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.RequestError as exc:
            # Includes transport failures and bodies that cannot be decoded
            raise ServiceUnavailable(f'{method} {path}: {exc!r}') from exc
        logger.debug('%s %s%s -> %d', method, self.display_url, path, response.status_code)
        return response

    def get(self, path, params = None) -> httpx.Response:
        return self.request('GET', path, params = params)

    def post(self, path, json = None, params = None) -> httpx.Response:
        return self.request('POST', path, json = json, params = params)


def is_success(response: httpx.Response):
    """
    Returns true if the response has one of the status codes the service uses for success.
    """
    return response.status_code in SUCCESS_CODES
