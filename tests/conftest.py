"""
Shared fixtures for the pipeline scan tests.

The analysis service is replaced by an ``httpx.MockTransport`` and time is replaced
by a fake clock, so no test touches the network or actually sleeps.
"""

import json

import httpx
import pytest

from soter.pipeline.client import AnalysisClient
from soter.pipeline.conf import ScanSettings


URL = 'https://anchore.test/v1'
IMAGE = 'docker.io/library/nginx:latest'
DIGEST = 'sha256:' + 'a' * 64


def analysis_body(status, digest = DIGEST, **extra):
    """
    Returns the body of an analysis response with the given status.
    """
    return json.dumps([dict(imageDigest = digest, analysis_status = status, **extra)])


def report_body(path):
    return json.dumps(dict(path = path, items = [1, 2, 3]), indent = 2).encode()


class FakeClock:
    """
    Clock that only advances when something sleeps.
    """
    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


class FakeService:
    """
    Fake analysis service.

    Each poll consumes the next entry in ``statuses``, with the last one repeated once
    they run out. Entries can be a status string or a ``(status_code, body)`` tuple.
    """
    def __init__(self):
        self.requests = []
        self.submit_response = (200, analysis_body('not_analyzed'))
        self.statuses = ['analyzed']
        #: Maps report path (relative to the URL) to an error status code
        self.report_errors = {}
        #: Report paths that fail at the transport level
        self.report_disconnects = set()
        #: Paths whose responses claim to be gzipped but are not
        self.corrupt = set()

    def handler(self, request):
        self.requests.append(request)
        path = request.url.path[len('/v1'):]
        if path in self.corrupt:
            return httpx.Response(
                200,
                headers = {'Content-Encoding': 'gzip'},
                content = b'definitely not gzip'
            )
        if request.method == 'POST' and path == '/images':
            return httpx.Response(self.submit_response[0], text = self.submit_response[1])
        if path == f'/images/{DIGEST}':
            status = self.statuses.pop(0) if len(self.statuses) > 1 else self.statuses[0]
            if isinstance(status, tuple):
                return httpx.Response(status[0], text = status[1])
            return httpx.Response(200, text = analysis_body(status))
        if path in self.report_disconnects:
            raise httpx.ConnectError('connection refused', request = request)
        if path in self.report_errors:
            return httpx.Response(self.report_errors[path], text = f'error for {path}')
        return httpx.Response(200, content = report_body(path))

    def paths(self, method = None):
        return [
            request.url.path[len('/v1'):]
            for request in self.requests
            if method is None or request.method == method
        ]

    @property
    def polls(self):
        return [p for p in self.paths('GET') if p == f'/images/{DIGEST}']

    @property
    def report_requests(self):
        return [r for r in self.requests if r.url.path.startswith(f'/v1/images/{DIGEST}/')]


@pytest.fixture
def service():
    return FakeService()


@pytest.fixture
def client(service):
    with AnalysisClient(URL, 'admin', 's3cret', transport = httpx.MockTransport(service.handler)) as client:
        yield client


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def settings(tmp_path):
    return ScanSettings(
        url = URL,
        username = 'admin',
        password = 's3cret',
        image = IMAGE,
        analysis_timeout = 1,
        poll_interval = 5,
        output_dir = tmp_path
    )
