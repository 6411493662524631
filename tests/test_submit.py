import json

import pytest

from soter.pipeline.exceptions import SubmissionError
from soter.pipeline.models import AnalysisRequest, AnalysisStatus
from soter.pipeline.submit import submit_image

from .conftest import DIGEST, IMAGE, analysis_body


@pytest.fixture
def request_():
    return AnalysisRequest(image_reference = IMAGE)


@pytest.mark.parametrize('status_code', [200, 202])
def test_submit_success(service, client, request_, status_code):
    service.submit_response = (status_code, analysis_body('analyzing'))
    record = submit_image(client, request_)
    assert record.digest == DIGEST
    assert record.status is AnalysisStatus.ANALYZING
    # Check the request that was actually sent
    [request] = service.requests
    assert request.method == 'POST'
    assert request.url.params['autosubscribe'] == 'false'
    assert json.loads(request.content) == {'tag': IMAGE}
    assert request.headers['authorization'].startswith('Basic ')


@pytest.mark.parametrize('status_code', [201, 400, 401, 404, 500, 503])
def test_submit_bad_status(service, client, request_, status_code):
    service.submit_response = (status_code, 'registry unreachable')
    with pytest.raises(SubmissionError) as excinfo:
        submit_image(client, request_)
    assert excinfo.value.status_code == status_code
    assert 'registry unreachable' in str(excinfo.value)
    assert len(service.requests) == 1


@pytest.mark.parametrize('body', [
    'not json',
    '[]',
    '{"imageDigest": "sha256:abc", "analysis_status": "analyzing"}',
    '[{"analysis_status": "analyzing"}]',
    '[{"imageDigest": "sha256:abc"}]',
    '[{"imageDigest": "", "analysis_status": "analyzing"}]',
])
def test_submit_invalid_body(service, client, request_, body):
    service.submit_response = (200, body)
    with pytest.raises(SubmissionError, match = 'invalid response'):
        submit_image(client, request_)


def test_submit_unreachable(request_):
    import httpx
    from soter.pipeline.client import AnalysisClient

    def handler(request):
        raise httpx.ConnectError('connection refused', request = request)

    with AnalysisClient('https://anchore.test', 'u', 'p', transport = httpx.MockTransport(handler)) as client:
        with pytest.raises(SubmissionError, match = 'connection refused'):
            submit_image(client, request_)


def test_submit_undecodable_body(service, client, request_):
    service.corrupt = {'/images'}
    with pytest.raises(SubmissionError):
        submit_image(client, request_)
