import base64
import json
from unittest import mock

import pytest
import requests
from pytest_httpserver import HTTPServer
from werkzeug import Response

from neoaura import constants
from neoaura.exceptions import TransportError
from neoaura.http.client import AuraHttpClient, HttpResponse


def _response(status_code=200, content=b'{"data": {}}'):
    response = mock.MagicMock()
    response.status_code = status_code
    response.content = content
    return response


def _client_with_session(side_effect, sleeps, **kwargs):
    session = mock.MagicMock(spec=requests.Session)
    session.request.side_effect = side_effect
    kwargs.setdefault("max_attempts", 5)
    kwargs.setdefault("retry_interval", 15)
    client = AuraHttpClient(
        base_url="https://api.neo4j.io", session=session, sleep=sleeps.append, **kwargs
    )
    return client, session


class TestRetries:
    def test_timeout_is_retried_until_success(self):
        sleeps = []
        client, session = _client_with_session(
            [requests.exceptions.ConnectTimeout(), requests.exceptions.ReadTimeout(), _response()],
            sleeps,
        )

        response = client.send("GET", "/v1/instances/1234", token="token")

        assert response == HttpResponse(200, b'{"data": {}}')
        assert session.request.call_count == 3
        assert sleeps == [15, 15]

    def test_timeout_retries_exhausted(self):
        sleeps = []
        client, session = _client_with_session(requests.exceptions.ConnectTimeout(), sleeps)

        with pytest.raises(TransportError) as e:
            client.send("POST", "/v1/instances", body='{"name": "t1"}', token="token")

        assert session.request.call_count == 5
        assert sleeps == [15] * 4
        assert e.value.attempts == 5
        assert e.value.method == "POST"
        assert e.value.url == "https://api.neo4j.io/v1/instances"
        assert "unable to execute POST request after 5 attempts" in e.value.message
        assert "url: https://api.neo4j.io/v1/instances" in e.value.message
        assert 'payload: {"name": "t1"}' in e.value.message

    def test_connection_error_is_not_retried(self):
        sleeps = []
        client, session = _client_with_session(
            requests.exceptions.ConnectionError("connection refused"), sleeps
        )

        with pytest.raises(TransportError) as e:
            client.send("GET", "/v1/instances/1234", token="token")

        assert session.request.call_count == 1
        assert sleeps == []
        assert "connection refused" in e.value.message

    def test_error_status_codes_are_returned(self):
        client, _ = _client_with_session([_response(500, b"internal error")], [])

        response = client.send("GET", "/v1/instances/1234", token="token")

        assert not response.ok
        assert response.status_code == 500
        assert response.text == "internal error"

    def test_configured_timeout_is_passed(self):
        client, session = _client_with_session([_response()], [], timeout=7)

        client.send("GET", "/v1/instances", token="token", params={"tenantId": "t"})

        kwargs = session.request.call_args.kwargs
        assert kwargs["timeout"] == 7
        assert kwargs["params"] == {"tenantId": "t"}
        assert kwargs["url"] == "https://api.neo4j.io/v1/instances"


class TestRequests:
    def test_bearer_token(self, httpserver: HTTPServer):
        def _echo_headers(request):
            return Response(json.dumps(dict(request.headers)), mimetype="application/json")

        httpserver.expect_request("/v1/instances/1234").respond_with_handler(_echo_headers)

        with AuraHttpClient(base_url=httpserver.url_for("/")) as client:
            response = client.send("GET", "/v1/instances/1234", token="my-token")

        headers = json.loads(response.body)
        assert response.ok
        assert headers["Authorization"] == "Bearer my-token"
        assert headers["Content-Type"] == "application/json"
        assert headers["User-Agent"] == constants.USER_AGENT

    def test_basic_auth(self, httpserver: HTTPServer):
        expected = "Basic " + base64.b64encode(b"client-id:client-secret").decode()
        httpserver.expect_request(
            "/oauth/token",
            method="POST",
            headers={"Authorization": expected},
            data='{"grant_type": "client_credentials"}',
        ).respond_with_json({"access_token": "token"})

        with AuraHttpClient(base_url=httpserver.url_for("/")) as client:
            response = client.send(
                "POST",
                "/oauth/token",
                body='{"grant_type": "client_credentials"}',
                basic_auth=("client-id", "client-secret"),
            )

        assert response.status_code == 200
        assert json.loads(response.body) == {"access_token": "token"}

    def test_query_parameters(self, httpserver: HTTPServer):
        httpserver.expect_request(
            "/v1/instances", query_string={"tenantId": "tenant-1"}
        ).respond_with_json({"data": []})

        with AuraHttpClient(base_url=httpserver.url_for("/")) as client:
            response = client.send("GET", "/v1/instances", token="t", params={"tenantId": "tenant-1"})

        assert response.ok
        assert response.body == b'{"data": []}'


def test_url():
    client = AuraHttpClient(base_url="https://api.neo4j.io/")
    assert client.url("/v1/instances") == "https://api.neo4j.io/v1/instances"
    assert client.url("https://other.example.com/x") == "https://other.example.com/x"
