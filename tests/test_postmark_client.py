from unittest.mock import MagicMock, patch

import pytest
import requests

from postmark_client import PostmarkClient
from tool_errors import ErrorKind, PostmarkError


def _response(status=200, body=None, text=""):
    resp = MagicMock(spec=requests.Response)
    resp.status_code = status
    resp.ok = 200 <= status < 300
    resp.reason = "Error"
    resp.text = text
    if body is None:
        resp.json.side_effect = requests.exceptions.JSONDecodeError("Expecting value", "", 0)
    else:
        resp.json.return_value = body
    return resp


@pytest.fixture
def client(settings):
    return PostmarkClient(settings)


def test_send_email_posts_payload_with_server_token(client):
    payload = {"From": "info@x.com", "To": "a@b.com"}
    with patch("postmark_client.requests.request", return_value=_response(body={"MessageID": "m-1"})) as req:
        result = client.send_email(payload)

    assert result == {"MessageID": "m-1"}
    method, url = req.call_args.args
    kwargs = req.call_args.kwargs
    assert (method, url) == ("POST", "https://api.postmarkapp.com/email")
    assert kwargs["json"] == payload
    assert kwargs["headers"]["X-Postmark-Server-Token"] == "server-token"
    assert kwargs["timeout"] == 30.0


def test_stats_query_params(client):
    with patch("postmark_client.requests.request", return_value=_response(body={"Sent": 1})) as req:
        client.get_outbound_stats({"tag": "welcome"})

    assert req.call_args.args == ("GET", "https://api.postmarkapp.com/stats/outbound")
    assert req.call_args.kwargs["params"] == {"tag": "welcome"}


def test_stats_without_filters_sends_no_params(client):
    with patch("postmark_client.requests.request", return_value=_response(body={})) as req:
        client.get_outbound_stats({})

    assert req.call_args.kwargs["params"] is None


def test_domain_calls_use_account_token(client):
    with patch("postmark_client.requests.request", return_value=_response(body={"ID": 1})) as req:
        client.verify_domain_return_path(1)

    assert req.call_args.args == ("PUT", "https://api.postmarkapp.com/domains/1/verifyReturnPath")
    headers = req.call_args.kwargs["headers"]
    assert headers["X-Postmark-Account-Token"] == "account-token"
    assert "X-Postmark-Server-Token" not in headers


def test_postmark_error_body(client):
    body = {"ErrorCode": 1101, "Message": "Template not found."}
    with patch("postmark_client.requests.request", return_value=_response(422, body=body)):
        with pytest.raises(PostmarkError) as exc_info:
            client.get_template(9)

    err = exc_info.value
    assert err.kind == ErrorKind.UPSTREAM_FAILURE
    assert err.status_code == 422
    assert err.error_code == 1101
    assert str(err) == "Postmark API error 422 (ErrorCode 1101): Template not found."


def test_non_json_error_body(client):
    with patch("postmark_client.requests.request", return_value=_response(502, text="Bad Gateway")):
        with pytest.raises(PostmarkError, match="502: Bad Gateway"):
            client.get_templates()


def test_network_error_wrapped(client):
    with patch("postmark_client.requests.request", side_effect=requests.ConnectionError("refused")):
        with pytest.raises(PostmarkError, match="refused"):
            client.get_outbound_messages()


def test_malformed_success_body(client):
    with patch("postmark_client.requests.request", return_value=_response(200)):
        with pytest.raises(PostmarkError, match="non-JSON"):
            client.send_email({})
