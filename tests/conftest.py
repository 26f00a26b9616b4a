"""
Shared fixtures: settings, a recording fake Postmark client and a registry
wired to it. No test talks to the real Postmark API.
"""

import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from postmark_config import Settings  # noqa: E402
from tool_catalog import create_registry  # noqa: E402
from tool_errors import PostmarkError  # noqa: E402


class FakePostmarkClient:
    """Records every call; returns canned responses or raises a set error."""

    def __init__(self):
        self.calls = []
        self.responses = {}
        self.error = None

    def _call(self, method, *args, **kwargs):
        self.calls.append((method, args, kwargs))
        if self.error is not None:
            raise self.error
        return self.responses.get(method, {})

    def last_call(self):
        return self.calls[-1]

    def send_email(self, payload):
        return self._call("send_email", payload)

    def send_email_batch(self, payloads):
        return self._call("send_email_batch", payloads)

    def send_email_with_template(self, payload):
        return self._call("send_email_with_template", payload)

    def create_template(self, payload):
        return self._call("create_template", payload)

    def update_template(self, template_id, payload):
        return self._call("update_template", template_id, payload)

    def get_templates(self, count=100, offset=0):
        return self._call("get_templates", count=count, offset=offset)

    def get_template(self, template_id):
        return self._call("get_template", template_id)

    def get_outbound_stats(self, params):
        return self._call("get_outbound_stats", params)

    def get_outbound_messages(self, count=10, offset=0):
        return self._call("get_outbound_messages", count=count, offset=offset)

    def create_domain(self, payload):
        return self._call("create_domain", payload)

    def verify_domain_dkim(self, domain_id):
        return self._call("verify_domain_dkim", domain_id)

    def verify_domain_return_path(self, domain_id):
        return self._call("verify_domain_return_path", domain_id)


@pytest.fixture
def settings():
    return Settings(
        server_token="server-token",
        default_sender="info@x.com",
        default_message_stream="outbound",
        account_token="account-token",
    )


@pytest.fixture
def fake_client():
    return FakePostmarkClient()


@pytest.fixture
def registry(settings, fake_client):
    return create_registry(settings, client=fake_client)


@pytest.fixture
def upstream_error():
    return PostmarkError("Postmark API error 422 (ErrorCode 300): Invalid 'To' address", status_code=422, error_code=300)
