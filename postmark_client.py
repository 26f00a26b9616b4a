"""
postmark_client.py
------------------
Minimal Postmark REST client.

One HTTP request per method call, no session reuse and no retries. Every
failure (network error, non-2xx status, undecodable body) is raised as
PostmarkError so the dispatcher can render it into a tool result.

API reference: https://postmarkapp.com/developer/api/overview
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from postmark_config import Settings
from tool_errors import PostmarkError

logger = logging.getLogger(__name__)


class PostmarkClient:
    def __init__(self, settings: Settings):
        self.base_url = settings.api_base_url
        self.timeout = settings.timeout_seconds
        self._server_token = settings.server_token
        # Domain endpoints authenticate with an account token
        self._account_token = settings.account_token or settings.server_token

    # ── transport ────────────────────────────────────────────────────────────

    def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
        account: bool = False,
    ) -> Any:
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if account:
            headers["X-Postmark-Account-Token"] = self._account_token
        else:
            headers["X-Postmark-Server-Token"] = self._server_token

        url = f"{self.base_url}{path}"
        logger.debug(f"Postmark {method} {path} params={params}")

        try:
            resp = requests.request(
                method, url, headers=headers, json=json, params=params, timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise PostmarkError(f"Request to Postmark failed: {e}") from e

        if not resp.ok:
            raise self._error_from_response(resp)

        try:
            return resp.json()
        except ValueError as e:
            raise PostmarkError(
                f"Postmark returned a non-JSON response (status {resp.status_code})",
                status_code=resp.status_code,
            ) from e

    @staticmethod
    def _error_from_response(resp: requests.Response) -> PostmarkError:
        try:
            body = resp.json()
        except ValueError:
            body = None

        if isinstance(body, dict) and "Message" in body:
            error_code = body.get("ErrorCode")
            return PostmarkError(
                f"Postmark API error {resp.status_code} (ErrorCode {error_code}): {body['Message']}",
                status_code=resp.status_code,
                error_code=error_code,
            )
        text = (resp.text or "").strip()[:200]
        return PostmarkError(
            f"Postmark API error {resp.status_code}: {text or resp.reason}",
            status_code=resp.status_code,
        )

    # ── email ────────────────────────────────────────────────────────────────

    def send_email(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/email", json=payload)

    def send_email_batch(self, payloads: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return self._request("POST", "/email/batch", json=payloads)

    def send_email_with_template(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/email/withTemplate", json=payload)

    # ── templates ────────────────────────────────────────────────────────────

    def create_template(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/templates", json=payload)

    def update_template(self, template_id: int, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PUT", f"/templates/{template_id}", json=payload)

    def get_templates(self, count: int = 100, offset: int = 0) -> Dict[str, Any]:
        return self._request("GET", "/templates", params={"count": count, "offset": offset})

    def get_template(self, template_id: int) -> Dict[str, Any]:
        return self._request("GET", f"/templates/{template_id}")

    # ── stats & messages ─────────────────────────────────────────────────────

    def get_outbound_stats(self, params: Dict[str, str]) -> Dict[str, Any]:
        return self._request("GET", "/stats/outbound", params=params or None)

    def get_outbound_messages(self, count: int = 10, offset: int = 0) -> Dict[str, Any]:
        return self._request("GET", "/messages/outbound", params={"count": count, "offset": offset})

    # ── domains ──────────────────────────────────────────────────────────────

    def create_domain(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/domains", json=payload, account=True)

    def verify_domain_dkim(self, domain_id: int) -> Dict[str, Any]:
        return self._request("PUT", f"/domains/{domain_id}/verifyDkim", account=True)

    def verify_domain_return_path(self, domain_id: int) -> Dict[str, Any]:
        return self._request("PUT", f"/domains/{domain_id}/verifyReturnPath", account=True)
