"""
tool_schemas.py
---------------
Input models for every Postmark tool.

Each model is both the validator for a tool call and the source of the
JSON `inputSchema` advertised in tools/list. Field names are snake_case in
Python and camelCase on the wire (`textBody`, `messageStream`, ...); the
sender is exposed as `from`.

Sender and message stream defaults are NOT applied during validation.
`with_defaults(settings)` fills them afterwards, so validation errors only
ever describe what the caller sent.
"""

from typing import Annotated, Any, Dict, List, Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    StrictInt,
    StrictStr,
    StringConstraints,
    model_validator,
)
from pydantic.alias_generators import to_camel

from postmark_config import Settings

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"

DateStr = Annotated[str, StringConstraints(strict=True, pattern=DATE_PATTERN)]


def _check_email(value: str) -> str:
    """Format check only; the address is forwarded exactly as the caller wrote it."""
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError as e:
        raise ValueError(f"value is not a valid email address: {e}") from None
    return value


EmailAddress = Annotated[StrictStr, AfterValidator(_check_email)]


class ToolInput(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def with_defaults(self, settings: Settings) -> "ToolInput":
        return self


class SenderDefaultsInput(ToolInput):
    """Adds the optional `from` / `messageStream` pair backed by Settings."""

    sender: Optional[StrictStr] = Field(
        default=None, alias="from",
        description="Sender email address. Defaults to DEFAULT_SENDER_EMAIL.",
    )
    message_stream: Optional[StrictStr] = Field(
        default=None,
        description="Message stream. Defaults to DEFAULT_MESSAGE_STREAM.",
    )

    def with_defaults(self, settings: Settings):
        return self.model_copy(update={
            "sender": self.sender or settings.default_sender,
            "message_stream": self.message_stream or settings.default_message_stream,
        })


# ── Email sending ─────────────────────────────────────────────────────────────

class SendEmailInput(SenderDefaultsInput):
    to: EmailAddress = Field(..., description="Recipient email address", json_schema_extra={"format": "email"})
    subject: StrictStr = Field(..., description="Email subject")
    text_body: StrictStr = Field(..., description="Plain text body")
    html_body: Optional[StrictStr] = Field(default=None, description="HTML body (optional)")
    tag: Optional[StrictStr] = Field(default=None, description="Tag for categorization")
    cc: Optional[StrictStr] = Field(default=None, description="Comma separated CC recipients")
    bcc: Optional[StrictStr] = Field(default=None, description="Comma separated BCC recipients")
    reply_to: Optional[StrictStr] = Field(default=None, description="Reply-To address")


class BatchMessage(SenderDefaultsInput):
    to: EmailAddress = Field(..., description="Recipient email address", json_schema_extra={"format": "email"})
    subject: StrictStr
    text_body: StrictStr
    html_body: Optional[StrictStr] = None
    tag: Optional[StrictStr] = None


class SendEmailBatchInput(ToolInput):
    messages: List[BatchMessage] = Field(
        ..., min_length=1, description="Messages to send, in order",
    )

    def with_defaults(self, settings: Settings) -> "SendEmailBatchInput":
        return self.model_copy(update={
            "messages": [message.with_defaults(settings) for message in self.messages],
        })


class SendEmailWithTemplateInput(SenderDefaultsInput):
    to: EmailAddress = Field(..., description="Recipient email address", json_schema_extra={"format": "email"})
    template_id: Optional[StrictInt] = Field(default=None, description="Template ID to use")
    template_alias: Optional[StrictStr] = Field(default=None, description="Template alias to use")
    template_model: Dict[str, Any] = Field(
        default_factory=dict, description="Data model for the template, passed through as-is",
    )
    tag: Optional[StrictStr] = Field(default=None, description="Tag for categorization")

    @model_validator(mode="after")
    def _exactly_one_template_reference(self):
        has_id = self.template_id is not None
        has_alias = bool(self.template_alias)
        if has_id == has_alias:
            raise ValueError("exactly one of templateId or templateAlias must be provided")
        return self


# ── Templates ────────────────────────────────────────────────────────────────

class CreateTemplateInput(ToolInput):
    name: StrictStr = Field(..., description="Template name")
    subject: StrictStr = Field(..., description="Subject line (may contain template variables)")
    html_body: StrictStr = Field(..., description="HTML body")
    text_body: StrictStr = Field(default="", description="Plain text body")
    alias: Optional[StrictStr] = Field(default=None, description="Template alias")


class UpdateTemplateInput(ToolInput):
    template_id: StrictInt = Field(..., description="ID of the template to update")
    name: Optional[StrictStr] = None
    subject: Optional[StrictStr] = None
    html_body: Optional[StrictStr] = None
    text_body: Optional[StrictStr] = None
    alias: Optional[StrictStr] = None


class ListTemplatesInput(ToolInput):
    pass


class GetTemplateInput(ToolInput):
    template_id: StrictInt = Field(..., description="Template ID")


# ── Statistics & tracking ────────────────────────────────────────────────────

class GetDeliveryStatsInput(ToolInput):
    # messageStream is a filter here, not a sending default
    tag: Optional[StrictStr] = Field(default=None, description="Filter by tag")
    from_date: Optional[DateStr] = Field(
        default=None, description="Start date (YYYY-MM-DD)",
    )
    to_date: Optional[DateStr] = Field(
        default=None, description="End date (YYYY-MM-DD)",
    )
    message_stream: Optional[StrictStr] = Field(default=None, description="Filter by message stream")


class GetOutboundMessagesInput(ToolInput):
    count: StrictInt = Field(default=10, ge=1, le=500, description="Number of messages to return (1-500)")
    offset: StrictInt = Field(default=0, ge=0, description="Number of messages to skip (0 or more)")


# ── Domains ──────────────────────────────────────────────────────────────────

class CreateDomainInput(ToolInput):
    name: StrictStr = Field(..., description="Domain name, e.g. example.com")
    return_path_domain: Optional[StrictStr] = Field(
        default=None, description="Custom Return-Path domain (CNAME to pm.mtasv.net)",
    )


class DomainIdInput(ToolInput):
    domain_id: StrictInt = Field(..., description="Postmark domain ID")
