"""
tool_catalog.py
---------------
The Postmark tool table.

Each tool is a ToolDefinition: an input model (tool_schemas), a pure
`build_*_request` function producing Postmark's wire payload, and a handler
that performs the single upstream call and renders the success text.
The build functions never touch the network, so the argument → payload
mapping can be tested on its own.
"""

import json
from typing import Any, Dict, List, Optional

from delivery_stats import DeliverySummary
from postmark_config import Settings
from tool_registry import ToolDefinition, ToolRegistry
from tool_schemas import (
    BatchMessage,
    CreateDomainInput,
    CreateTemplateInput,
    DomainIdInput,
    GetDeliveryStatsInput,
    GetOutboundMessagesInput,
    GetTemplateInput,
    ListTemplatesInput,
    SendEmailBatchInput,
    SendEmailInput,
    SendEmailWithTemplateInput,
    UpdateTemplateInput,
)

LIST_TEMPLATES_PAGE_SIZE = 100


def _json(data: Any) -> str:
    return json.dumps(data, indent=2)


def _has_text(value: Optional[str]) -> bool:
    return bool(value and value.strip())


# ── Request builders (pure) ───────────────────────────────────────────────────

def build_send_email_request(args: SendEmailInput) -> Dict[str, Any]:
    payload = {
        "From": args.sender,
        "To": args.to,
        "Subject": args.subject,
        "TextBody": args.text_body,
        "MessageStream": args.message_stream,
    }
    if args.html_body:
        payload["HtmlBody"] = args.html_body
    if _has_text(args.cc):
        payload["Cc"] = args.cc
    if _has_text(args.bcc):
        payload["Bcc"] = args.bcc
    if _has_text(args.reply_to):
        payload["ReplyTo"] = args.reply_to
    if _has_text(args.tag):
        payload["Tag"] = args.tag
    return payload


def _build_batch_message(message: BatchMessage) -> Dict[str, Any]:
    payload = {
        "From": message.sender,
        "To": message.to,
        "Subject": message.subject,
        "TextBody": message.text_body,
        "MessageStream": message.message_stream,
    }
    if message.html_body:
        payload["HtmlBody"] = message.html_body
    if _has_text(message.tag):
        payload["Tag"] = message.tag
    return payload


def build_send_email_batch_request(args: SendEmailBatchInput) -> List[Dict[str, Any]]:
    return [_build_batch_message(m) for m in args.messages]


def build_send_email_with_template_request(args: SendEmailWithTemplateInput) -> Dict[str, Any]:
    payload = {
        "From": args.sender,
        "To": args.to,
        "TemplateModel": args.template_model,
        "MessageStream": args.message_stream,
    }
    if args.template_id is not None:
        payload["TemplateId"] = args.template_id
    else:
        payload["TemplateAlias"] = args.template_alias
    if _has_text(args.tag):
        payload["Tag"] = args.tag
    return payload


def build_create_template_request(args: CreateTemplateInput) -> Dict[str, Any]:
    payload = {
        "Name": args.name,
        "Subject": args.subject,
        "HtmlBody": args.html_body,
        "TextBody": args.text_body,
    }
    if args.alias:
        payload["Alias"] = args.alias
    return payload


_TEMPLATE_UPDATE_FIELDS = (
    ("name", "Name"),
    ("subject", "Subject"),
    ("html_body", "HtmlBody"),
    ("text_body", "TextBody"),
    ("alias", "Alias"),
)


def build_update_template_request(args: UpdateTemplateInput) -> Dict[str, Any]:
    """Only the fields the caller supplied; the template ID goes in the URL."""
    return {
        wire: getattr(args, attr)
        for attr, wire in _TEMPLATE_UPDATE_FIELDS
        if getattr(args, attr) is not None
    }


def build_delivery_stats_params(args: GetDeliveryStatsInput) -> Dict[str, str]:
    params = {}
    if args.from_date:
        params["fromdate"] = args.from_date
    if args.to_date:
        params["todate"] = args.to_date
    if args.tag:
        params["tag"] = args.tag
    if args.message_stream:
        params["messagestream"] = args.message_stream
    return params


def build_create_domain_request(args: CreateDomainInput) -> Dict[str, Any]:
    payload = {"Name": args.name}
    if args.return_path_domain:
        payload["ReturnPathDomain"] = args.return_path_domain
    return payload


# ── Handlers ─────────────────────────────────────────────────────────────────

def send_email(client, args: SendEmailInput) -> str:
    result = client.send_email(build_send_email_request(args))
    return f"Email sent! MessageID: {result.get('MessageID')}"


def send_email_batch(client, args: SendEmailBatchInput) -> str:
    results = client.send_email_batch(build_send_email_batch_request(args))
    return f"Batch sent! Results: {_json(results)}"


def send_email_with_template(client, args: SendEmailWithTemplateInput) -> str:
    result = client.send_email_with_template(build_send_email_with_template_request(args))
    return f"Email sent with template! MessageID: {result.get('MessageID')}"


def create_template(client, args: CreateTemplateInput) -> str:
    result = client.create_template(build_create_template_request(args))
    return f"Template created! TemplateId: {result.get('TemplateId')}"


def update_template(client, args: UpdateTemplateInput) -> str:
    result = client.update_template(args.template_id, build_update_template_request(args))
    return f"Template updated! TemplateId: {result.get('TemplateId', args.template_id)}"


def list_templates(client, args: ListTemplatesInput) -> str:
    result = client.get_templates(count=LIST_TEMPLATES_PAGE_SIZE, offset=0)
    return _json(result.get("Templates", []))


def get_template(client, args: GetTemplateInput) -> str:
    return _json(client.get_template(args.template_id))


def get_delivery_stats(client, args: GetDeliveryStatsInput) -> str:
    data = client.get_outbound_stats(build_delivery_stats_params(args))
    if not isinstance(data, dict):
        raise ValueError("unexpected stats payload from Postmark")
    return DeliverySummary.from_stats(data).to_text()


def get_outbound_messages(client, args: GetOutboundMessagesInput) -> str:
    result = client.get_outbound_messages(count=args.count, offset=args.offset)
    return _json(result.get("Messages", []))


def create_domain(client, args: CreateDomainInput) -> str:
    result = client.create_domain(build_create_domain_request(args))
    return f"Domain created! DomainId: {result.get('ID')}"


def verify_domain_dkim(client, args: DomainIdInput) -> str:
    return _json(client.verify_domain_dkim(args.domain_id))


def verify_domain_return_path(client, args: DomainIdInput) -> str:
    return _json(client.verify_domain_return_path(args.domain_id))


# ── Catalog ──────────────────────────────────────────────────────────────────

TOOL_DEFINITIONS = (
    ToolDefinition(
        name="sendEmail",
        description="Send a single email via Postmark. `from` and `messageStream` default to the server configuration.",
        input_model=SendEmailInput,
        handler=send_email,
        failure_prefix="Failed to send email",
    ),
    ToolDefinition(
        name="sendEmailBatch",
        description="Send several emails in one Postmark batch request. Defaults apply per message.",
        input_model=SendEmailBatchInput,
        handler=send_email_batch,
        failure_prefix="Failed to send batch emails",
    ),
    ToolDefinition(
        name="sendEmailWithTemplate",
        description="Send an email using a Postmark template. Provide exactly one of templateId or templateAlias.",
        input_model=SendEmailWithTemplateInput,
        handler=send_email_with_template,
        failure_prefix="Failed to send template email",
    ),
    ToolDefinition(
        name="createTemplate",
        description="Create a new email template.",
        input_model=CreateTemplateInput,
        handler=create_template,
        failure_prefix="Failed to create template",
    ),
    ToolDefinition(
        name="updateTemplate",
        description="Update an existing template. Only the supplied fields are changed.",
        input_model=UpdateTemplateInput,
        handler=update_template,
        failure_prefix="Failed to update template",
    ),
    ToolDefinition(
        name="listTemplates",
        description="List all email templates on the server.",
        input_model=ListTemplatesInput,
        handler=list_templates,
        failure_prefix="Failed to list templates",
    ),
    ToolDefinition(
        name="getTemplate",
        description="Get a single template by ID.",
        input_model=GetTemplateInput,
        handler=get_template,
        failure_prefix="Failed to get template",
    ),
    ToolDefinition(
        name="getDeliveryStats",
        description="Get outbound delivery statistics (sent, open rate, click rate), optionally filtered by tag, date range and message stream.",
        input_model=GetDeliveryStatsInput,
        handler=get_delivery_stats,
        failure_prefix="Error fetching delivery stats",
    ),
    ToolDefinition(
        name="getOutboundMessages",
        description="List recently sent messages. count is 1-500 (default 10), offset is 0 or more (default 0).",
        input_model=GetOutboundMessagesInput,
        handler=get_outbound_messages,
        failure_prefix="Failed to get outbound messages",
    ),
    ToolDefinition(
        name="createDomain",
        description="Register a new sending domain.",
        input_model=CreateDomainInput,
        handler=create_domain,
        failure_prefix="Failed to create domain",
    ),
    ToolDefinition(
        name="verifyDomainDKIM",
        description="Trigger a DKIM verification check for a domain.",
        input_model=DomainIdInput,
        handler=verify_domain_dkim,
        failure_prefix="Failed to verify DKIM",
    ),
    ToolDefinition(
        name="verifyDomainReturnPath",
        description="Trigger a Return-Path verification check for a domain.",
        input_model=DomainIdInput,
        handler=verify_domain_return_path,
        failure_prefix="Failed to verify return path",
    ),
)


def create_registry(settings: Settings, client=None) -> ToolRegistry:
    """Registry with every Postmark tool. `client` defaults to a real PostmarkClient."""
    if client is None:
        from postmark_client import PostmarkClient
        client = PostmarkClient(settings)

    registry = ToolRegistry(settings, client)
    for definition in TOOL_DEFINITIONS:
        registry.register(definition)
    return registry
