"""
tool_registry.py
----------------
Tool registry and dispatcher.

dispatch() is the single boundary between a transport (stdio or HTTP) and
the tool handlers. It always returns a ToolResult: unknown tools, invalid
arguments and upstream failures are returned as data, never raised.

    dispatch(name, args)
      → look up definition           (UnknownTool)
      → validate with input model    (InvalidArgument)
      → with_defaults(settings)
      → handler(client, validated)   (UpstreamFailure)
      → ToolResult
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Type

from mcp import types
from pydantic import ValidationError

from postmark_config import Settings
from tool_errors import ErrorKind
from tool_schemas import ToolInput

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolDefinition:
    name: str
    description: str
    input_model: Type[ToolInput]
    handler: Callable[[Any, ToolInput], str]
    failure_prefix: str

    def input_schema(self) -> Dict[str, Any]:
        schema = self.input_model.model_json_schema(by_alias=True)
        schema.setdefault("properties", {})
        return schema

    def to_mcp_tool(self) -> types.Tool:
        return types.Tool(
            name=self.name,
            description=self.description,
            inputSchema=self.input_schema(),
        )


@dataclass
class ToolResult:
    content: List[types.TextContent] = field(default_factory=list)
    error_kind: Optional[ErrorKind] = None

    @classmethod
    def text(cls, text: str) -> "ToolResult":
        return cls(content=[types.TextContent(type="text", text=text)])

    @classmethod
    def failure(cls, kind: ErrorKind, text: str) -> "ToolResult":
        return cls(content=[types.TextContent(type="text", text=text)], error_kind=kind)

    @property
    def is_error(self) -> bool:
        return self.error_kind is not None

    @property
    def first_text(self) -> str:
        return self.content[0].text if self.content else ""

    def to_call_tool_result(self) -> types.CallToolResult:
        return types.CallToolResult(content=list(self.content), isError=self.is_error)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-RPC `result` payload for tools/call."""
        return {
            "content": [{"type": "text", "text": c.text} for c in self.content],
            "isError": self.is_error,
        }


def format_validation_error(exc: ValidationError) -> str:
    """`field.path: reason` for each error, joined with '; '."""
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        msg = err.get("msg", "invalid value")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts)


class ToolRegistry:
    """Maps tool names to definitions; owns settings and the Postmark client."""

    def __init__(self, settings: Settings, client: Any):
        self.settings = settings
        self.client = client
        self._tools: Dict[str, ToolDefinition] = {}

    def register(self, definition: ToolDefinition) -> None:
        if definition.name in self._tools:
            raise ValueError(f"Tool already registered: {definition.name}")
        self._tools[definition.name] = definition

    def get(self, name: str) -> Optional[ToolDefinition]:
        return self._tools.get(name)

    def names(self) -> List[str]:
        return list(self._tools)

    def definitions(self) -> List[ToolDefinition]:
        return list(self._tools.values())

    def list_tools(self) -> List[types.Tool]:
        return [d.to_mcp_tool() for d in self._tools.values()]

    def validate(self, name: str, arguments: Optional[Dict[str, Any]]) -> ToolInput:
        """Validate and apply defaults. Raises KeyError / ValidationError."""
        definition = self._tools[name]
        validated = definition.input_model.model_validate(arguments or {})
        return validated.with_defaults(self.settings)

    def dispatch(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> ToolResult:
        definition = self._tools.get(name) if isinstance(name, str) else None
        if definition is None:
            logger.warning(f"Unknown tool requested: {name}")
            return ToolResult.failure(ErrorKind.UNKNOWN_TOOL, f"Unknown tool: {name}")

        if arguments is not None and not isinstance(arguments, dict):
            return ToolResult.failure(
                ErrorKind.INVALID_ARGUMENT,
                f"Invalid arguments for {name}: arguments must be an object",
            )

        try:
            validated = self.validate(name, arguments)
        except ValidationError as e:
            detail = format_validation_error(e)
            logger.info(f"[{name}] invalid arguments: {detail}")
            return ToolResult.failure(
                ErrorKind.INVALID_ARGUMENT, f"Invalid arguments for {name}: {detail}",
            )

        logger.info(f"[{name}] calling Postmark")
        try:
            text = definition.handler(self.client, validated)
        except Exception as e:
            logger.error(f"[{name}] {definition.failure_prefix}: {e}")
            message = str(e) or type(e).__name__
            return ToolResult.failure(
                ErrorKind.UPSTREAM_FAILURE, f"{definition.failure_prefix}: {message}",
            )

        logger.info(f"[{name}] ok")
        return ToolResult.text(text)
