"""
tool_errors.py
--------------
Error taxonomy shared by the config layer, the Postmark client and the
tool dispatcher.

Only ConfigurationMissing is allowed to stop the process; everything else
is turned into a ToolResult by the dispatcher.
"""

from enum import Enum


class ErrorKind(str, Enum):
    CONFIGURATION_MISSING = "ConfigurationMissing"
    UNKNOWN_TOOL = "UnknownTool"
    INVALID_ARGUMENT = "InvalidArgument"
    UPSTREAM_FAILURE = "UpstreamFailure"


class ToolError(Exception):
    """Base class for errors carrying an ErrorKind."""

    kind: ErrorKind = ErrorKind.UPSTREAM_FAILURE

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ConfigurationMissing(ToolError):
    kind = ErrorKind.CONFIGURATION_MISSING

    def __init__(self, names):
        self.names = list(names)
        super().__init__(
            f"Missing or invalid configuration: {', '.join(self.names)}. "
            "Set them in the environment or in a .env file."
        )


class PostmarkError(ToolError):
    """Postmark call failed: transport error, non-2xx status or bad body."""

    kind = ErrorKind.UPSTREAM_FAILURE

    def __init__(self, message: str, status_code: int = None, error_code: int = None):
        self.status_code = status_code
        self.error_code = error_code
        super().__init__(message)
