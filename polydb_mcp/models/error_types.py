"""Error types for the polydb MCP gateway."""

class MCPError(Exception):
    """Base error class for MCP operations."""

    def __init__(self, message: str, recoverable: bool = True):
        super().__init__(message)
        self.message = message
        self.recoverable = recoverable


class MissingParameterError(MCPError):
    """Error raised when a required tool parameter is absent or empty."""

    def __init__(self, param_name: str, message: str = None):
        if message is None:
            message = f"Parameter '{param_name}' is required"
        super().__init__(message, recoverable=False)
        self.param_name = param_name


class InvalidParameterError(MCPError):
    """Error raised when a tool parameter cannot be parsed or coerced.

    For JSON parameters the message is the decoder's own message.
    """

    def __init__(self, param_name: str, message: str):
        super().__init__(message, recoverable=False)
        self.param_name = param_name


class TranslationError(MCPError):
    """Error raised when an enumerated value has no query translation."""

    def __init__(self, message: str):
        super().__init__(message, recoverable=False)


class BackendError(MCPError):
    """Error raised when a backend transport or query fails."""

    def __init__(self, backend: str, message: str, status_code: int = None):
        super().__init__(message, recoverable=True)
        self.backend = backend
        self.status_code = status_code


class UnknownToolError(MCPError):
    """Error raised when a tool name is not registered."""

    def __init__(self, tool_name: str):
        super().__init__(f"Unknown tool: {tool_name}", recoverable=False)
        self.tool_name = tool_name


class ConnectionError(MCPError):
    """Error raised when a backend client cannot be constructed."""

    def __init__(self, message: str):
        super().__init__(message, recoverable=True)
