from __future__ import annotations


class Hello3DError(Exception):
    code = "hello3d_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NoRoute(Hello3DError):
    """The target session has no bound browser connection."""

    code = "no_route"


class QueryTimeout(Hello3DError):
    code = "timeout"


class TransportLost(Hello3DError):
    """The connection closed while the request was outstanding."""

    code = "transport_lost"


class MalformedReply(Hello3DError):
    code = "malformed_reply"


class NoSession(Hello3DError):
    code = "no_session"


class StateQueryFailed(Hello3DError):
    code = "state_query_failed"


class StateUnavailable(Hello3DError):
    """Neither a live answer nor a cached snapshot is available."""

    code = "state_unavailable"


class ProtocolError(Hello3DError):
    code = "protocol_error"


class ToolExecutionError(Hello3DError):
    code = "tool_execution_error"


class UnknownTool(Hello3DError):
    code = "unknown_tool"


class SchemaValidationError(Hello3DError):
    code = "schema_validation_error"
