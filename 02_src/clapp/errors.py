"""Error types shared across Clapp components."""


class ClappError(Exception):
    """Base error for the gateway session core."""

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(message)
        self.message = message
        self.detail = detail

    def __str__(self) -> str:
        if self.detail:
            return f"{self.message}: {self.detail}"
        return self.message


class ValidationError(ClappError):
    """Bad input for a profile field or a chat turn."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


class UnknownAgentError(ClappError):
    """No stored profile matches the given agent id."""

    def __init__(self, agent_id: str):
        super().__init__(f"Unknown agent '{agent_id}'")
        self.agent_id = agent_id


class ProcessError(ClappError):
    """Gateway start/stop primitive failed."""


class TransportError(ClappError):
    """A gateway call failed before producing a reply."""


class ParseError(ClappError):
    """Gateway reply was not valid JSON."""


class CredentialSyncError(ClappError):
    """Runtime did not accept the profile's credentials."""


class ChatBusyError(ClappError):
    """A call for this agent is still outstanding."""

    def __init__(self, agent_id: str):
        super().__init__(f"Agent '{agent_id}' is still answering the previous message")
        self.agent_id = agent_id
