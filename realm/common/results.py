"""
Tagged result values passed between the realm's stages.

Every stage of an authentication attempt returns an Outcome: either a value
(an open connection, a principal) or one FailureKind with a message.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class FailureKind(str, Enum):
    NOT_CONFIGURED = "not_configured"
    CONFIGURATION_ERROR = "configuration_error"
    LOOKUP_ERROR = "lookup_error"
    AUTHENTICATION_REJECTED = "authentication_rejected"
    ROLE_QUERY_ERROR = "role_query_error"
    INVALID_CONNECTION = "invalid_connection"

    @property
    def is_operator_error(self) -> bool:
        """True when the failure points at the deployment, not at the login attempt."""
        return self in (FailureKind.NOT_CONFIGURED, FailureKind.CONFIGURATION_ERROR)


@dataclass(frozen=True)
class Outcome:
    value: Any = None
    failure: Optional[FailureKind] = None
    message: str = ""

    @classmethod
    def success(cls, value: Any) -> "Outcome":
        return cls(value=value)

    @classmethod
    def fail(cls, kind: FailureKind, message: str = "") -> "Outcome":
        return cls(failure=kind, message=message or kind.value)

    @property
    def ok(self) -> bool:
        return self.failure is None

    def __repr__(self) -> str:
        # Values may be connections or principals; keep reprs short.
        if self.ok:
            return f"Outcome(ok, {type(self.value).__name__})"
        return f"Outcome({self.failure.value}, {self.message!r})"
