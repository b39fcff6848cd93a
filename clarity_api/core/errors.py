"""
Errors raised by the access core and the guarded store.

`EntityNotFound` and `PolicyDenied` are kept apart for logging and tests
only. The HTTP layer renders both as the same rejection so a caller cannot
probe which ids exist.
"""

from typing import Optional


class ClarityError(Exception):
    """Base class for errors the API knows how to render."""


class Unauthenticated(ClarityError):
    def __init__(self, reason: str = "Not authenticated"):
        super().__init__(reason)
        self.reason = reason


class EntityNotFound(ClarityError):
    def __init__(self, kind: str, entity_id: Optional[str]):
        super().__init__(f"{kind} {entity_id!r} not found")
        self.kind = kind
        self.entity_id = entity_id


class PolicyDenied(ClarityError):
    def __init__(self, principal_id: str, action: str, kind: str, entity_id: Optional[str] = None):
        super().__init__(f"{action} on {kind} {entity_id!r} denied for {principal_id}")
        self.principal_id = principal_id
        self.action = action
        self.kind = kind
        self.entity_id = entity_id


class UniqueConstraintViolation(ClarityError):
    def __init__(self, kind: str, detail: str = ""):
        super().__init__(f"{kind} conflicts with an existing row: {detail}".rstrip(": "))
        self.kind = kind
        self.detail = detail


class ForeignKeyViolation(ClarityError):
    def __init__(self, kind: str, detail: str = ""):
        super().__init__(f"{kind} references a missing row: {detail}".rstrip(": "))
        self.kind = kind
        self.detail = detail
