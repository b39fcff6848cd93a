"""
Guarded row access.

Routes read and write rows only through these helpers so every operation
is paired with a policy check. Integrity errors from the database are
translated into the API's error types after rolling the session back.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional
from uuid import uuid4

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from clarity_api.core.errors import (
    ClarityError,
    ForeignKeyViolation,
    PolicyDenied,
    UniqueConstraintViolation,
)
from clarity_api.core.ownership import MODELS, EntityKind, get_entity
from clarity_api.core.policy import ALLOW, Action, RuleSet, authorize_row
from clarity_api.core.principals import Principal

logger = logging.getLogger(__name__)

UNIQUE_SQLSTATE = "23505"
FOREIGN_KEY_SQLSTATE = "23503"


def integrity_error_for(kind: str, exc: IntegrityError) -> Optional[ClarityError]:
    """Map a driver integrity error onto the API's error types."""
    orig = exc.orig
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    message = str(orig)
    lowered = message.lower()
    if code == UNIQUE_SQLSTATE or "unique constraint" in lowered or "duplicate key" in lowered:
        return UniqueConstraintViolation(kind, message)
    if code == FOREIGN_KEY_SQLSTATE or "foreign key" in lowered:
        return ForeignKeyViolation(kind, message)
    return None


def _commit(db: Session, kind: str, flush_only: bool = False) -> None:
    try:
        if flush_only:
            db.flush()
        else:
            db.commit()
    except IntegrityError as exc:
        db.rollback()
        err = integrity_error_for(kind, exc)
        if err is None:
            raise
        logger.warning("Write to %s rejected by the database: %s", kind, err)
        raise err from exc


def _ensure(
    db: Session,
    principal: Principal,
    action: Action,
    kind: EntityKind,
    row: Any = None,
    payload: Optional[Mapping[str, Any]] = None,
    rules: Optional[RuleSet] = None,
) -> None:
    if authorize_row(db, principal, action, kind, row, payload, rules) != ALLOW:
        raise PolicyDenied(principal.id, action, kind, getattr(row, "id", None))


def fetch(
    db: Session,
    principal: Principal,
    kind: EntityKind,
    entity_id: str,
    rules: Optional[RuleSet] = None,
) -> Any:
    row = get_entity(db, kind, entity_id)
    _ensure(db, principal, "select", kind, row, rules=rules)
    return row


def visible(
    db: Session,
    principal: Principal,
    kind: EntityKind,
    rows: Iterable[Any],
    rules: Optional[RuleSet] = None,
) -> List[Any]:
    """Keep the rows the principal may select, in their original order."""
    return [
        row for row in rows
        if authorize_row(db, principal, "select", kind, row, rules=rules) == ALLOW
    ]


def insert(
    db: Session,
    principal: Principal,
    kind: EntityKind,
    payload: Dict[str, Any],
    rules: Optional[RuleSet] = None,
    commit: bool = True,
) -> Any:
    """
    Insert a row of `kind` built from `payload`.

    With commit=False the row is only flushed, so a later commit can write
    it together with rows that depend on it.
    """
    _ensure(db, principal, "insert", kind, payload=payload, rules=rules)
    row = MODELS[kind](id=str(uuid4()), **payload)
    db.add(row)
    _commit(db, kind, flush_only=not commit)
    db.refresh(row)
    return row


def update(
    db: Session,
    principal: Principal,
    kind: EntityKind,
    entity_id: str,
    changes: Dict[str, Any],
    rules: Optional[RuleSet] = None,
) -> Any:
    row = get_entity(db, kind, entity_id)
    _ensure(db, principal, "update", kind, row, changes, rules)
    for key, value in changes.items():
        setattr(row, key, value)
    db.add(row)
    _commit(db, kind)
    db.refresh(row)
    return row


def delete(
    db: Session,
    principal: Principal,
    kind: EntityKind,
    entity_id: str,
    rules: Optional[RuleSet] = None,
) -> None:
    row = get_entity(db, kind, entity_id)
    _ensure(db, principal, "delete", kind, row, rules=rules)
    db.delete(row)
    _commit(db, kind)
