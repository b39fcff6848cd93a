"""
Policy evaluator.

Each (entity kind, action) pair maps to a tuple of rules. A rule is a
predicate over a RuleContext; the pair is allowed when any of its rules
holds and denied otherwise, including when no rules are registered.

Two rule sets exist:

- OWNER_RULES: the creator of a project owns the project and everything
  under it. Memberships are bookkeeping and grant nothing.
- MEMBERSHIP_RULES: OWNER_RULES plus the earlier team model, where project
  members may read a project's data and annotate it, and admins manage
  everything.

settings.ACCESS_MODEL picks the set used when a caller does not pass one.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Literal, Mapping, Optional, Tuple

from sqlalchemy.orm import Session

from clarity_api.core.config import settings
from clarity_api.core.errors import EntityNotFound, PolicyDenied, Unauthenticated
from clarity_api.core.ownership import (
    PARENT_KEYS,
    EntityKind,
    get_entity,
    owner_chain,
    project_creator,
    project_id_for_payload,
    project_id_of,
)
from clarity_api.core.principals import Principal, has_global_role
from clarity_api.models.membership import ProjectMember

logger = logging.getLogger(__name__)

Action = Literal["select", "insert", "update", "delete"]
Decision = Literal["allow", "deny"]
ALLOW: Decision = "allow"
DENY: Decision = "deny"


@dataclass(frozen=True)
class RuleContext:
    db: Session
    principal: Principal
    action: Action
    kind: EntityKind
    row: Any = None  # None for inserts
    payload: Mapping[str, Any] = field(default_factory=dict)

    def project_id(self) -> str:
        """Project owning the row, or the project an insert targets."""
        if self.row is not None:
            return project_id_of(self.db, self.kind, self.row)
        return project_id_for_payload(self.db, self.kind, self.payload)


Rule = Callable[[RuleContext], bool]
RuleSet = Dict[Tuple[EntityKind, Action], Tuple[Rule, ...]]


def _passes(rule: Rule, ctx: RuleContext) -> bool:
    try:
        return bool(rule(ctx))
    except EntityNotFound as exc:
        # a parent row is missing; never grant through a dangling reference
        logger.debug("Dangling %s %r while checking %s on %s", exc.kind, exc.entity_id, ctx.action, ctx.kind)
        return False


def all_of(*rules: Rule) -> Rule:
    def _rule(ctx: RuleContext) -> bool:
        return all(_passes(rule, ctx) for rule in rules)
    return _rule


def any_of(*rules: Rule) -> Rule:
    def _rule(ctx: RuleContext) -> bool:
        return any(_passes(rule, ctx) for rule in rules)
    return _rule


# Rules


def is_project_creator(ctx: RuleContext) -> bool:
    return project_creator(ctx.db, ctx.project_id()) == ctx.principal.id


def is_project_member(ctx: RuleContext) -> bool:
    return ctx.project_id() in ctx.principal.memberships


def is_admin(ctx: RuleContext) -> bool:
    return has_global_role(ctx.principal, "admin")


def is_reviewer_or_admin(ctx: RuleContext) -> bool:
    return has_global_role(ctx.principal, "reviewer", "admin")


def is_row_creator(ctx: RuleContext) -> bool:
    return getattr(ctx.row, "created_by", None) == ctx.principal.id


def is_own_profile(ctx: RuleContext) -> bool:
    return ctx.row is not None and ctx.row.id == ctx.principal.id


def is_own_membership(ctx: RuleContext) -> bool:
    return getattr(ctx.row, "user_id", None) == ctx.principal.id


def creates_as_self(ctx: RuleContext) -> bool:
    return ctx.payload.get("created_by") == ctx.principal.id


def enrolls_self(ctx: RuleContext) -> bool:
    return ctx.payload.get("user_id") == ctx.principal.id


def _unchanged(column: str) -> Rule:
    def _rule(ctx: RuleContext) -> bool:
        if column not in ctx.payload:
            return True
        return ctx.payload[column] == getattr(ctx.row, column)
    return _rule


keeps_creator = _unchanged("created_by")
keeps_role = _unchanged("role")


def moves_within_owned_projects(ctx: RuleContext) -> bool:
    """An update that re-parents a row must land in a project the caller created."""
    column, parent_kind = PARENT_KEYS[ctx.kind]
    if column not in ctx.payload or ctx.payload[column] == getattr(ctx.row, column):
        return True
    target_project = owner_chain(ctx.db, parent_kind, ctx.payload[column])
    return project_creator(ctx.db, target_project) == ctx.principal.id


def _target_project(ctx: RuleContext) -> str:
    """Project the row belongs to once the write is applied."""
    column, parent_kind = PARENT_KEYS[ctx.kind]
    if ctx.row is not None and column in ctx.payload:
        return owner_chain(ctx.db, parent_kind, ctx.payload[column])
    return ctx.project_id()


def label_in_target_project(ctx: RuleContext) -> bool:
    """An annotation may only use a label of its own image's project."""
    label_id = ctx.payload.get("label_id", getattr(ctx.row, "label_id", None))
    return owner_chain(ctx.db, "label", label_id) == _target_project(ctx)


def assigns_project_member(ctx: RuleContext) -> bool:
    assignee = ctx.payload.get("assigned_to")
    if assignee is None:
        return True
    member = (
        ctx.db.query(ProjectMember)
        .filter(ProjectMember.project_id == _target_project(ctx), ProjectMember.user_id == assignee)
        .first()
    )
    return member is not None


OWNER_RULES: RuleSet = {
    ("profile", "select"): (is_own_profile,),
    ("profile", "update"): (all_of(is_own_profile, keeps_role),),

    ("project", "select"): (is_project_creator,),
    ("project", "insert"): (creates_as_self,),
    ("project", "update"): (all_of(is_project_creator, keeps_creator),),
    ("project", "delete"): (is_project_creator,),

    ("project_member", "select"): (is_own_membership, is_admin),
    ("project_member", "insert"): (all_of(is_project_creator, enrolls_self),),
    ("project_member", "update"): (is_admin,),
    ("project_member", "delete"): (is_admin,),

    ("label", "select"): (is_project_creator,),
    ("label", "insert"): (is_project_creator,),
    ("label", "update"): (all_of(is_project_creator, moves_within_owned_projects),),
    ("label", "delete"): (is_project_creator,),

    ("image", "select"): (is_project_creator,),
    ("image", "insert"): (is_project_creator,),
    ("image", "update"): (
        all_of(is_project_creator, moves_within_owned_projects, assigns_project_member),
    ),
    ("image", "delete"): (is_project_creator,),

    ("annotation", "select"): (is_project_creator, is_row_creator, is_reviewer_or_admin),
    ("annotation", "insert"): (
        all_of(is_project_creator, creates_as_self, label_in_target_project),
    ),
    ("annotation", "update"): (
        all_of(
            any_of(is_project_creator, is_row_creator, is_reviewer_or_admin),
            keeps_creator,
            moves_within_owned_projects,
            label_in_target_project,
        ),
    ),
    ("annotation", "delete"): (is_project_creator,),
}


def extend_rules(base: RuleSet, extra: RuleSet) -> RuleSet:
    """Return a new rule set where each pair allows what either set allows."""
    merged = dict(base)
    for key, rules in extra.items():
        merged[key] = merged.get(key, ()) + rules
    return merged


MEMBERSHIP_RULES: RuleSet = extend_rules(
    OWNER_RULES,
    {
        ("project", "select"): (is_project_member, is_admin),
        ("project", "update"): (all_of(is_admin, keeps_creator),),

        ("project_member", "insert"): (is_admin,),

        ("label", "select"): (is_project_member, is_admin),
        ("label", "insert"): (is_admin,),
        ("label", "update"): (is_admin,),
        ("label", "delete"): (is_admin,),

        ("image", "select"): (is_project_member, is_admin),
        ("image", "insert"): (is_admin,),
        ("image", "update"): (all_of(is_admin, assigns_project_member),),
        ("image", "delete"): (is_admin,),

        ("annotation", "select"): (is_project_member,),
        ("annotation", "insert"): (
            all_of(is_project_member, creates_as_self, label_in_target_project),
        ),
    },
)

RULE_SETS = {"owner": OWNER_RULES, "membership": MEMBERSHIP_RULES}


def rules_for(access_model: Optional[str] = None) -> RuleSet:
    return RULE_SETS[access_model or settings.ACCESS_MODEL]


def authorize_row(
    db: Session,
    principal: Principal,
    action: Action,
    kind: EntityKind,
    row: Any = None,
    payload: Optional[Mapping[str, Any]] = None,
    rules: Optional[RuleSet] = None,
) -> Decision:
    """Evaluate the rules for an already loaded row (or an insert payload)."""
    if principal is None:
        raise Unauthenticated()
    ruleset = rules if rules is not None else rules_for()
    ctx = RuleContext(
        db=db, principal=principal, action=action, kind=kind, row=row, payload=payload or {}
    )
    for rule in ruleset.get((kind, action), ()):
        if _passes(rule, ctx):
            return ALLOW
    logger.debug(
        "Denied %s on %s %s for %s",
        action, kind, getattr(row, "id", None), principal.id,
    )
    return DENY


def authorize(
    db: Session,
    principal: Principal,
    action: Action,
    kind: EntityKind,
    entity_id: Optional[str] = None,
    payload: Optional[Mapping[str, Any]] = None,
    rules: Optional[RuleSet] = None,
) -> Decision:
    """
    Decide whether `principal` may perform `action` on an entity.

    Inserts are judged on `payload` alone. Every other action loads the
    row first and raises EntityNotFound when it does not exist.
    """
    if principal is None:
        raise Unauthenticated()
    row = None
    if action != "insert":
        row = get_entity(db, kind, entity_id)
    return authorize_row(db, principal, action, kind, row, payload, rules)


def ensure_authorized(
    db: Session,
    principal: Principal,
    action: Action,
    kind: EntityKind,
    entity_id: Optional[str] = None,
    payload: Optional[Mapping[str, Any]] = None,
    rules: Optional[RuleSet] = None,
) -> None:
    if authorize(db, principal, action, kind, entity_id, payload, rules) != ALLOW:
        raise PolicyDenied(principal.id, action, kind, entity_id)
