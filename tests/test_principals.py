"""
Tests for principal resolution.
"""

import pytest

from clarity_api.core.errors import Unauthenticated
from clarity_api.core.principals import Principal, has_global_role, resolve

from conftest import enroll, make_profile, make_project


def test_resolve_reads_role_and_memberships(db):
    owner = make_profile(db, name="owner")
    reviewer = make_profile(db, role="reviewer", name="rev")
    project = make_project(db, owner)
    enroll(db, project, reviewer)

    principal = resolve(db, reviewer.id)

    assert principal.id == reviewer.id
    assert principal.role == "reviewer"
    assert principal.memberships == frozenset({project.id})


def test_resolve_without_memberships(db):
    profile = make_profile(db)
    assert resolve(db, profile.id).memberships == frozenset()


@pytest.mark.parametrize("identity", [None, ""])
def test_resolve_requires_identity(db, identity):
    with pytest.raises(Unauthenticated):
        resolve(db, identity)


def test_resolve_unknown_identity(db):
    with pytest.raises(Unauthenticated):
        resolve(db, "no-such-profile")


def test_resolve_inactive_profile(db):
    profile = make_profile(db, active=False)
    with pytest.raises(Unauthenticated):
        resolve(db, profile.id)


def test_has_global_role():
    principal = Principal(id="p", role="reviewer")
    assert has_global_role(principal, "reviewer")
    assert has_global_role(principal, "reviewer", "admin")
    assert not has_global_role(principal, "admin")
    assert not has_global_role(principal)


def test_principal_is_immutable():
    principal = Principal(id="p", role="annotator")
    with pytest.raises(AttributeError):
        principal.role = "admin"
