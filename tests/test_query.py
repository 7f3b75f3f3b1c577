"""Tests for permission queries: possession fallback, inheritance, unions."""

from __future__ import annotations

import pytest

from rolegate import AccessControl, Action, Permission, Possession, QueryInfo
from rolegate.access.query import resolve_permission
from rolegate.errors import (
    InvalidActionError,
    InvalidPossessionError,
    InvalidResourceError,
    InvalidRoleError,
    RoleNotFoundError,
)


@pytest.fixture()
def video_ac(grants_object) -> AccessControl:
    return AccessControl(grants_object)


# -- Possession ----------------------------------------------------------------


def test_own_falls_back_to_any(video_ac: AccessControl):
    assert video_ac.can("admin").create_own("video").granted is True


def test_any_never_falls_back_to_own(video_ac: AccessControl):
    assert video_ac.can("user").read_own("video").granted is True
    assert video_ac.can("user").read_any("video").granted is False


def test_own_entry_preferred_over_any(ac: AccessControl):
    ac.grant("user").read_own("post", ["*"]).read_any("post", ["title"])
    assert ac.can("user").read_own("post").attributes == ("*",)
    assert ac.can("user").read_any("post").attributes == ("title",)


# -- Permission result -----------------------------------------------------------


def test_permission_fields(video_ac: AccessControl):
    permission = video_ac.can("user").update_own("video")
    assert isinstance(permission, Permission)
    assert permission.roles == ("user",)
    assert permission.resource == "video"
    assert permission.action is Action.update
    assert permission.possession is Possession.own
    assert permission.attributes == ("*",)


def test_permission_is_frozen(video_ac: AccessControl):
    permission = video_ac.can("user").read_own("video")
    with pytest.raises(Exception):
        permission.resource = "other"  # type: ignore[misc]
    with pytest.raises(AttributeError):
        permission.attributes.append("id")  # type: ignore[attr-defined]


def test_permission_dump_includes_granted(video_ac: AccessControl):
    dumped = video_ac.can("user").read_own("video").model_dump()
    assert dumped["granted"] is True
    assert dumped["attributes"] == ("*",)
    assert video_ac.can("user").read_any("video").model_dump()["granted"] is False


def test_permission_does_not_alias_store(ac: AccessControl):
    ac.grant("user").read_any("doc", ["title"])
    permission = ac.can("user").read_any("doc")
    ac.grant("user").read_any("doc", ["body"])
    assert permission.attributes == ("title",)


def test_unknown_resource_is_denied(video_ac: AccessControl):
    permission = video_ac.can("admin").read_any("photo")
    assert permission.granted is False
    assert permission.attributes == ()


def test_flat_list_attributes(grant_list):
    ac = AccessControl(grant_list)
    assert ac.can("user").create_own("video").attributes == ("*", "!id")
    assert ac.can("user").read_any("video").attributes == ("*", "!id")
    assert ac.query("user").update_own("video").attributes == ("*", "!id")


# -- Inheritance and union -------------------------------------------------------


def test_inherited_attributes_are_unioned(ac: AccessControl):
    ac.grant("user").read_any("profile", ["image", "name"])
    ac.grant("editor").extend("user").read_any("profile", ["name", "!location"])
    ac.grant("admin").extend("editor").read_any("profile", ["*", "!location"])
    assert ac.can("admin").read_any("profile").attributes == ("*", "!location")
    assert ac.can("editor").read_any("profile").attributes == ("name", "image")


def test_multiple_query_roles(ac: AccessControl):
    ac.grant("a").read_any("doc", ["*", "!pwd", "title"])
    ac.grant("b").read_any("doc", ["*", "!id", "!pwd"])
    assert ac.can(["a", "b"]).read_any("doc").attributes == ("*", "!pwd")
    assert ac.can("a, b").read_any("doc").attributes == ("*", "!pwd")


def test_union_never_exposes_a_field_every_role_hides(ac: AccessControl):
    ac.grant("user").read_any("org", ["*", "!*.*.ssn"])
    ac.grant("hr").read_any("org", ["*.profile", "!admin.profile"])
    data = {
        "admin": {"profile": {"ssn": "123", "name": "root"}},
        "staff": {"profile": {"ssn": "456", "name": "ann"}},
    }
    assert ac.can("user").read_any("org").filter(data)["admin"] == {"profile": {"name": "root"}}
    assert "admin" not in ac.can("hr").read_any("org").filter(data)
    merged = ac.can(["user", "hr"]).read_any("org").filter(data)
    assert merged["admin"] == {"profile": {"name": "root"}}
    assert merged["staff"] == {"profile": {"ssn": "456", "name": "ann"}}


def test_inherited_deny_does_not_hide_own_grant(ac: AccessControl):
    ac.deny("base").read_any("doc")
    ac.grant("power").extend("base").read_any("doc", ["title"])
    assert ac.can("power").read_any("doc").attributes == ("title",)


# -- Query handle ------------------------------------------------------------------


def test_query_from_mapping(video_ac: AccessControl):
    assert video_ac.can({"role": "admin", "resource": "video"}).delete_any().granted is True


def test_query_role_and_resource_set_later(video_ac: AccessControl):
    assert video_ac.can().role("user").resource("video").delete_own().granted is True


def test_permission_method(video_ac: AccessControl):
    permission = video_ac.permission(
        {"role": "user", "resource": "video", "action": "read", "possession": "own"}
    )
    assert permission.granted is True
    permission = video_ac.permission(QueryInfo(role="user", resource="video", action="read:any"))
    assert permission.granted is False


def test_resolve_permission_on_raw_grants(grants_object):
    permission = resolve_permission(
        grants_object, {"role": "admin", "resource": "video", "action": "create"}
    )
    assert permission.possession is Possession.any
    assert permission.granted is True


# -- Errors ------------------------------------------------------------------------


def test_unknown_role(video_ac: AccessControl):
    with pytest.raises(RoleNotFoundError):
        video_ac.can("ghost").read_any("video")
    with pytest.raises(RoleNotFoundError):
        video_ac.can(["user", "ghost"]).read_any("video")


def test_explicit_none_role(video_ac: AccessControl):
    with pytest.raises(InvalidRoleError):
        video_ac.can(None)


def test_missing_role_in_query(video_ac: AccessControl):
    with pytest.raises(InvalidRoleError):
        video_ac.can().read_any("video")


def test_missing_resource_in_query(video_ac: AccessControl):
    with pytest.raises(InvalidResourceError):
        video_ac.can("user").read_any()


def test_bad_action_and_possession(video_ac: AccessControl):
    with pytest.raises(InvalidActionError):
        video_ac.permission({"role": "user", "resource": "video", "action": "fly"})
    with pytest.raises(InvalidPossessionError):
        video_ac.permission(
            {"role": "user", "resource": "video", "action": "read", "possession": "all"}
        )
