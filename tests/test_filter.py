"""Tests for the field filter."""

import copy

import pytest

from rolegate import AccessControl
from rolegate.attributes.filter import filter_data


@pytest.fixture
def account():
    return {
        "id": 1,
        "name": "Ada",
        "account": {"id": 5, "balance": 10, "history": {"opened": "2020"}},
        "tags": ["a", "b"],
    }


class TestFilterMapping:
    def test_star_keeps_everything_as_a_copy(self, account):
        out = filter_data(account, ["*"])
        assert out == account
        assert out is not account
        assert out["account"] is not account["account"]

    def test_nested_exclusion(self, account):
        out = filter_data(account, ["*", "!account.balance"])
        assert out == {
            "id": 1,
            "name": "Ada",
            "account": {"id": 5, "history": {"opened": "2020"}},
            "tags": ["a", "b"],
        }

    def test_parent_kept_for_granted_descendant(self, account):
        assert filter_data(account, ["account.id"]) == {"account": {"id": 5}}

    def test_whole_subtree_excluded(self, account):
        out = filter_data(account, ["*", "!account"])
        assert "account" not in out
        assert out["name"] == "Ada"

    def test_wildcard_segment(self, account):
        out = filter_data(account, ["account.*", "!account.history"])
        assert out == {"account": {"id": 5, "balance": 10}}

    def test_lists_are_leaves(self, account):
        assert filter_data(account, ["tags"]) == {"tags": ["a", "b"]}

    def test_input_never_mutated(self, account):
        before = copy.deepcopy(account)
        filter_data(account, ["name", "!account"])
        assert account == before

    def test_idempotent(self, account):
        globs = ["*", "!account.balance", "!tags"]
        once = filter_data(account, globs)
        assert filter_data(once, globs) == once


class TestFilterEdgeCases:
    @pytest.mark.parametrize("globs", [[], None, "*", {"*": True}])
    def test_no_usable_globs_gives_empty_mapping(self, account, globs):
        assert filter_data(account, globs) == {}

    def test_empty_globs_on_list(self, account):
        assert filter_data([account, account], []) == [{}, {}]

    def test_list_filters_each_element(self):
        rows = [{"id": 1, "name": "a"}, {"id": 2, "name": "b"}]
        assert filter_data(rows, ["*", "!id"]) == [{"name": "a"}, {"name": "b"}]


def test_permission_filter_uses_granted_attributes(account):
    ac = AccessControl()
    ac.grant("teller").read_any("account", ["name", "account.balance"])
    permission = ac.can("teller").read_any("account")
    assert permission.filter(account) == {"name": "Ada", "account": {"balance": 10}}
    assert AccessControl.filter(account, ["id"]) == {"id": 1}


def test_denied_permission_filters_to_nothing(account):
    ac = AccessControl()
    ac.deny("guest").read_any("account")
    assert ac.can("guest").read_any("account").filter(account) == {}
