"""
Tests for member identity helpers and member counting.
"""

import pytest

from roster.core.group import GroupData
from roster.core.members import MemberSet, member_count, normalize_id, parse_member_ids


def make_group(leader_id, member_ids):
    return GroupData(
        group_name="Group", course_id=1, leader_id=leader_id, member_ids=member_ids
    )


def test_normalize_id():
    assert normalize_id("  21-0001-001\t") == "21-0001-001"
    assert normalize_id(None) == ""
    assert normalize_id(42) == "42"
    # Case is significant
    assert normalize_id("ab") != normalize_id("AB")


def test_member_set_deduplicates_in_order():
    members = MemberSet(["S2", " S1", "S2 ", "", "  ", "S3", "S1"])

    assert members == ["S2", "S1", "S3"]
    assert len(members) == 3
    assert " S3 " in members
    assert "s3" not in members
    assert members.first() == "S2"
    assert MemberSet().first() is None
    assert not MemberSet(["", " "])


def test_member_set_with_leader():
    members = MemberSet(["S2", "S3"])

    assert members.with_leader("S1") == ["S1", "S2", "S3"]
    assert members.with_leader(" S3 ") == ["S2", "S3"]
    assert members.with_leader(None) == ["S2", "S3"]
    # Not modified in place
    assert members == ["S2", "S3"]


def test_member_set_without_and_union():
    members = MemberSet(["S1", "S2", "S3"])

    assert members.without(" S2") == ["S1", "S3"]
    assert members.without("S9") == members
    assert members.union(["S3", "S4"]) == ["S1", "S2", "S3", "S4"]


@pytest.mark.parametrize(
    "raw,expected",
    [
        (None, []),
        ("", []),
        ("[]", []),
        ('["S1", "S2"]', ["S1", "S2"]),
        (["S1"], ["S1"]),
        ("[not json", []),
        ('{"S1": 1}', []),
        ("[1, 2]", []),
        (17, []),
    ],
)
def test_parse_member_ids(raw, expected):
    assert parse_member_ids(raw) == expected


def test_member_count():
    assert member_count(make_group("S1", ["S2", "S3"])) == 3
    assert member_count(make_group("S1", ["S1", "S2"])) == 2
    assert member_count(make_group("S1", [" S1", "S2", "S2"])) == 2


def test_member_count_malformed_members():
    group = make_group("S1", "corrupted{")

    assert group.member_ids == []
    assert member_count(group) == 1


def test_member_count_does_not_mutate():
    group = make_group("S1", ["S2"])
    member_count(group)

    assert group.member_ids == ["S2"]
