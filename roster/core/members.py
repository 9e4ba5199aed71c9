"""
Member identity primitives: id normalization, the ordered member set, and
member counting for display.
"""

import json
from typing import TYPE_CHECKING, Any, Iterable, Iterator

if TYPE_CHECKING:
    from .group import GroupData


def normalize_id(value: Any) -> str:
    """
    Normalize an institutional ID for comparison. All equality checks on
    user identity go through this function.
    """
    if value is None:
        return ""
    return str(value).strip()


class MemberSet:
    """
    A deduplicated, order-preserving, immutable collection of institutional
    IDs. IDs are normalized on the way in and blank IDs are dropped; the first
    occurrence of an ID wins.
    """

    __slots__ = ("_ids",)

    def __init__(self, ids: Iterable[Any] = ()):
        seen = {}
        for raw in ids:
            member_id = normalize_id(raw)
            if member_id and member_id not in seen:
                seen[member_id] = None
        self._ids = tuple(seen)

    def __contains__(self, member_id: Any) -> bool:
        return normalize_id(member_id) in self._ids

    def __iter__(self) -> Iterator[str]:
        return iter(self._ids)

    def __len__(self) -> int:
        return len(self._ids)

    def __bool__(self) -> bool:
        return bool(self._ids)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, MemberSet):
            return self._ids == other._ids
        if isinstance(other, (list, tuple)):
            return list(self._ids) == list(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._ids)

    def __repr__(self) -> str:
        return f"MemberSet({list(self._ids)!r})"

    def first(self) -> str | None:
        return self._ids[0] if self._ids else None

    def with_leader(self, leader_id: Any) -> "MemberSet":
        """
        Return a set that contains `leader_id`, prepending it if it is not
        already present. Existing order is untouched.
        """
        leader_id = normalize_id(leader_id)
        if not leader_id or leader_id in self._ids:
            return self
        return MemberSet((leader_id, *self._ids))

    def without(self, member_id: Any) -> "MemberSet":
        member_id = normalize_id(member_id)
        return MemberSet(x for x in self._ids if x != member_id)

    def union(self, other: Iterable[Any]) -> "MemberSet":
        return MemberSet((*self._ids, *other))

    def to_list(self) -> list[str]:
        return list(self._ids)


def parse_member_ids(raw: Any) -> list[str]:
    """
    Read a member list as it arrives from storage or a client. Accepts a list
    or tuple, or a JSON text array. Anything that is not a list of strings
    (corrupt JSON, a JSON object, nested values) is treated as an empty list.
    """
    if raw is None:
        return []

    if isinstance(raw, (bytes, str)):
        if not raw.strip():
            return []
        try:
            raw = json.loads(raw)
        except ValueError:
            return []

    if not isinstance(raw, (list, tuple)):
        return []

    if not all(isinstance(x, str) for x in raw):
        return []

    return list(raw)


def member_count(group: "GroupData") -> int:
    """
    Number of people in a group for display: the member set together with the
    leader. Does not modify the group.
    """
    return len(MemberSet(group.member_ids).with_leader(group.leader_id))
