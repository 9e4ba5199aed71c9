"""
Leader re-derivation when members are removed from a group during an edit.
"""

from typing import Iterable, Sequence

from roster.core.members import MemberSet, normalize_id


def on_member_removed(
    current_leader_id: str | None,
    removed_member_id: str,
    remaining_members: Sequence[str],
) -> str | None:
    """
    Work out who leads the group after `removed_member_id` has left.

    Parameters
    ----------
    current_leader_id: str | None
        The leader before the removal.
    removed_member_id: str
        The member that was removed.
    remaining_members: Sequence[str]
        The members left in the group, in display order.

    Returns
    -------
    str | None
        The unchanged leader if someone else was removed, otherwise the first
        remaining member. `None` when the leader was the last member; such a
        group cannot be submitted until a leader is chosen.
    """
    if normalize_id(removed_member_id) != normalize_id(current_leader_id):
        return current_leader_id

    for member_id in remaining_members:
        if normalize_id(member_id):
            return normalize_id(member_id)

    return None


def reassign_after_removals(
    current_leader_id: str | None,
    previous_members: Iterable[str],
    remaining_members: Sequence[str],
) -> str | None:
    """
    Apply `on_member_removed` for every member of `previous_members` that is
    no longer in `remaining_members`, in their original order.
    """
    remaining = MemberSet(remaining_members)
    leader_id = current_leader_id

    for member_id in MemberSet(previous_members):
        if member_id not in remaining:
            leader_id = on_member_removed(leader_id, member_id, remaining.to_list())

    return leader_id
