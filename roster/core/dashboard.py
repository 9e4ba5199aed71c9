"""
Dashboard classification: split the groups a user can see into the ones they
created and the ones they were assigned to.
"""

from typing import Iterable

from pydantic import BaseModel
from structlog import get_logger
from structlog.typing import FilteringBoundLogger

from roster.core.group import GroupData
from roster.core.members import MemberSet, member_count, normalize_id
from roster.core.models import GroupSummary
from roster.core.roles import Role
from roster.core.user import UserData


class DashboardBuckets(BaseModel):
    created: list[GroupData] = []
    assigned: list[GroupData] = []


def is_member(group: GroupData, viewer: UserData) -> bool:
    return viewer.institutional_id in MemberSet(group.member_ids).with_leader(
        group.leader_id
    )


def is_leader(group: GroupData, viewer: UserData) -> bool:
    return normalize_id(group.leader_id) == normalize_id(viewer.institutional_id)


def is_self_created(group: GroupData, viewer: UserData) -> bool:
    """
    Legacy records without a creator count as created by whoever views them.
    """
    if group.created_by is None:
        return True
    return normalize_id(group.created_by) == normalize_id(viewer.institutional_id)


def _created_by_viewer(group: GroupData, viewer: UserData) -> bool:
    return group.created_by is not None and normalize_id(
        group.created_by
    ) == normalize_id(viewer.institutional_id)


def bucket_for(group: GroupData, viewer: UserData) -> str | None:
    """
    Return "created", "assigned" or `None` for a single group.
    """
    leader = is_leader(group, viewer)

    match viewer.role:
        case Role.STUDENT:
            if leader and is_self_created(group, viewer):
                return "created"
            if leader:
                # Leadership handed out by someone else (a teacher).
                return "assigned"
            if is_member(group, viewer):
                return "assigned"
            return None
        case Role.TEACHER:
            if _created_by_viewer(group, viewer):
                return "created"
            return None
        case Role.OTHER:
            if leader:
                return "created"
            if is_member(group, viewer):
                return "assigned"
            return None


def classify(
    groups: Iterable[GroupData],
    viewer: UserData,
    log: FilteringBoundLogger | None = None,
) -> DashboardBuckets:
    """
    Partition `groups` into the viewer's created and assigned buckets.

    A group lands in at most one bucket. Groups that are neither are dropped.
    A group that cannot be evaluated is logged and skipped; it never stops
    the rest of the list from being classified.
    """
    log = (log or get_logger()).bind(
        viewer=viewer.institutional_id, role=viewer.role.value
    )

    buckets = DashboardBuckets()

    for group in groups:
        try:
            bucket = bucket_for(group, viewer)
        except (AttributeError, TypeError, ValueError) as e:
            log.warning(
                "dashboard.group_skipped",
                group_id=getattr(group, "group_id", None),
                error=str(e),
            )
            continue

        if bucket == "created":
            buckets.created.append(group)
        elif bucket == "assigned":
            buckets.assigned.append(group)

    log.debug(
        "dashboard.classified",
        number_created=len(buckets.created),
        number_assigned=len(buckets.assigned),
    )

    return buckets


def annotate(groups: Iterable[GroupData]) -> list[GroupSummary]:
    return [GroupSummary(group=g, member_count=member_count(g)) for g in groups]
