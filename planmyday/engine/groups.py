"""Group hierarchy resolution."""

from typing import List, Optional, Set

from planmyday.models.task_group import TaskGroup


def find_group(groups: List[TaskGroup], group_id: str) -> Optional[TaskGroup]:
    return next((g for g in groups if g.id == group_id), None)


def resolve_leaf_groups(groups: List[TaskGroup], group_id: str) -> List[TaskGroup]:
    """Leaf groups taking part in an operation aimed at `group_id`.

    A leaf target resolves to itself. A parent group resolves to its direct
    children that are not parent groups themselves (one level only). An
    unknown id resolves to an empty list.
    """
    target = find_group(groups, group_id)
    if target is None:
        return []
    if not target.is_parent_group:
        return [target]
    return [g for g in groups if g.parent_group_id == target.id and not g.is_parent_group]


def leaf_group_ids(groups: List[TaskGroup], group_id: str) -> Set[str]:
    return {g.id for g in resolve_leaf_groups(groups, group_id)}
