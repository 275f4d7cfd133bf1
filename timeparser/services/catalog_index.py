"""
In-memory index over the flattened catalog.

Loaded once at startup; afterwards every parse request only reads it, so no
locking is needed.
"""

from typing import Dict, Iterable, List, Optional, Tuple

from timeparser.domain.models import FlatTaskRecord, ProjectGroup, TaskRef


class CatalogIndex:
    """
    Holds FlatTaskRecords and answers owner+month lookups.
    """

    def __init__(self, records: Optional[Iterable[FlatTaskRecord]] = None):
        self._records: Tuple[FlatTaskRecord, ...] = tuple(records or ())

    def load(self, records: Iterable[FlatTaskRecord]) -> None:
        """
        Replace the full record set.

        The new tuple is built before it is swapped in, so readers see either
        the old set or the new one.
        """
        self._records = tuple(records)

    @property
    def records(self) -> Tuple[FlatTaskRecord, ...]:
        return self._records

    def __len__(self) -> int:
        return len(self._records)

    def query(self, owner: str, month: str) -> List[FlatTaskRecord]:
        """Records whose owner and month equal the arguments exactly"""
        return [r for r in self._records if r.owner == owner and r.month == month]

    @staticmethod
    def group_by_project(records: Iterable[FlatTaskRecord]) -> List[ProjectGroup]:
        """
        Group records by project name.

        Projects keep first-seen order, tasks keep the order they were given in.
        """
        groups: Dict[Optional[str], ProjectGroup] = {}
        for record in records:
            group = groups.get(record.project_name)
            if group is None:
                group = ProjectGroup(
                    project_id=record.project_id,
                    project_name=record.project_name,
                )
                groups[record.project_name] = group
            group.tasks.append(TaskRef(
                task_name=record.task_name,
                owner=record.owner,
                month=record.month,
            ))
        return list(groups.values())

    def context_for(self, owner: str, month: str) -> List[ProjectGroup]:
        """Grouped catalog context for one owner and month"""
        return self.group_by_project(self.query(owner, month))
