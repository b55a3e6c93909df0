"""
Record-set helpers: splitting, grouping and filtering.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Hashable, List, Sequence

from .accessors import AccessorLike, attribute_value, resolve_accessor


@dataclass
class Group:
    """Records sharing a group key, with the group's position in first-seen order."""
    group_key: Hashable
    group_index: int
    items: List[Any] = field(default_factory=list)

    def __len__(self):
        return len(self.items)

    def __iter__(self):
        return iter(self.items)


def split_data(records: Sequence[Any], on: AccessorLike) -> List[List[Any]]:
    """
    Split records into consecutive sections.

    A new section starts at every record whose ``on`` value is truthy
    (and at the first record).
    """
    on = resolve_accessor(on)
    sections: List[List[Any]] = []
    for record in records:
        if not sections or attribute_value(record, on):
            sections.append([record])
        else:
            sections[-1].append(record)
    return sections


def grouped(records: Sequence[Any], by: AccessorLike) -> List[Group]:
    """Group records by an accessor's value, keeping first-seen key order."""
    by = resolve_accessor(by)
    groups: Dict[Hashable, Group] = {}
    for record in records:
        key = attribute_value(record, by)
        if key not in groups:
            groups[key] = Group(group_key=key, group_index=len(groups))
        groups[key].items.append(record)
    return list(groups.values())


def subset(records: Sequence[Any], predicate: Callable[[Any], bool]) -> List[Any]:
    return [record for record in records if predicate(record)]
