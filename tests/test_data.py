"""Tests for splitting, grouping and filtering records."""

from vismap.data import Group, grouped, split_data, subset


ROWS = [
    {"lap": 1, "start": True, "v": 1},
    {"lap": 1, "start": False, "v": 2},
    {"lap": 2, "start": True, "v": 3},
    {"lap": 2, "start": False, "v": 4},
    {"lap": 1, "start": False, "v": 5},
]


class TestSplitData:
    def test_sections_start_at_truthy_records(self):
        sections = split_data(ROWS, "start")
        assert [[r["v"] for r in s] for s in sections] == [[1, 2], [3, 4, 5]]

    def test_first_record_always_opens_a_section(self):
        sections = split_data(ROWS[1:], "start")
        assert [[r["v"] for r in s] for s in sections] == [[2], [3, 4, 5]]

    def test_empty(self):
        assert split_data([], "start") == []


class TestGrouped:
    def test_groups_keep_first_seen_order(self):
        groups = grouped(ROWS, "lap")
        assert [g.group_key for g in groups] == [1, 2]
        assert [g.group_index for g in groups] == [0, 1]
        assert [r["v"] for r in groups[0]] == [1, 2, 5]
        assert len(groups[1]) == 2

    def test_function_key(self):
        groups = grouped(ROWS, lambda r: r["v"] % 2 == 0)
        assert groups[0] == Group(group_key=False, group_index=0, items=[ROWS[0], ROWS[2], ROWS[4]])


def test_subset():
    assert subset(ROWS, lambda r: r["v"] > 3) == ROWS[3:]
