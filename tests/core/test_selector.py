from __future__ import annotations

import os
from collections import Counter
from pathlib import Path

import pytest

from ticketer.core.selector import random_index, select_entry
from ticketer.core.space import TicketSpace


def _fill(space: TicketSpace, count: int) -> list[str]:
    tickets = []
    for _ in range(count):
        ticket, ok = space.save(b"item")
        assert ok
        tickets.append(ticket)
    return tickets


def test_next_on_empty_directory(space: TicketSpace) -> None:
    assert space.next() is None
    assert space.next(random=True) is None


def test_next_on_missing_directory(tmp_path: Path) -> None:
    assert select_entry(tmp_path / "missing") is None


def test_head_follows_directory_listing_order(space: TicketSpace) -> None:
    _fill(space, 5)
    with os.scandir(space.path) as it:
        first = next(it).name
    selected = space.next()
    assert selected == space.path / first
    assert space.next() == selected


def test_next_does_not_remove_entry(space: TicketSpace) -> None:
    (ticket,) = _fill(space, 1)
    assert space.next() == space.path / ticket
    assert space.next(random=True) == space.path / ticket
    assert (space.path / ticket).exists()


def test_processing_loop_drains_directory(space: TicketSpace) -> None:
    tickets = set(_fill(space, 4))
    seen = set()
    while (selected := space.next()) is not None:
        seen.add(selected.name)
        assert space.remove(selected.name)
    assert seen == tickets


def test_random_selection_is_roughly_uniform(space: TicketSpace) -> None:
    tickets = _fill(space, 4)
    draws = 4000
    counts = Counter(space.next(random=True).name for _ in range(draws))
    assert set(counts) == set(tickets)
    expected = draws / len(tickets)
    for ticket in tickets:
        assert abs(counts[ticket] - expected) < expected * 0.2


def test_scan_is_bounded(space: TicketSpace) -> None:
    _fill(space, 10)
    with os.scandir(space.path) as it:
        listed = [entry.name for entry in it][:3]
    picks = {select_entry(space.path, random=True, limit=3).name for _ in range(300)}
    assert picks <= set(listed)


def test_random_index_range() -> None:
    assert {random_index(3) for _ in range(300)} == {0, 1, 2}
    assert random_index(1) == 0
    with pytest.raises(ValueError):
        random_index(0)
