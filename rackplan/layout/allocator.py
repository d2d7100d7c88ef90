"""
layout/allocator.py - Per-rack unit allocation

First-fit allocation over the set of occupied units of a single rack.
"""

from __future__ import annotations
from typing import Iterable, Optional, Set

from rackplan.core.models import Equipment

__all__ = ["UnitAllocator"]


class UnitAllocator:
    """
    Tracks occupied units of one rack and hands out free ranges.

    Units are 1-based; an item of height ``h`` at ``u`` occupies
    ``u .. u+h-1``.
    """

    def __init__(self, total_units: int, occupied: Iterable[int] = ()):
        if total_units <= 0:
            raise ValueError(f"total_units must be > 0, got {total_units}")
        self.total_units = total_units
        self._occupied: Set[int] = set(occupied)

    @classmethod
    def from_equipment(cls, total_units: int, equipment: Iterable[Equipment]) -> "UnitAllocator":
        """Allocator pre-loaded with the ranges of active items."""
        allocator = cls(total_units)
        for item in equipment:
            if item.is_active:
                allocator.mark_occupied(item.rack_unit, item.unit_height)
        return allocator

    @property
    def occupied_units(self) -> Set[int]:
        return set(self._occupied)

    @property
    def occupied_count(self) -> int:
        return len(self._occupied)

    @property
    def free_count(self) -> int:
        return self.total_units - len(self._occupied)

    def is_free(self, start: int, height: int) -> bool:
        """Whole range lies in the rack and no unit of it is taken."""
        if start < 1 or start + height - 1 > self.total_units:
            return False
        return all(u not in self._occupied for u in range(start, start + height))

    def find_next_available_unit(self, start: int, height: int) -> Optional[int]:
        """
        Lowest unit ``>= start`` where ``height`` contiguous units are free.

        Returns None when no such unit exists up to ``total_units - height + 1``.
        """
        for unit in range(max(1, start), self.total_units - height + 2):
            if self.is_free(unit, height):
                return unit
        return None

    def mark_occupied(self, start: int, height: int) -> None:
        self._occupied.update(range(start, start + height))

    def next_search_start(self, gap: int = 0) -> int:
        """One past the highest occupied unit plus ``gap``; 1 for an empty rack."""
        if not self._occupied:
            return 1
        return max(self._occupied) + 1 + gap

    def allocate(self, height: int, start: Optional[int] = None, gap: int = 0) -> Optional[int]:
        """
        Reserve ``height`` units and return the start unit.

        Without ``start`` the search begins after the highest occupied unit
        (plus ``gap``), which stacks items upward. Returns None if nothing fits.
        """
        search_from = start if start is not None else self.next_search_start(gap)
        unit = self.find_next_available_unit(search_from, height)
        if unit is not None:
            self.mark_occupied(unit, height)
        return unit
