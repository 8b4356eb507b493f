"""
Topology ledger for the sections of a single line.

The ledger wraps the line's ordered section list (ascending id, i.e. insertion
order) and is the only place that decides whether a section may be added or
removed. It has no database access and never touches the line's aggregate
distance; ``Line`` adjusts that after a ledger operation succeeds.

Rules enforced:
    - a (up, down) station pair is registered at most once
    - a new section's down station must not already be an up station
    - removal never leaves the line without sections

Contiguity is not enforced: a section whose up station is not the current
tail is accepted, so a line may hold disconnected sub-routes.
"""

from __future__ import annotations

from collections.abc import Iterator, MutableSequence
from typing import Generic, Protocol, TypeVar

import structlog

from subway.core.errors import (
    DuplicateSectionError,
    InvalidTopologyError,
    MinimumSectionError,
    SectionNotFoundError,
)

logger = structlog.get_logger(__name__)

MIN_LINE_SECTIONS = 1


class StationLike(Protocol):
    """Anything with a station id and name."""

    id: int
    name: str


class SectionLike(Protocol):
    """Shape of a section as seen by the ledger."""

    up_station_id: int
    down_station_id: int
    distance: int

    @property
    def up_station(self) -> StationLike: ...

    @property
    def down_station(self) -> StationLike: ...


SectionT = TypeVar("SectionT", bound=SectionLike)


class SectionLedger(Generic[SectionT]):
    """Invariant-enforcing view over a line's section list.

    Mutations go straight to the wrapped list, so wrapping an ORM collection
    makes the changes visible to the session.
    """

    def __init__(self, sections: MutableSequence[SectionT]) -> None:
        self._sections = sections

    def __len__(self) -> int:
        return len(self._sections)

    def __iter__(self) -> Iterator[SectionT]:
        return iter(self._sections)

    def size(self) -> int:
        """Number of registered sections."""
        return len(self._sections)

    def is_section_registered(self, up_station_id: int, down_station_id: int) -> bool:
        """Return True if a section with exactly this up/down pair exists."""
        return any(
            section.up_station_id == up_station_id and section.down_station_id == down_station_id
            for section in self._sections
        )

    def ensure_no_duplicate_down_station(self, new_section: SectionT) -> None:
        """
        Reject a section that would re-enter a station already used as an up station.

        Raises:
            InvalidTopologyError: If new_section's down station is the up station of any section
        """
        if any(section.up_station_id == new_section.down_station_id for section in self._sections):
            raise InvalidTopologyError(new_section.down_station_id)

    def add_section(self, section: SectionT) -> None:
        """
        Append a section after validating it against the ledger.

        Nothing is appended when validation fails.

        Raises:
            DuplicateSectionError: If the up/down pair is already registered
            InvalidTopologyError: If the down station is already an up station
        """
        if self.is_section_registered(section.up_station_id, section.down_station_id):
            logger.warning(
                "section_rejected",
                reason="duplicate_pair",
                up_station_id=section.up_station_id,
                down_station_id=section.down_station_id,
            )
            raise DuplicateSectionError(section.up_station_id, section.down_station_id)

        try:
            self.ensure_no_duplicate_down_station(section)
        except InvalidTopologyError:
            logger.warning(
                "section_rejected",
                reason="duplicate_down_station",
                up_station_id=section.up_station_id,
                down_station_id=section.down_station_id,
            )
            raise

        self._sections.append(section)

    def find_removable(self, station_id: int, *, line_id: int | None = None) -> SectionT:
        """
        Return the section ``remove_section`` would take out, without removing it.

        Args:
            station_id: Terminal station of the section to remove
            line_id: Owning line id, only used for error reporting

        Returns:
            The first section (in ledger order) whose down station is ``station_id``

        Raises:
            MinimumSectionError: If the ledger holds MIN_LINE_SECTIONS sections or fewer
            SectionNotFoundError: If no section ends at station_id
        """
        if self.size() <= MIN_LINE_SECTIONS:
            logger.warning("section_removal_rejected", reason="minimum_sections", line_id=line_id)
            raise MinimumSectionError(line_id)

        target = next((s for s in self._sections if s.down_station_id == station_id), None)
        if target is None:
            logger.warning("section_removal_rejected", reason="not_found", line_id=line_id, station_id=station_id)
            raise SectionNotFoundError(station_id)

        return target

    def remove_section(self, station_id: int, *, line_id: int | None = None) -> SectionT:
        """
        Remove the first section (in ledger order) whose down station is ``station_id``.

        Returns:
            The removed section

        Raises:
            MinimumSectionError: If the ledger holds MIN_LINE_SECTIONS sections or fewer
            SectionNotFoundError: If no section ends at station_id
        """
        target = self.find_removable(station_id, line_id=line_id)
        self._sections.remove(target)
        return target

    def total_distance(self) -> int:
        """Sum of all section distances."""
        return sum(section.distance for section in self._sections)

    def station_sequence(self) -> list[StationLike]:
        """
        Derive the ordered station list for the line.

        Walks from each path head (an up station that is no section's down
        station, earliest first) along up -> down edges, taking the earliest
        unvisited outgoing section at forks. Sections not reached that way
        are walked afterwards in ledger order. Each station appears once.

        Examples:
            sections A->B, B->C            -> [A, B, C]
            sections B->C, A->B            -> [A, B, C]
            sections A->B, C->D (disjoint) -> [A, B, C, D]
        """
        down_ids = {section.down_station_id for section in self._sections}
        outgoing: dict[int, list[SectionT]] = {}
        for section in self._sections:
            outgoing.setdefault(section.up_station_id, []).append(section)

        ordered: list[StationLike] = []
        seen_station_ids: set[int] = set()
        visited: set[int] = set()  # id() of walked sections; transient sections have no pk yet

        def add_station(station: StationLike) -> None:
            if station.id not in seen_station_ids:
                seen_station_ids.add(station.id)
                ordered.append(station)

        def walk(start: SectionT) -> None:
            current: SectionT | None = start
            while current is not None and id(current) not in visited:
                visited.add(id(current))
                add_station(current.up_station)
                add_station(current.down_station)
                current = next(
                    (s for s in outgoing.get(current.down_station_id, []) if id(s) not in visited),
                    None,
                )

        heads = [s for s in self._sections if s.up_station_id not in down_ids]
        for section in (*heads, *self._sections):
            if id(section) not in visited:
                walk(section)

        return ordered
