"""Line and section models."""

from sqlalchemy import CheckConstraint, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from subway.helpers.section_ledger import SectionLedger
from subway.models.base import BaseModel
from subway.models.station import Station


class Line(BaseModel):
    """A named metro line owning an ordered set of sections."""

    __tablename__ = "lines"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    color: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )
    # Running total of section distances, adjusted on every add/remove
    distance: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    # Relationships
    sections: Mapped[list["Section"]] = relationship(
        cascade="all, delete-orphan",
        order_by="Section.id",
        lazy="selectin",
    )

    @classmethod
    def create(
        cls,
        name: str,
        color: str,
        up_station: Station,
        down_station: Station,
        distance: int,
    ) -> "Line":
        """Build a new line with its seed section."""
        line = cls(name=name, color=color, distance=0)
        line.add_section(up_station, down_station, distance)
        return line

    @property
    def ledger(self) -> SectionLedger["Section"]:
        """Topology ledger over this line's sections (live view, not a copy)."""
        return SectionLedger(self.sections)

    @property
    def stations(self) -> list[Station]:
        """Stations of the line in route order."""
        return self.ledger.station_sequence()

    def add_section(self, up_station: Station, down_station: Station, distance: int) -> "Section":
        """
        Register a new section on this line.

        Args:
            up_station: Resolved up station
            down_station: Resolved down station
            distance: Positive section distance

        Returns:
            The newly appended section

        Raises:
            ValueError: If distance is not positive
            DuplicateSectionError: If the station pair is already registered
            InvalidTopologyError: If down_station is already an up station of this line
        """
        if distance <= 0:
            msg = f"Section distance must be positive, got {distance}"
            raise ValueError(msg)

        section = Section(
            up_station_id=up_station.id,
            down_station_id=down_station.id,
            up_station=up_station,
            down_station=down_station,
            distance=distance,
        )
        self.ledger.add_section(section)
        self.distance += distance
        return section

    def remove_section(self, station_id: int) -> "Section":
        """
        Remove the section ending at ``station_id`` and shorten the line.

        Nothing changes when any check fails.

        Raises:
            MinimumSectionError: If the line has only one section
            SectionNotFoundError: If no section ends at station_id
            ValueError: If the section's distance cannot be taken off the line distance
        """
        ledger = self.ledger
        target = ledger.find_removable(station_id, line_id=self.id)
        self._check_subtraction(target.distance)

        removed = ledger.remove_section(station_id, line_id=self.id)
        self.subtract_distance(removed.distance)
        return removed

    def update_details(self, name: str | None = None, color: str | None = None) -> None:
        """Update descriptive fields. Omitted values are left unchanged."""
        if name is not None:
            self.name = name
        if color is not None:
            self.color = color

    def subtract_distance(self, amount: int) -> None:
        """
        Decrease the aggregate distance.

        Raises:
            ValueError: If amount is not positive or exceeds the current distance
        """
        self._check_subtraction(amount)
        self.distance -= amount

    def _check_subtraction(self, amount: int) -> None:
        if amount <= 0:
            msg = f"Distance to subtract must be positive, got {amount}"
            raise ValueError(msg)
        if amount > self.distance:
            msg = f"Cannot subtract {amount} from line distance {self.distance}"
            raise ValueError(msg)

    def recalculate_distance(self) -> int:
        """Reset the aggregate distance to the sum of the current sections."""
        self.distance = self.ledger.total_distance()
        return self.distance

    def __repr__(self) -> str:
        """String representation of the line."""
        return f"<Line(id={self.id}, name={self.name}, distance={self.distance})>"


class Section(BaseModel):
    """A directed edge between two stations on exactly one line."""

    __tablename__ = "sections"

    line_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("lines.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    up_station_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("stations.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    down_station_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("stations.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    distance: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    # Relationships (one-way; stations do not know their sections)
    up_station: Mapped[Station] = relationship(
        foreign_keys=[up_station_id],
        lazy="selectin",
    )
    down_station: Mapped[Station] = relationship(
        foreign_keys=[down_station_id],
        lazy="selectin",
    )

    __table_args__ = (
        UniqueConstraint("line_id", "up_station_id", "down_station_id", name="uq_section_line_station_pair"),
        CheckConstraint("distance > 0", name="ck_section_distance_positive"),
    )

    def __repr__(self) -> str:
        """String representation of the section."""
        return (
            f"<Section(id={self.id}, line={self.line_id}, "
            f"{self.up_station_id}->{self.down_station_id}, distance={self.distance})>"
        )
