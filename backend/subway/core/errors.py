"""Domain exceptions raised by the station directory and the line topology ledger.

The API layer maps ``NotFoundError`` to 404 and every other ``SubwayError``
to 400 (see ``subway.api.errors``).
"""


class SubwayError(Exception):
    """Base exception for request-level domain failures."""

    pass


# Lookups


class NotFoundError(SubwayError):
    """Raised when a line or station id does not resolve."""

    pass


class LineNotFoundError(NotFoundError):
    """Raised when no line exists with the requested id."""

    def __init__(self, line_id: int) -> None:
        self.line_id = line_id
        super().__init__(f"Line not found. Line id: {line_id}")


class StationNotFoundError(NotFoundError):
    """Raised when no station exists with the requested id."""

    def __init__(self, station_id: int) -> None:
        self.station_id = station_id
        super().__init__(f"Station not found. Station id: {station_id}")


class StationInUseError(SubwayError):
    """Raised when deleting a station that sections still reference."""

    def __init__(self, station_id: int) -> None:
        self.station_id = station_id
        super().__init__(f"Station {station_id} is still used by at least one section.")


# Topology ledger


class SectionLedgerError(SubwayError):
    """Base exception for rejected section additions or removals."""

    pass


class DuplicateSectionError(SectionLedgerError):
    """Raised when a section with the same up/down station pair already exists."""

    def __init__(self, up_station_id: int, down_station_id: int) -> None:
        self.up_station_id = up_station_id
        self.down_station_id = down_station_id
        super().__init__(f"Section {up_station_id} -> {down_station_id} is already registered on this line.")


class InvalidTopologyError(SectionLedgerError):
    """Raised when a new section's down station is already an up station of the line."""

    def __init__(self, station_id: int) -> None:
        self.station_id = station_id
        super().__init__(f"Station {station_id} is already an up station on this line and cannot be a down station.")


class MinimumSectionError(SectionLedgerError):
    """Raised when a removal would leave the line without sections."""

    def __init__(self, line_id: int | None = None) -> None:
        self.line_id = line_id
        super().__init__("A line must keep at least one section.")


class SectionNotFoundError(SectionLedgerError):
    """Raised when no section on the line ends at the requested station."""

    def __init__(self, station_id: int) -> None:
        self.station_id = station_id
        super().__init__(f"No section on this line ends at station {station_id}.")
