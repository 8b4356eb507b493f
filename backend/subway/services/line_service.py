"""Line management service.

Resolves station ids, hands candidate sections to the line's topology ledger
and owns the transaction for every mutation: one commit on success, rollback
when anything after the ledger check fails. Ledger rejections happen before
any state changes, so they are re-raised without touching the session.
"""

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from subway.core.errors import LineNotFoundError, SectionLedgerError
from subway.core.telemetry import service_span
from subway.models.line import Line
from subway.schemas.lines import CreateLineRequest, CreateSectionRequest, UpdateLineRequest
from subway.services.station_service import StationService

logger = structlog.get_logger(__name__)

SERVICE_NAME = "line-service"


class LineService:
    """Service for managing lines and their sections."""

    def __init__(self, db: AsyncSession) -> None:
        """
        Initialize the line service.

        Args:
            db: Database session
        """
        self.db = db
        self.station_service = StationService(db)

    async def _commit(self) -> None:
        """Commit the current transaction, rolling back on failure."""
        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

    async def get_line(self, line_id: int) -> Line:
        """
        Get a line by ID with its sections and their stations loaded.

        Raises:
            LineNotFoundError: If no line has this id
        """
        result = await self.db.execute(select(Line).where(Line.id == line_id))

        if not (line := result.scalar_one_or_none()):
            raise LineNotFoundError(line_id)

        return line

    async def list_lines(self) -> list[Line]:
        """List all lines ordered by id."""
        result = await self.db.execute(select(Line).order_by(Line.id))
        return list(result.scalars().all())

    async def create_line(self, request: CreateLineRequest) -> Line:
        """
        Create a line with its seed section.

        Args:
            request: Line creation request

        Returns:
            Created line

        Raises:
            StationNotFoundError: If either station id does not resolve
        """
        with service_span("line.create", SERVICE_NAME) as span:
            up_station = await self.station_service.get_station(request.up_station_id)
            down_station = await self.station_service.get_station(request.down_station_id)

            line = Line.create(
                name=request.name,
                color=request.color,
                up_station=up_station,
                down_station=down_station,
                distance=request.distance,
            )
            self.db.add(line)
            await self._commit()

            span.set_attribute("line.id", line.id)

        logger.info("line_created", line_id=line.id, name=line.name, distance=line.distance)
        return line

    async def update_line(self, line_id: int, request: UpdateLineRequest) -> Line:
        """
        Update a line's name and/or color.

        Raises:
            LineNotFoundError: If no line has this id
        """
        line = await self.get_line(line_id)
        line.update_details(name=request.name, color=request.color)
        await self._commit()

        logger.info("line_updated", line_id=line_id)
        return line

    async def delete_line(self, line_id: int) -> None:
        """
        Delete a line and all of its sections.

        Raises:
            LineNotFoundError: If no line has this id
        """
        line = await self.get_line(line_id)

        await self.db.delete(line)
        await self._commit()

        logger.info("line_deleted", line_id=line_id)

    async def add_section(self, line_id: int, request: CreateSectionRequest) -> Line:
        """
        Append a section to a line.

        Args:
            line_id: Line ID
            request: Section creation request

        Returns:
            The updated line

        Raises:
            LineNotFoundError: If no line has this id
            StationNotFoundError: If either station id does not resolve
            DuplicateSectionError: If the station pair is already on the line
            InvalidTopologyError: If the down station is already an up station of the line
        """
        with service_span("line.add_section", SERVICE_NAME, line_id=line_id) as span:
            line = await self.get_line(line_id)
            up_station = await self.station_service.get_station(request.up_station_id)
            down_station = await self.station_service.get_station(request.down_station_id)

            section = line.add_section(up_station, down_station, request.distance)
            await self._commit()

            span.set_attribute("line.section_count", line.ledger.size())

        logger.info(
            "section_added",
            line_id=line_id,
            section_id=section.id,
            up_station_id=section.up_station_id,
            down_station_id=section.down_station_id,
            distance=section.distance,
            line_distance=line.distance,
        )
        return line

    async def remove_section(self, line_id: int, station_id: int) -> None:
        """
        Remove the section of a line that ends at ``station_id``.

        Raises:
            LineNotFoundError: If no line has this id
            MinimumSectionError: If the line has a single section
            SectionNotFoundError: If no section of the line ends at station_id
        """
        with service_span("line.remove_section", SERVICE_NAME, line_id=line_id, station_id=station_id) as span:
            line = await self.get_line(line_id)

            try:
                removed = line.remove_section(station_id)
                await self.db.commit()
            except SectionLedgerError:
                raise
            except Exception:
                await self.db.rollback()
                raise

            span.set_attribute("line.section_count", line.ledger.size())

        logger.info(
            "section_removed",
            line_id=line_id,
            section_id=removed.id,
            distance=removed.distance,
            line_distance=line.distance,
        )
