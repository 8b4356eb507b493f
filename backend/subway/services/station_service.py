"""Station directory service."""

import structlog
from sqlalchemy import exists, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from subway.core.errors import StationInUseError, StationNotFoundError
from subway.models.line import Section
from subway.models.station import Station

logger = structlog.get_logger(__name__)


class StationService:
    """Service for looking up and managing stations."""

    def __init__(self, db: AsyncSession) -> None:
        """
        Initialize the station service.

        Args:
            db: Database session
        """
        self.db = db

    async def get_station(self, station_id: int) -> Station:
        """
        Get a station by ID.

        Raises:
            StationNotFoundError: If no station has this id
        """
        if not (station := await self.db.get(Station, station_id)):
            raise StationNotFoundError(station_id)
        return station

    async def list_stations(self) -> list[Station]:
        """List all stations ordered by id."""
        result = await self.db.execute(select(Station).order_by(Station.id))
        return list(result.scalars().all())

    async def create_station(self, name: str) -> Station:
        """
        Register a new station.

        Args:
            name: Station name

        Returns:
            Created station
        """
        station = Station(name=name)
        self.db.add(station)
        await self.db.commit()
        await self.db.refresh(station)

        logger.info("station_created", station_id=station.id, name=station.name)
        return station

    async def delete_station(self, station_id: int) -> None:
        """
        Delete a station that no section references.

        Raises:
            StationNotFoundError: If no station has this id
            StationInUseError: If any section starts or ends at the station
        """
        station = await self.get_station(station_id)

        in_use = await self.db.scalar(
            select(
                exists().where(
                    or_(
                        Section.up_station_id == station_id,
                        Section.down_station_id == station_id,
                    )
                )
            )
        )
        if in_use:
            logger.warning("station_delete_rejected", station_id=station_id, reason="in_use")
            raise StationInUseError(station_id)

        await self.db.delete(station)
        await self.db.commit()

        logger.info("station_deleted", station_id=station_id)
