"""Station directory API endpoints."""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from subway.core.config import settings
from subway.core.database import get_db
from subway.models.station import Station
from subway.schemas.stations import CreateStationRequest, StationResponse
from subway.services.station_service import StationService

router = APIRouter(prefix="/stations", tags=["stations"])


@router.post("", response_model=StationResponse, status_code=status.HTTP_201_CREATED)
async def create_station(
    request: CreateStationRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> Station:
    """
    Register a station.

    Args:
        request: Station creation request
        response: Outgoing response (Location header is set)
        db: Database session

    Returns:
        Created station
    """
    service = StationService(db)
    station = await service.create_station(request.name)

    response.headers["Location"] = f"{settings.API_V1_PREFIX}/stations/{station.id}"
    return station


@router.get("", response_model=list[StationResponse])
async def list_stations(db: AsyncSession = Depends(get_db)) -> list[Station]:
    """List all stations."""
    service = StationService(db)
    return await service.list_stations()


@router.get("/{station_id}", response_model=StationResponse)
async def get_station(station_id: int, db: AsyncSession = Depends(get_db)) -> Station:
    """
    Get a station by ID.

    Raises:
        StationNotFoundError: 404 if the station does not exist
    """
    service = StationService(db)
    return await service.get_station(station_id)


@router.delete("/{station_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_station(station_id: int, db: AsyncSession = Depends(get_db)) -> None:
    """
    Delete a station.

    Raises:
        StationNotFoundError: 404 if the station does not exist
        StationInUseError: 400 if a section still references the station
    """
    service = StationService(db)
    await service.delete_station(station_id)
