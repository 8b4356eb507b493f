"""Lines API endpoints, including section management."""

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from subway.core.config import settings
from subway.core.database import get_db
from subway.models.line import Line
from subway.schemas.lines import (
    CreateLineRequest,
    CreateSectionRequest,
    LineResponse,
    UpdateLineRequest,
)
from subway.services.line_service import LineService

router = APIRouter(prefix="/lines", tags=["lines"])


# ==================== Line Endpoints ====================


@router.post("", response_model=LineResponse, status_code=status.HTTP_201_CREATED)
async def create_line(
    request: CreateLineRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> Line:
    """
    Create a line with its first section.

    Args:
        request: Line creation request (name, color, upStationId, downStationId, distance)
        response: Outgoing response (Location header is set)
        db: Database session

    Returns:
        Created line with its stations

    Raises:
        StationNotFoundError: 404 if either station does not exist
    """
    service = LineService(db)
    line = await service.create_line(request)

    response.headers["Location"] = f"{settings.API_V1_PREFIX}/lines/{line.id}"
    return line


@router.get("", response_model=list[LineResponse])
async def list_lines(db: AsyncSession = Depends(get_db)) -> list[Line]:
    """List all lines with their stations."""
    service = LineService(db)
    return await service.list_lines()


@router.get("/{line_id}", response_model=LineResponse)
async def get_line(line_id: int, db: AsyncSession = Depends(get_db)) -> Line:
    """
    Get a line by ID.

    Raises:
        LineNotFoundError: 404 if the line does not exist
    """
    service = LineService(db)
    return await service.get_line(line_id)


@router.put("/{line_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_line(
    line_id: int,
    request: UpdateLineRequest,
    db: AsyncSession = Depends(get_db),
) -> None:
    """
    Update a line's name and color.

    Raises:
        LineNotFoundError: 404 if the line does not exist
    """
    service = LineService(db)
    await service.update_line(line_id, request)


@router.delete("/{line_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_line(line_id: int, db: AsyncSession = Depends(get_db)) -> None:
    """
    Delete a line and all of its sections.

    Raises:
        LineNotFoundError: 404 if the line does not exist
    """
    service = LineService(db)
    await service.delete_line(line_id)


# ==================== Section Endpoints ====================


@router.post("/{line_id}/sections", response_model=LineResponse, status_code=status.HTTP_201_CREATED)
async def create_section(
    line_id: int,
    request: CreateSectionRequest,
    db: AsyncSession = Depends(get_db),
) -> Line:
    """
    Append a section to a line.

    Args:
        line_id: Line ID
        request: Section creation request (upStationId, downStationId, distance)
        db: Database session

    Returns:
        The updated line

    Raises:
        LineNotFoundError: 404 if the line does not exist
        StationNotFoundError: 404 if either station does not exist
        DuplicateSectionError: 400 if the station pair is already registered
        InvalidTopologyError: 400 if the down station is already an up station of the line
    """
    service = LineService(db)
    return await service.add_section(line_id, request)


@router.delete("/{line_id}/sections", status_code=status.HTTP_204_NO_CONTENT)
async def delete_section(
    line_id: int,
    station_id: int = Query(..., alias="stationId", gt=0, description="Down station of the section to remove"),
    db: AsyncSession = Depends(get_db),
) -> None:
    """
    Remove the section of a line that ends at the given station.

    Raises:
        LineNotFoundError: 404 if the line does not exist
        MinimumSectionError: 400 if the line has only one section
        SectionNotFoundError: 400 if no section ends at the station
    """
    service = LineService(db)
    await service.remove_section(line_id, station_id)
