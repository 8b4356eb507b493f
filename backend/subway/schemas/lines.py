"""Pydantic schemas for lines and their sections."""

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from subway.schemas.stations import StationResponse

# Request bodies use camelCase keys (upStationId); snake_case is accepted too
_REQUEST_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _validate_distinct_stations(up_station_id: int, down_station_id: int) -> None:
    """
    Reject a section that starts and ends at the same station - reusable helper.

    Raises:
        ValueError: If both ids are equal
    """
    if up_station_id == down_station_id:
        msg = "upStationId and downStationId must be different stations"
        raise ValueError(msg)


# ==================== Request Schemas ====================


class CreateLineRequest(BaseModel):
    """Request to create a line together with its first section."""

    model_config = _REQUEST_CONFIG

    name: str = Field(..., min_length=1, max_length=255, description="Line name")
    color: str = Field(..., min_length=1, max_length=50, description="Display color, e.g. 'bg-red-600'")
    up_station_id: int = Field(..., gt=0, description="Up station of the seed section")
    down_station_id: int = Field(..., gt=0, description="Down station of the seed section")
    distance: int = Field(..., gt=0, description="Distance of the seed section")

    @model_validator(mode="after")
    def validate_stations(self) -> "CreateLineRequest":
        """Validate the seed section endpoints."""
        _validate_distinct_stations(self.up_station_id, self.down_station_id)
        return self


class UpdateLineRequest(BaseModel):
    """Request to update a line's name and color."""

    model_config = _REQUEST_CONFIG

    name: str | None = Field(None, min_length=1, max_length=255)
    color: str | None = Field(None, min_length=1, max_length=50)


class CreateSectionRequest(BaseModel):
    """Request to append a section to a line."""

    model_config = _REQUEST_CONFIG

    up_station_id: int = Field(..., gt=0)
    down_station_id: int = Field(..., gt=0)
    distance: int = Field(..., gt=0)

    @model_validator(mode="after")
    def validate_stations(self) -> "CreateSectionRequest":
        """Validate the section endpoints."""
        _validate_distinct_stations(self.up_station_id, self.down_station_id)
        return self


# ==================== Response Schemas ====================


class LineResponse(BaseModel):
    """Line with its stations in route order."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    color: str
    distance: int
    stations: list[StationResponse]
