"""Pydantic schemas for the station directory."""

from pydantic import BaseModel, ConfigDict, Field

from subway.models.station import STATION_NAME_MAX_LENGTH


class CreateStationRequest(BaseModel):
    """Request to register a station."""

    name: str = Field(..., min_length=1, max_length=STATION_NAME_MAX_LENGTH, description="Station name")


class StationResponse(BaseModel):
    """Station as exposed by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
