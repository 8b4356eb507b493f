"""Station model."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from subway.models.base import BaseModel

STATION_NAME_MAX_LENGTH = 20


class Station(BaseModel):
    """A named stop. Sections reference stations by id; stations hold no line collections."""

    __tablename__ = "stations"

    name: Mapped[str] = mapped_column(
        String(STATION_NAME_MAX_LENGTH),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        """String representation of the station."""
        return f"<Station(id={self.id}, name={self.name})>"
