"""Geographic coordinates and their range validation."""

from pydantic import BaseModel, ConfigDict, Field

from weather_forecast.errors import InvalidLatitude, InvalidLongitude

LATITUDE_RANGE = (-90.0, 90.0)
LONGITUDE_RANGE = (-180.0, 180.0)


class Coordinates(BaseModel):
    """A latitude/longitude pair in decimal degrees.

    Construction does not range-check; call ``validate_coordinates`` on
    anything that came from user input.
    """

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(description="Latitude in decimal degrees")
    longitude: float = Field(description="Longitude in decimal degrees")

    def __str__(self) -> str:
        return f"{self.latitude}, {self.longitude}"


def validate_coordinates(coordinates: Coordinates) -> None:
    """
    Check that coordinates are within legal ranges.

    Values are never clamped. NaN fails both comparisons and is rejected.

    Raises:
        InvalidLatitude: latitude outside [-90, 90]
        InvalidLongitude: longitude outside [-180, 180]
    """
    if not LATITUDE_RANGE[0] <= coordinates.latitude <= LATITUDE_RANGE[1]:
        raise InvalidLatitude(coordinates.latitude)

    if not LONGITUDE_RANGE[0] <= coordinates.longitude <= LONGITUDE_RANGE[1]:
        raise InvalidLongitude(coordinates.longitude)
