"""Weather Forecast: one forecast model over several weather providers."""

__version__ = "0.1.0"

from .coordinates import Coordinates, validate_coordinates
from .models import ForecastWindow, UnitSystem
from .places import Place, PlaceRegistry
from .service import ForecastService

__all__ = [
    "Coordinates",
    "ForecastService",
    "ForecastWindow",
    "Place",
    "PlaceRegistry",
    "UnitSystem",
    "validate_coordinates",
]
