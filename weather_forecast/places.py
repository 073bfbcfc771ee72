"""
Saved places: named coordinates keyed by a user-chosen tag.
"""

from collections.abc import Iterable, Iterator

from pydantic import BaseModel, ConfigDict

from weather_forecast.coordinates import Coordinates, validate_coordinates
from weather_forecast.errors import InvalidPlaceTagError
from weather_forecast.logging_config import get_logger

logger = get_logger(__name__)


class Place(BaseModel):
    """A named location.

    Identity is the tag alone: two places with the same tag are equal even
    when their coordinates differ.
    """

    model_config = ConfigDict(frozen=True)

    tag: str
    coordinates: Coordinates

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Place):
            return NotImplemented
        return self.tag == other.tag

    def __hash__(self) -> int:
        return hash(self.tag)

    def __str__(self) -> str:
        return f"{self.tag}: {self.coordinates}"


def validate_tag(tag: str) -> str:
    """Reject empty or whitespace-only tags. Tags are otherwise opaque."""
    if not tag or not tag.strip():
        raise InvalidPlaceTagError("Place tag must not be empty")
    return tag


class PlaceRegistry:
    """
    Tag-keyed set of places.

    Holds at most one place per tag. Mutations mark the registry dirty so
    the caller knows whether it needs to be written back.
    """

    def __init__(self, places: Iterable[Place] = ()):
        self._places: dict[str, Place] = {}
        for place in places:
            self._places[place.tag] = place
        self.dirty = False

    def list_places(self) -> list[Place]:
        """Snapshot of all places, sorted by tag for stable display."""
        return sorted(self._places.values(), key=lambda p: p.tag)

    def upsert(self, place: Place) -> None:
        """
        Insert a place, or replace the coordinates of the one with its tag.

        Raises:
            InvalidPlaceTagError: tag is empty
            CoordinateError: coordinates out of range (registry unchanged)
        """
        validate_tag(place.tag)
        validate_coordinates(place.coordinates)

        replaced = place.tag in self._places
        self._places[place.tag] = place
        self.dirty = True
        logger.info(f"{'Updated' if replaced else 'Added'} place {place}")

    def remove(self, tag: str) -> bool:
        """Remove the place with this tag. Returns whether anything was removed."""
        if self._places.pop(tag, None) is None:
            logger.debug(f"No place tagged '{tag}' to remove")
            return False

        self.dirty = True
        logger.info(f"Removed place '{tag}'")
        return True

    def resolve(self, tag: str) -> Coordinates | None:
        """Coordinates of the place with this tag, or None."""
        place = self._places.get(tag)
        return place.coordinates if place else None

    def __len__(self) -> int:
        return len(self._places)

    def __contains__(self, tag: object) -> bool:
        return tag in self._places

    def __iter__(self) -> Iterator[Place]:
        return iter(self.list_places())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PlaceRegistry):
            return NotImplemented
        return {p.tag: p.coordinates for p in self._places.values()} == {
            p.tag: p.coordinates for p in other._places.values()
        }

    def __repr__(self) -> str:
        return f"PlaceRegistry({self.list_places()!r})"
