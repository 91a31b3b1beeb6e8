"""
Location fixes fed to the grid overlay.

Pydantic model for a GPS fix plus the helpers the location screen applies
before rendering: heading selection and mock-location replay.
"""

import math
from typing import Optional

from pydantic import BaseModel, Field

from constants import MAX_ACCEPTABLE_ACCURACY


class LocationFix(BaseModel):
    """Single location update."""
    latitude: float = Field(description="WGS84 latitude in degrees")
    longitude: float = Field(description="WGS84 longitude in degrees (may be un-normalized)")
    horizontal_accuracy: float = Field(default=5.0, description="Accuracy radius in meters")
    heading: float = Field(default=0.0, description="Device heading in degrees (0=North, 90=East)")

    @property
    def is_valid(self) -> bool:
        """Whether the coordinate can be looked up at all."""
        if not (math.isfinite(self.latitude) and math.isfinite(self.longitude)):
            return False
        return -90.0 <= self.latitude <= 90.0

    def is_acceptable(self, max_accuracy: float = MAX_ACCEPTABLE_ACCURACY) -> bool:
        """Whether the fix is precise enough to highlight sub-cells."""
        acc = self.horizontal_accuracy
        return math.isfinite(acc) and 0 <= acc <= max_accuracy


def select_heading(true_heading: float, magnetic_heading: float) -> float:
    """Prefer true heading; a negative value means it is unavailable."""
    if math.isfinite(true_heading) and true_heading >= 0:
        return true_heading
    return magnetic_heading


class MockLocationOffset:
    """Replay real movement on top of a mock coordinate.

    The first real fix is recorded as the reference; every later fix is
    shifted so the displayed position moves by the same lat/lng delta from
    the mock coordinate. Accuracy and heading pass through unchanged.

    Args:
        mock_lat, mock_lng: Coordinate to display instead of the real one
    """

    def __init__(self, mock_lat: float, mock_lng: float):
        self.mock_lat = mock_lat
        self.mock_lng = mock_lng
        self._initial: Optional[LocationFix] = None

    def reset(self) -> None:
        self._initial = None

    def apply(self, real: LocationFix) -> LocationFix:
        if self._initial is None:
            self._initial = real

        lat_offset = real.latitude - self._initial.latitude
        lng_offset = real.longitude - self._initial.longitude

        return real.model_copy(update={
            "latitude": self.mock_lat + lat_offset,
            "longitude": self.mock_lng + lng_offset,
        })
