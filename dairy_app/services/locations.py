from __future__ import annotations

from typing import Optional, Tuple

MAPS_BASE_URL = "https://maps.apple.com/"


def parse_location(value: Optional[str]) -> Optional[Tuple[float, float]]:
    """Parse a ``"latitude,longitude"`` string; None when it is not a valid coordinate pair."""
    if not value:
        return None
    parts = [part.strip() for part in value.split(",")]
    if len(parts) != 2:
        return None
    try:
        latitude, longitude = float(parts[0]), float(parts[1])
    except ValueError:
        return None
    if not (-90 <= latitude <= 90 and -180 <= longitude <= 180):
        return None
    return latitude, longitude


def format_location(latitude: float, longitude: float) -> str:
    return f"{latitude},{longitude}"


def maps_url(value: Optional[str]) -> Optional[str]:
    coords = parse_location(value)
    if coords is None:
        return None
    return f"{MAPS_BASE_URL}?q={format_location(*coords)}"
