import logging
from typing import Callable, Optional

from .errors import LocationUnavailableError

LOGGER = logging.getLogger(__name__)

LocationProvider = Callable[[], tuple[float, float]]


def format_coordinates(latitude: float, longitude: float) -> str:
    return f"{latitude:.6f}, {longitude:.6f}"


def resolve_location(provider: Optional[LocationProvider], fallback: str) -> str:
    """Ask the provider once for a (lat, lon) pair, else return ``fallback``."""
    if provider is None:
        return fallback
    try:
        latitude, longitude = provider()
    except (LocationUnavailableError, OSError, TimeoutError) as e:
        LOGGER.warning("Location lookup failed (%s), using %r", e, fallback)
        return fallback
    return format_coordinates(latitude, longitude)
