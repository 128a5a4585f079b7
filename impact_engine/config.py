"""
Runtime settings for the environmental data providers.

Values come from environment variables, optionally seeded from a ``.env``
file in the working directory.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from impact_engine.thresholds import DEFAULT_SEISMIC_RADIUS_KM

USGS_ELEVATION_URL = "https://epqs.nationalmap.gov/v1/json"
OPEN_ELEVATION_URL = "https://api.open-elevation.com/api/v1/lookup"
USGS_SEISMIC_FEED_URL = "https://earthquake.usgs.gov/earthquakes/feed/v1.0/summary/all_day.geojson"

DEFAULT_HTTP_TIMEOUT_S = 10.0

USER_AGENT = "impact-engine/1.0"


@dataclass(frozen=True)
class ResolverSettings:
    usgs_elevation_url: str = USGS_ELEVATION_URL
    open_elevation_url: str = OPEN_ELEVATION_URL
    seismic_feed_url: str = USGS_SEISMIC_FEED_URL
    # Prepended verbatim to proxied request URLs, e.g. "https://proxy.example.com/".
    proxy_prefix: Optional[str] = None
    timeout_s: float = DEFAULT_HTTP_TIMEOUT_S
    seismic_radius_km: float = DEFAULT_SEISMIC_RADIUS_KM


def _float_env(name, default):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


def load_settings() -> ResolverSettings:
    """Build :class:`ResolverSettings` from ``IMPACT_*`` environment variables."""
    load_dotenv()
    return ResolverSettings(
        usgs_elevation_url=os.getenv("IMPACT_USGS_ELEVATION_URL", USGS_ELEVATION_URL),
        open_elevation_url=os.getenv("IMPACT_OPEN_ELEVATION_URL", OPEN_ELEVATION_URL),
        seismic_feed_url=os.getenv("IMPACT_SEISMIC_FEED_URL", USGS_SEISMIC_FEED_URL),
        proxy_prefix=os.getenv("IMPACT_PROXY_PREFIX") or None,
        timeout_s=_float_env("IMPACT_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT_S),
        seismic_radius_km=_float_env("IMPACT_SEISMIC_RADIUS_KM", DEFAULT_SEISMIC_RADIUS_KM),
    )
