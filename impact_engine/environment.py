"""
Impact Engine - Environmental Context Resolver

Looks up the elevation, coastal risk flag and recent nearby seismic activity
for an impact coordinate. Elevation comes from an ordered chain of providers;
the first provider that answers with a usable value wins and every failure
simply advances the chain. When all providers fail the resolver degrades to
sea level (0 m) so the impact calculation can always proceed.

Provider failures are represented by ``ProviderError`` and never leave this
module.
"""

import asyncio
import contextlib
import logging
import math
from datetime import datetime, timezone

import httpx

from impact_engine.config import USER_AGENT, load_settings
from impact_engine.models import EnvironmentalContext, SeismicEvent
from impact_engine.thresholds import COASTAL_ELEVATION_THRESHOLD_M, ELEVATION_NODATA_LIMIT_M
from impact_engine.utils import haversine_km

logger = logging.getLogger(__name__)


class ProviderError(Exception):
    """A data provider could not deliver a usable answer."""

    def __init__(self, provider, reason):
        super().__init__(f"{provider}: {reason}")
        self.provider = provider
        self.reason = reason


def is_coastal_risk(elevation_m):
    """Low-lying sites (below 100 m) are treated as exposed to tsunamis."""
    return elevation_m < COASTAL_ELEVATION_THRESHOLD_M


def build_url(url, params=None, proxy_prefix=None):
    """Full request URL, prefixed with the reverse proxy when one is given."""
    full_url = str(httpx.URL(url, params=params)) if params else url
    return f"{proxy_prefix}{full_url}" if proxy_prefix else full_url


async def fetch_json(client, provider, url, timeout=None):
    """
    GET ``url`` and decode its JSON body.

    Raises:
        ProviderError: On transport errors, timeouts, non-2xx statuses or a
            body that is not valid JSON.
    """
    try:
        response = await client.get(url, timeout=timeout)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise ProviderError(provider, f"request failed ({e.__class__.__name__}: {e})")
    if not response.is_success:
        raise ProviderError(provider, f"HTTP {response.status_code}")
    try:
        return response.json()
    except ValueError:
        raise ProviderError(provider, "response is not valid JSON")


def _as_elevation(provider, value):
    if isinstance(value, bool):
        raise ProviderError(provider, f"unusable elevation {value!r}")
    try:
        elevation = float(value)
    except (TypeError, ValueError):
        raise ProviderError(provider, f"unusable elevation {value!r}")
    if not math.isfinite(elevation) or elevation <= ELEVATION_NODATA_LIMIT_M:
        raise ProviderError(provider, f"no elevation data ({elevation})")
    return elevation


class ElevationProvider:
    """A point elevation source queried by coordinate."""

    name = "elevation"

    def __init__(self, url, proxy_prefix=None):
        self.url = url
        self.proxy_prefix = proxy_prefix

    @property
    def label(self):
        return f"{self.name} (proxied)" if self.proxy_prefix else self.name

    def request_url(self, lat, lon):
        raise NotImplementedError

    def parse_elevation(self, payload):
        raise NotImplementedError

    async def fetch_elevation(self, client, lat, lon, timeout=None):
        """Elevation in meters at ``lat``/``lon``; raises ``ProviderError`` on failure."""
        payload = await fetch_json(client, self.label, self.request_url(lat, lon), timeout=timeout)
        return self.parse_elevation(payload)


class USGSElevationProvider(ElevationProvider):
    """USGS Elevation Point Query Service."""

    name = "USGS EPQS"

    def request_url(self, lat, lon):
        params = {"x": lon, "y": lat, "units": "Meters", "output": "json"}
        return build_url(self.url, params, self.proxy_prefix)

    def parse_elevation(self, payload):
        if not isinstance(payload, dict):
            raise ProviderError(self.label, "unexpected payload")
        if payload.get("value") is not None:
            return _as_elevation(self.label, payload["value"])
        if payload.get("Elevation") is not None:
            return _as_elevation(self.label, payload["Elevation"])
        # Legacy pqs.php response shape
        try:
            legacy = payload["USGS_Elevation_Point_Query_Service"]["Elevation_Query"]["Elevation"]
        except (KeyError, TypeError):
            raise ProviderError(self.label, "elevation missing from response")
        return _as_elevation(self.label, legacy)


class OpenElevationProvider(ElevationProvider):
    """Open-Elevation lookup API."""

    name = "Open-Elevation"

    def request_url(self, lat, lon):
        return build_url(self.url, {"locations": f"{lat},{lon}"}, self.proxy_prefix)

    def parse_elevation(self, payload):
        try:
            elevation = payload["results"][0]["elevation"]
        except (KeyError, IndexError, TypeError):
            raise ProviderError(self.label, "elevation missing from response")
        if isinstance(elevation, bool) or not isinstance(elevation, (int, float)):
            raise ProviderError(self.label, f"non-numeric elevation {elevation!r}")
        return _as_elevation(self.label, elevation)


def build_elevation_chain(settings):
    """
    Ordered elevation providers for ``settings``.

    1. USGS EPQS (through the proxy when one is configured)
    2. Open-Elevation, direct
    3. Open-Elevation through the proxy, only when a proxy is configured
    """
    chain = [
        USGSElevationProvider(settings.usgs_elevation_url, settings.proxy_prefix),
        OpenElevationProvider(settings.open_elevation_url),
    ]
    if settings.proxy_prefix:
        chain.append(OpenElevationProvider(settings.open_elevation_url, settings.proxy_prefix))
    return chain


def _event_time(epoch_ms):
    if epoch_ms is None:
        return None
    return datetime.fromtimestamp(epoch_ms / 1000.0, tz=timezone.utc)


def parse_seismic_feed(payload, lat, lon, radius_km):
    """
    Events of a GeoJSON seismic feed lying within ``radius_km`` of ``lat``/``lon``.

    Features with a missing or malformed geometry or properties are skipped. The feed order
    (most recent first for the USGS summaries) is preserved.

    Raises:
        ProviderError: If the payload has no ``features`` list.
    """
    features = payload.get("features") if isinstance(payload, dict) else None
    if not isinstance(features, list):
        raise ProviderError("USGS seismic feed", "features missing from response")

    events = []
    for feature in features:
        try:
            coordinates = feature["geometry"]["coordinates"]
            q_lon, q_lat = float(coordinates[0]), float(coordinates[1])
            depth = float(coordinates[2]) if len(coordinates) > 2 and coordinates[2] is not None else None
            properties = feature.get("properties") or {}
            if not isinstance(properties, dict):
                raise TypeError(f"properties is a {type(properties).__name__}")
            magnitude = properties.get("mag")
            magnitude = float(magnitude) if magnitude is not None else None
            event_time = _event_time(properties.get("time"))
        except (AttributeError, KeyError, IndexError, TypeError, ValueError, OverflowError, OSError):
            logger.debug(f"Skipping malformed seismic feature: {feature!r}")
            continue

        distance = haversine_km(lat, lon, q_lat, q_lon)
        if distance <= radius_km:
            events.append(SeismicEvent(
                magnitude=magnitude,
                latitude=q_lat,
                longitude=q_lon,
                distance_km=distance,
                depth_km=depth,
                place=properties.get("place"),
                time=event_time,
            ))
    return tuple(events)


class EnvironmentResolver:
    """
    Resolves the :class:`EnvironmentalContext` of an impact coordinate.

    Args:
        settings (ResolverSettings, optional): Provider URLs, proxy prefix and
            timeout. Read from the environment when omitted.
        client (httpx.AsyncClient, optional): Shared client. When omitted a
            client is opened and closed around every lookup.
        providers (list, optional): Elevation provider chain overriding the one
            derived from ``settings``.
    """

    def __init__(self, settings=None, client=None, providers=None):
        self.settings = settings or load_settings()
        self._client = client
        self.providers = list(providers) if providers is not None else build_elevation_chain(self.settings)

    @contextlib.asynccontextmanager
    async def _session(self):
        if self._client is not None:
            yield self._client
            return
        async with httpx.AsyncClient(
            timeout=self.settings.timeout_s,
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
        ) as client:
            yield client

    async def _elevation(self, client, lat, lon):
        for provider in self.providers:
            try:
                elevation = await provider.fetch_elevation(client, lat, lon, timeout=self.settings.timeout_s)
            except ProviderError as e:
                logger.warning(f"Elevation provider failed, trying next: {e}")
                continue
            logger.info(f"Elevation {elevation:.1f} m at ({lat:.4f}, {lon:.4f}) from {provider.label}")
            return elevation
        logger.warning(f"All elevation providers failed for ({lat:.4f}, {lon:.4f}); assuming sea level (0 m).")
        return 0.0

    async def _seismic(self, client, lat, lon, radius_km):
        url = build_url(self.settings.seismic_feed_url, proxy_prefix=self.settings.proxy_prefix)
        try:
            payload = await fetch_json(client, "USGS seismic feed", url, timeout=self.settings.timeout_s)
            return parse_seismic_feed(payload, lat, lon, radius_km)
        except ProviderError as e:
            logger.warning(f"Seismic activity lookup failed, using no events: {e}")
            return ()
        except (AttributeError, TypeError, ValueError) as e:
            logger.warning(f"Seismic feed could not be parsed, using no events: {e.__class__.__name__}: {e}")
            return ()

    async def get_elevation(self, lat, lon):
        """Elevation in meters; 0.0 when every provider fails."""
        async with self._session() as client:
            return await self._elevation(client, lat, lon)

    async def check_coastal_risk(self, lat, lon):
        """Coastal / tsunami risk flag from a fresh elevation lookup."""
        return is_coastal_risk(await self.get_elevation(lat, lon))

    async def get_seismic_activity(self, lat, lon, radius_km=None):
        """Recent seismic events within ``radius_km`` (default from settings)."""
        radius = self.settings.seismic_radius_km if radius_km is None else radius_km
        async with self._session() as client:
            return await self._seismic(client, lat, lon, radius)

    async def resolve(self, lat, lon, radius_km=None):
        """
        Full environmental context for ``lat``/``lon``.

        The elevation and seismic lookups run concurrently; the coastal flag
        is derived from the resolved elevation.
        """
        radius = self.settings.seismic_radius_km if radius_km is None else radius_km
        async with self._session() as client:
            elevation, events = await asyncio.gather(
                self._elevation(client, lat, lon),
                self._seismic(client, lat, lon, radius),
            )
        return EnvironmentalContext(
            elevation_m=elevation,
            is_coastal_risk=is_coastal_risk(elevation),
            recent_seismic_events=events,
        )
