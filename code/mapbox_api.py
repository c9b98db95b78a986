import asyncio
import logging
import os
import re
from typing import Any, Dict, Optional, Tuple
from urllib.parse import quote, urlencode

import aiohttp
from dotenv import load_dotenv
from yarl import URL

from WaypointConstraints import (
    ApproachesArg,
    BearingsArg,
    LngLat,
    format_waypoints,
    normalize_approaches,
    normalize_bearings,
)

# Read settings from environment
# Example in .env:
# MAPBOX_ACCESS_TOKEN=pk.xxxx
# MAPBOX_API_URL=https://api.mapbox.com
load_dotenv()
MAPBOX_API_URL = os.getenv("MAPBOX_API_URL", "https://api.mapbox.com")
MAPBOX_TIMEOUT = os.getenv("MAPBOX_TIMEOUT")

GEOCODE_TYPES: Tuple[str, ...] = ("postcode", "address")

log = logging.getLogger("curbroute.mapbox_api")

_access_token: Optional[str] = os.getenv("MAPBOX_ACCESS_TOKEN")


def set_access_token(token: str) -> None:
    global _access_token
    _access_token = token


def get_access_token() -> Optional[str]:
    return _access_token


class MapboxError(Exception):
    pass


class NetworkError(MapboxError):
    """Request never produced a usable JSON body (connection, DNS, timeout, garbage)."""
    pass


class NoResultsFound(MapboxError):
    pass


def _redact(url: str) -> str:
    return re.sub(r"access_token=[^&]+", "access_token=***", url)


def first_coordinates(geocode_result: Dict[str, Any]) -> LngLat:
    features = geocode_result.get("features") if isinstance(geocode_result, dict) else None
    if not features:
        message = geocode_result.get("message") if isinstance(geocode_result, dict) else None
        raise NoResultsFound(message or "Geocoder returned no features")
    lon, lat = features[0]["geometry"]["coordinates"][:2]
    return lon, lat


def first_route(directions_result: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    if not isinstance(directions_result, dict):
        return None
    routes = directions_result.get("routes")
    if not routes:
        return None
    return routes[0]


class MapboxClient:
    """
    Mapbox Geocoding + Directions client

    - builds signed request URLs
    - one GET per call, no retry, no caching
    - returns the JSON body verbatim, including error payloads
    """
    def __init__(self,
                 session: aiohttp.ClientSession,
                 access_token: Optional[str] = None,
                 base_url: Optional[str] = None,
                 profile: str = "driving",
                 timeout: Optional[float] = None):
        self.session = session
        self.access_token = access_token or get_access_token()
        self.base_url = (base_url or MAPBOX_API_URL).rstrip("/")
        self.profile = profile
        if timeout is None and MAPBOX_TIMEOUT:
            timeout = float(MAPBOX_TIMEOUT)
        self.timeout = timeout

        if not self.access_token:
            raise ValueError("Mapbox access token not set. Set MAPBOX_ACCESS_TOKEN in the .env file.")

    # -------------------------
    # url construction
    # -------------------------
    def geocode_url(self, query: str) -> str:
        # same escaping as encodeURIComponent
        path = quote(query, safe="!~*'()")
        params = {
            "access_token": self.access_token,
            "limit": 1,
            "types": ",".join(GEOCODE_TYPES),
        }
        return f"{self.base_url}/geocoding/v5/mapbox.places/{path}.json?{urlencode(params)}"

    def directions_url(self,
                       origin: LngLat,
                       destination: LngLat,
                       bearings: BearingsArg = None,
                       approaches: ApproachesArg = None) -> str:
        waypoints = [origin, destination]
        coords = format_waypoints(waypoints)
        params = {
            "access_token": self.access_token,
            "steps": "true",
            "overview": "full",
            "geometries": "geojson",
            "roundabout_exits": "true",
        }

        # absent and empty are not the same thing to the API
        bearings = normalize_bearings(bearings, len(waypoints))
        if bearings:
            params["bearings"] = bearings
        approaches = normalize_approaches(approaches, len(waypoints))
        if approaches:
            params["approaches"] = approaches

        return f"{self.base_url}/directions/v5/mapbox/{self.profile}/{coords}.json?{urlencode(params)}"

    # -------------------------
    # requests
    # -------------------------
    async def _get_json(self, url: str) -> Dict[str, Any]:
        log.debug("GET %s", _redact(url))
        kwargs = {}
        if self.timeout is not None:
            kwargs["timeout"] = aiohttp.ClientTimeout(total=self.timeout)
        try:
            async with self.session.get(URL(url, encoded=True), **kwargs) as response:
                return await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise NetworkError(f"Request to {_redact(url)} failed: {e!r}") from e
        except ValueError as e:
            raise NetworkError(f"Response from {_redact(url)} is not JSON") from e

    async def geocode(self, query: str) -> Dict[str, Any]:
        return await self._get_json(self.geocode_url(query))

    async def directions(self,
                         origin: LngLat,
                         destination: LngLat,
                         bearings: BearingsArg = None,
                         approaches: ApproachesArg = None) -> Dict[str, Any]:
        return await self._get_json(self.directions_url(origin, destination, bearings, approaches))
