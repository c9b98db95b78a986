import asyncio
import logging
import os
import webbrowser
from typing import Callable, Optional

import aiohttp

from MapView import STYLE_LOAD, MapView
from RouteOverlay import render_route
from WaypointConstraints import Approach, Bearing, LngLat
from mapbox_api import (
    MapboxClient,
    MapboxError,
    first_coordinates,
    first_route,
    get_access_token,
)

log = logging.getLogger("curbroute.route_demo")

MAP_STYLE = "mapbox://styles/mapbox/streets-v12"
MAP_CENTER: LngLat = (-122.09855796974067, 37.63314476409785)
MAP_ZOOM = 14

ADDRESS = "26050 Peterman Avenue, Hayward, California 94545, United States"
ORIGIN: LngLat = (-122.101416, 37.624408)  # Portsmouth Avenue

# device faces south-east, accept departures within +-30 degrees of that
HEADING_DEG = 135
TOLERANCE_DEG = 30

# one slot per waypoint: origin gets the bearing, destination is left open
BEARINGS = [Bearing(HEADING_DEG, TOLERANCE_DEG), None]
# destination snapped to the curb, origin left open
APPROACHES = [None, Approach.CURB]

DESTINATION_COLOR = "red"
ORIGIN_COLOR = "green"


async def plan_route(map_view: MapView,
                     client: MapboxClient,
                     alert: Optional[Callable[[str], None]] = None) -> dict:
    """
    geocode ADDRESS -> directions ORIGIN to it -> draw the route -> markers.
    Returns the raw directions response.
    """
    alert = alert or map_view.alert

    geocode = await client.geocode(ADDRESS)
    destination = first_coordinates(geocode)
    log.info("Destination %s -> %s", ADDRESS, destination)

    directions = await client.directions(ORIGIN, destination, BEARINGS, APPROACHES)

    route = first_route(directions)
    if route is not None:
        render_route(map_view, route["geometry"])
    else:
        log.error("Directions API error: %s", directions)
        message = directions.get("message") if isinstance(directions, dict) else None
        alert(message or "No route found")

    map_view.add_marker(destination, color=DESTINATION_COLOR)
    map_view.add_marker(ORIGIN, color=ORIGIN_COLOR)
    return directions


def create_map(access_token: Optional[str] = None) -> MapView:
    return MapView(
        style=MAP_STYLE,
        center=MAP_CENTER,
        zoom=MAP_ZOOM,
        access_token=access_token,
    )


async def run(output: str = "map.html", access_token: Optional[str] = None) -> int:
    access_token = access_token or get_access_token()
    map_view = create_map(access_token)
    status = 0

    async with aiohttp.ClientSession() as session:
        client = MapboxClient(session, access_token=access_token)

        async def on_style_load(m: MapView) -> None:
            nonlocal status
            try:
                await plan_route(m, client)
            except MapboxError as e:
                log.error("Route planning failed: %s", e)
                m.alert(str(e) or "No route found")
                status = 1

        map_view.on(STYLE_LOAD, on_style_load)
        await map_view.load_style()

    map_view.save(output)
    return status


def start(output: str = "map.html", open_browser: bool = True) -> int:
    status = asyncio.run(run(output))
    if open_browser:
        webbrowser.open("file://" + os.path.abspath(output))
    return status
