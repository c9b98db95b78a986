from __future__ import annotations

import inspect
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

import folium

from WaypointConstraints import LngLat

log = logging.getLogger("curbroute.map_view")

STYLE_LOAD = "style.load"

Handler = Callable[["MapView"], Union[None, Awaitable[None]]]


class StyleNotLoadedError(RuntimeError):
    pass


@dataclass
class GeoJSONSource:
    id: str
    data: Dict[str, Any]

    def set_data(self, data: Dict[str, Any]) -> None:
        self.data = data


@dataclass
class LineLayer:
    id: str
    source: str
    layout: Dict[str, Any] = field(default_factory=dict)
    paint: Dict[str, Any] = field(default_factory=dict)
    type: str = "line"


@dataclass
class Marker:
    lnglat: LngLat
    color: str


def style_tiles_url(style: str, access_token: str) -> str:
    """mapbox://styles/{user}/{id} -> raster tile template Leaflet can load"""
    path = style.replace("mapbox://styles/", "", 1)
    return (
        f"https://api.mapbox.com/styles/v1/{path}/tiles/256/{{z}}/{{x}}/{{y}}@2x"
        f"?access_token={access_token}"
    )


class MapView:
    """
    Map handle with the imperative source/layer API the route overlay needs.
    Sources and layers live in memory and are drawn through folium on save().
    Nothing can be added before the style has loaded.
    """
    def __init__(self,
                 style: str,
                 center: LngLat,
                 zoom: float,
                 access_token: Optional[str] = None):
        self.style = style
        self.center = center
        self.zoom = zoom
        self.access_token = access_token
        self.style_loaded = False
        self.sources: Dict[str, GeoJSONSource] = {}
        self.layers: List[LineLayer] = []
        self.markers: List[Marker] = []
        self.alerts: List[str] = []
        self._handlers: Dict[str, List[Handler]] = {}

    # -------------------------
    # events
    # -------------------------
    def on(self, event: str, handler: Handler) -> None:
        self._handlers.setdefault(event, []).append(handler)

    async def load_style(self) -> None:
        self.style_loaded = True
        for handler in self._handlers.get(STYLE_LOAD, []):
            result = handler(self)
            if inspect.isawaitable(result):
                await result

    def _require_style(self) -> None:
        if not self.style_loaded:
            raise StyleNotLoadedError("Style is not done loading")

    # -------------------------
    # sources / layers
    # -------------------------
    def get_source(self, source_id: str) -> Optional[GeoJSONSource]:
        return self.sources.get(source_id)

    def add_source(self, source_id: str, data: Dict[str, Any]) -> GeoJSONSource:
        self._require_style()
        if source_id in self.sources:
            raise ValueError(f"There is already a source with ID {source_id!r}")
        src = GeoJSONSource(id=source_id, data=data)
        self.sources[source_id] = src
        return src

    def get_layer(self, layer_id: str) -> Optional[LineLayer]:
        for layer in self.layers:
            if layer.id == layer_id:
                return layer
        return None

    def add_layer(self, layer: LineLayer) -> None:
        self._require_style()
        if self.get_layer(layer.id) is not None:
            raise ValueError(f"Layer with id {layer.id!r} already exists on this map")
        if layer.source not in self.sources:
            raise ValueError(f"Source {layer.source!r} not found")
        self.layers.append(layer)

    def add_marker(self, lnglat: LngLat, color: str) -> Marker:
        marker = Marker(lnglat=lnglat, color=color)
        self.markers.append(marker)
        return marker

    def alert(self, message: str) -> None:
        log.warning(message)
        self.alerts.append(message)

    # -------------------------
    # folium output
    # -------------------------
    def to_folium(self) -> folium.Map:
        lon, lat = self.center
        if self.access_token:
            m = folium.Map(location=(lat, lon), zoom_start=self.zoom, tiles=None)
            folium.TileLayer(
                tiles=style_tiles_url(self.style, self.access_token),
                attr="© Mapbox © OpenStreetMap",
                name=self.style,
            ).add_to(m)
        else:
            m = folium.Map(location=(lat, lon), zoom_start=self.zoom)

        # draw order = layer order, first added ends up at the bottom
        for layer in self.layers:
            paint = layer.paint
            layout = layer.layout
            style = {
                "color": paint.get("line-color", "#000000"),
                "weight": paint.get("line-width", 1),
                "opacity": paint.get("line-opacity", 1.0),
                "lineJoin": layout.get("line-join", "miter"),
                "lineCap": layout.get("line-cap", "butt"),
            }
            folium.GeoJson(
                self.sources[layer.source].data,
                name=layer.id,
                style_function=lambda feature, style=style: style,
            ).add_to(m)

        for marker in self.markers:
            mlon, mlat = marker.lnglat
            folium.Marker((mlat, mlon), icon=folium.Icon(color=marker.color)).add_to(m)

        for message in self.alerts:
            m.get_root().script.add_child(folium.Element(f"alert({json.dumps(message)});"))

        return m

    def save(self, path: str = "map.html") -> str:
        self.to_folium().save(path)
        log.info("Map written to %s", path)
        return path
