from typing import Any, Dict

from MapView import LineLayer, MapView

ROUTE_SOURCE_ID = "route-source"
ROUTE_LINE_LAYER = "route-line-layer"
ROUTE_CASING_LAYER = "route-casing-layer"

ROUND_LAYOUT = {"line-join": "round", "line-cap": "round"}
CASING_PAINT = {"line-color": "#2d5f99", "line-width": 8}
LINE_PAINT = {"line-color": "#4882c5", "line-width": 5}


def route_feature_collection(geometry: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "type": "FeatureCollection",
        "features": [{"type": "Feature", "properties": {}, "geometry": geometry}],
    }


def render_route(map_view: MapView, geometry: Dict[str, Any]) -> None:
    """
    Adds or updates the route line on the map.
    geometry: GeoJSON LineString as returned by the Directions API

    The source is created once and its data swapped on later calls;
    layers are only ever added, never restyled.
    """
    data = route_feature_collection(geometry)

    source = map_view.get_source(ROUTE_SOURCE_ID)
    if source is not None:
        source.set_data(data)
    else:
        map_view.add_source(ROUTE_SOURCE_ID, data)

    # casing first so the thinner line sits on top
    if map_view.get_layer(ROUTE_CASING_LAYER) is None:
        map_view.add_layer(LineLayer(
            id=ROUTE_CASING_LAYER,
            source=ROUTE_SOURCE_ID,
            layout=dict(ROUND_LAYOUT),
            paint=dict(CASING_PAINT),
        ))

    if map_view.get_layer(ROUTE_LINE_LAYER) is None:
        map_view.add_layer(LineLayer(
            id=ROUTE_LINE_LAYER,
            source=ROUTE_SOURCE_ID,
            layout=dict(ROUND_LAYOUT),
            paint=dict(LINE_PAINT),
        ))
