import asyncio

import folium
import pytest

from MapView import STYLE_LOAD, LineLayer, MapView, style_tiles_url
from RouteOverlay import render_route

LINE = {"type": "LineString", "coordinates": [[-122.101416, 37.624408], [-122.0986, 37.6331]]}


def _map(token=None):
    return MapView(style="mapbox://styles/mapbox/streets-v12",
                   center=(-122.09855796974067, 37.63314476409785),
                   zoom=14,
                   access_token=token)


def test_style_load_runs_sync_and_async_handlers():
    m = _map()
    seen = []

    def sync_handler(view):
        seen.append(("sync", view.style_loaded))

    async def async_handler(view):
        seen.append(("async", view.style_loaded))

    m.on(STYLE_LOAD, sync_handler)
    m.on(STYLE_LOAD, async_handler)
    asyncio.run(m.load_style())

    assert seen == [("sync", True), ("async", True)]


def test_duplicate_source_and_layer_rejected():
    m = _map()
    asyncio.run(m.load_style())
    m.add_source("s", {"type": "FeatureCollection", "features": []})
    with pytest.raises(ValueError):
        m.add_source("s", {"type": "FeatureCollection", "features": []})

    m.add_layer(LineLayer(id="l", source="s"))
    with pytest.raises(ValueError):
        m.add_layer(LineLayer(id="l", source="s"))
    with pytest.raises(ValueError):
        m.add_layer(LineLayer(id="other", source="missing"))


def test_style_tiles_url():
    url = style_tiles_url("mapbox://styles/mapbox/streets-v12", "pk.abc")
    assert url == "https://api.mapbox.com/styles/v1/mapbox/streets-v12/tiles/256/{z}/{x}/{y}@2x?access_token=pk.abc"


def test_to_folium_draws_layers_markers_and_alerts():
    m = _map(token="pk.abc")
    asyncio.run(m.load_style())
    render_route(m, LINE)
    m.add_marker((-122.0986, 37.6331), color="red")
    m.alert("No route found")

    fmap = m.to_folium()
    assert isinstance(fmap, folium.Map)
    assert fmap.location == [37.63314476409785, -122.09855796974067]

    geojson = [c for c in fmap._children.values() if isinstance(c, folium.GeoJson)]
    markers = [c for c in fmap._children.values() if isinstance(c, folium.Marker)]
    assert [g.layer_name for g in geojson] == ["route-casing-layer", "route-line-layer"]
    assert markers[0].location == [37.6331, -122.0986]

    html = fmap.get_root().render()
    assert 'alert("No route found");' in html
    assert "streets-v12" in html


def test_save_writes_html(tmp_path):
    m = _map()
    out = m.save(str(tmp_path / "map.html"))
    assert (tmp_path / "map.html").exists()
    assert out.endswith("map.html")
