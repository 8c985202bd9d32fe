"""The map page.

The page overlays the TWS change tiles on a Google Maps widget, adds a
re-center button and the legend, and opens an info window with the
time series graph of the clicked data cell when the server has one.
Graph lookups are asynchronous; a new click aborts the lookup of the
previous one.
"""
from jinja2 import Template

from .legend import render_legend

TILE_ROUTE = "/tiles"
GRAPH_ROUTE = "/graph"

PAGE_TEMPLATE = Template("""<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{{ title | e }}</title>
<style>
  html, body, #map { height: 100%; margin: 0; padding: 0; }
  #legend { font-family: Arial, sans-serif; background: #fff; padding: 10px; margin: 10px; border: 3px solid #000; }
</style>
</head>
<body>
<div id="map"></div>
<div id="legend">{{ legend }}</div>
<script>
var config = {{ options | tojson }};

function createInfoWindowContent(center, imageUrl) {
    return [
        'Total Water Storage for (' + center.lat + ', ' + center.lng + ')',
        '<img style="height:330px;width:420px" src="' + imageUrl + '"></img>'
    ].join('<br>');
}

function CenterControl(controlDiv, map) {
    var controlUI = document.createElement('div');
    controlUI.style.backgroundColor = '#fff';
    controlUI.style.border = '2px solid #fff';
    controlUI.style.borderRadius = '3px';
    controlUI.style.boxShadow = '0 2px 6px rgba(0,0,0,.3)';
    controlUI.style.cursor = 'pointer';
    controlUI.style.marginBottom = '22px';
    controlUI.style.marginLeft = '10px';
    controlUI.style.textAlign = 'center';
    controlUI.title = 'Click to recenter the map';
    controlDiv.appendChild(controlUI);

    var controlText = document.createElement('div');
    controlText.style.color = 'rgb(25,25,25)';
    controlText.style.fontFamily = 'Roboto,Arial,sans-serif';
    controlText.style.fontSize = '12px';
    controlText.style.lineHeight = '20px';
    controlText.style.paddingLeft = '5px';
    controlText.style.paddingRight = '5px';
    controlText.innerHTML = 'Re-center Map';
    controlUI.appendChild(controlText);

    controlUI.addEventListener('click', function() {
        map.setCenter(config.center);
        map.setZoom(config.zoom);
    });
}

function initMap() {
    var map = new google.maps.Map(document.getElementById('map'), {
        zoom: config.zoom,
        center: config.center,
        maxZoom: config.maxZoom,
        minZoom: config.minZoom,
        mapTypeId: config.mapType
    });

    var customTiles = new google.maps.ImageMapType({
        getTileUrl: function(coord, zoom) {
            var maxTile = Math.pow(2, zoom);
            if (coord.y < 0 || coord.y > (maxTile - 1)) {
                return null;
            }
            var x = ((coord.x % maxTile) + maxTile) % maxTile;
            return [config.tileRoute, zoom, x, coord.y + '.png'].join('/');
        },
        tileSize: new google.maps.Size(256, 256),
        isPng: true
    });

    var centerControlDiv = document.createElement('div');
    new CenterControl(centerControlDiv, map);
    centerControlDiv.index = 1;
    map.controls[google.maps.ControlPosition.LEFT_TOP].push(centerControlDiv);
    map.controls[google.maps.ControlPosition.LEFT_BOTTOM].push(document.getElementById('legend'));

    var coordInfoWindow = new google.maps.InfoWindow();
    var inFlight = null;
    map.addListener('click', function(e) {
        if (inFlight !== null) {
            inFlight.abort();
        }
        var controller = new AbortController();
        inFlight = controller;
        var query = '?lat=' + e.latLng.lat() + '&lng=' + e.latLng.lng();
        fetch(config.graphRoute + query, {signal: controller.signal})
            .then(function(response) { return response.json(); })
            .then(function(probe) {
                if (probe.found) {
                    var center = {lat: probe.lat, lng: probe.lng};
                    coordInfoWindow.setContent(createInfoWindowContent(center, probe.url));
                    coordInfoWindow.setPosition(center);
                    coordInfoWindow.open(map);
                } else {
                    coordInfoWindow.close();
                }
            })
            .catch(function(err) {
                if (err.name !== 'AbortError') {
                    coordInfoWindow.close();
                }
            })
            .finally(function() {
                if (inFlight === controller) {
                    inFlight = null;
                }
            });
    });

    map.overlayMapTypes.insertAt(0, customTiles);
}
</script>
<script async defer src="https://maps.googleapis.com/maps/api/js?key={{ api_key | urlencode }}&callback=initMap"></script>
</body>
</html>
""")


def page_options(map_config):
    """Map widget options derived from a MapConfig."""
    lat, lng = map_config.default_center
    return {
        "zoom": map_config.default_zoom,
        "center": {"lat": lat, "lng": lng},
        "minZoom": map_config.min_zoom,
        "maxZoom": map_config.max_zoom,
        "mapType": map_config.map_type,
        "tileRoute": TILE_ROUTE,
        "graphRoute": GRAPH_ROUTE,
    }


def render_page(map_config, legend_entries):
    """Render the map page.

    Parameters
    ----------
    map_config : gracemap.config.MapConfig
        Map settings.
    legend_entries : sequence of gracemap.legend.LegendEntry
        Rows of the legend box, top row first.

    Returns
    -------
    str
        The page HTML.
    """
    return PAGE_TEMPLATE.render(
        title=map_config.title,
        legend=render_legend(legend_entries, map_config.legend_unit),
        options=page_options(map_config),
        api_key=map_config.google_maps_key,
    )
