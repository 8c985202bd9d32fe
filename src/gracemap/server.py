"""aiohttp application serving the groundwater map.

Routes
------
``GET /``
    The map page.
``GET /tiles/{z}/{x}/{y}.png``
    Overlay tiles. Columns wrap around the world, rows outside the world
    and missing files are 404.
``GET /legend``
    Legend rows as JSON.
``GET /graph?lat=..&lng=..``
    Whether a graph exists for the data cell under a point.
``GET /graphs/...``
    Graph images, when they live in a local directory.
"""
import logging
import math
import pathlib

import aiohttp
from aiohttp import web

from .config import MapConfig
from .legend import load_legend
from .page import GRAPH_ROUTE, TILE_ROUTE, render_page
from .pixels import GeoPoint
from .probe import ProbeState, probe_graph
from .tiles import TileCoordinate, tile_path

logger = logging.getLogger(__name__)

GRAPH_STATIC_ROUTE = "/graphs"

CONFIG_KEY = web.AppKey("config", MapConfig)
LEGEND_KEY = web.AppKey("legend", list)
SESSION_KEY = web.AppKey("session", aiohttp.ClientSession)


async def index(request):
    config = request.app[CONFIG_KEY]
    html = render_page(config, request.app[LEGEND_KEY])
    return web.Response(text=html, content_type="text/html")


async def tile(request):
    config = request.app[CONFIG_KEY]
    coord = TileCoordinate(int(request.match_info["x"]),
                           int(request.match_info["y"]),
                           int(request.match_info["z"]))
    if coord.z > config.max_zoom:
        raise web.HTTPNotFound()
    path = tile_path(coord, config.tile_dir)
    if path is None or not pathlib.Path(path).is_file():
        raise web.HTTPNotFound()
    return web.FileResponse(path)


async def legend(request):
    config = request.app[CONFIG_KEY]
    return web.json_response({
        "units": config.legend_unit,
        "entries": [entry._asdict() for entry in request.app[LEGEND_KEY]],
    })


def _parse_point(query):
    try:
        point = GeoPoint(float(query["lat"]), float(query["lng"]))
    except (KeyError, ValueError) as err:
        raise web.HTTPBadRequest(
            text=f"lat and lng must be numbers: {err}") from err
    if not (math.isfinite(point.lat) and math.isfinite(point.lng)):
        raise web.HTTPBadRequest(text="lat and lng must be finite")
    return point


async def graph(request):
    config = request.app[CONFIG_KEY]
    point = _parse_point(request.query)
    public_base = None if config.graph_is_remote else GRAPH_STATIC_ROUTE
    result = await probe_graph(point, config.graph_url, public_base=public_base,
                               session=request.app.get(SESSION_KEY))
    status = 502 if result.state is ProbeState.REJECTED else 200
    return web.json_response(result.as_dict(), status=status)


async def _client_session(app):
    app[SESSION_KEY] = aiohttp.ClientSession()
    yield
    await app[SESSION_KEY].close()


def create_app(map_config: MapConfig, legend_entries=None) -> web.Application:
    """Build the web application for a map.

    Parameters
    ----------
    map_config : MapConfig
        Map settings.
    legend_entries : list of LegendEntry, optional
        Legend rows. Loaded with :func:`gracemap.legend.load_legend` if None.

    Returns
    -------
    aiohttp.web.Application
    """
    app = web.Application()
    app[CONFIG_KEY] = map_config
    app[LEGEND_KEY] = list(load_legend(map_config) if legend_entries is None
                           else legend_entries)

    app.router.add_get("/", index)
    app.router.add_get(TILE_ROUTE + r"/{z:\d+}/{x:-?\d+}/{y:-?\d+}.png", tile)
    app.router.add_get("/legend", legend)
    app.router.add_get(GRAPH_ROUTE, graph)

    if map_config.graph_is_remote:
        app.cleanup_ctx.append(_client_session)
    elif pathlib.Path(map_config.graph_url).is_dir():
        app.router.add_static(GRAPH_STATIC_ROUTE, map_config.graph_url)
    else:
        logger.warning("Graph directory %s does not exist, no popups will open",
                       map_config.graph_url)
    return app


def run(map_config: MapConfig):
    """Serve the map until interrupted."""
    logging.basicConfig(level=logging.INFO)
    print(f"Serving {map_config.title} on http://{map_config.host}:{map_config.port}/")
    web.run_app(create_app(map_config), host=map_config.host, port=map_config.port,
                print=None)
