"""Interactive map of GRACE total water storage change.

Pre-rendered tiles are overlaid on a hosted map widget, clicking the map
opens the time series graph of the data cell under the click, and a legend
explains the red-white-blue color scale.
"""
from . import config, colors, legend, page, pixels, probe, tiles
from .colors import RGBColor, get_color
from .config import ConfigError, MapConfig
from .legend import LegendEntry
from .pixels import GeoPoint, pixel_center
from .tiles import TileCoordinate, tile_path


def serve(env=None):
    """Serve the map with the settings of a Dynaconf environment."""
    from . import server
    if env is not None:
        config.change_env(env)
    server.run(MapConfig.from_settings(config.settings))
