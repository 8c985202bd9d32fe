"""Configuration management for the groundwater map.

Settings are loaded with Dynaconf from multiple locations in order of
increasing priority:

1. Global settings (/etc/gracemap/)
2. User settings (~/.config/gracemap/)
3. Current directory settings (./)
4. Environment variable specified file (GRACEMAP_SETTINGS_FILE_FOR_DYNACONF)

The values the map page, the server and the graph probe need are collected
once into a :class:`MapConfig` and passed to them explicitly.

Attributes
----------
USER_DIR : pathlib.Path
    Path to user configuration directory.
GLOB_DIR : pathlib.Path
    Path to global configuration directory.
CURR_DIR : pathlib.Path
    Path to current working directory.
DEFAULTS : dict
    Fallback values for every key a MapConfig reads.
settings : Dynaconf
    The Dynaconf settings object with loaded configuration.
"""
import os
import pathlib
from dataclasses import dataclass
from typing import Tuple

from dynaconf import Dynaconf

USER_DIR = pathlib.Path("~/.config/gracemap").expanduser()
GLOB_DIR = pathlib.Path("/etc/gracemap/")
CURR_DIR = pathlib.Path("./").absolute()
settings_files = [
    GLOB_DIR / "settings.toml",
    GLOB_DIR / ".secrets.toml",
    USER_DIR / "settings.toml",
    USER_DIR / ".secrets.toml",
    CURR_DIR / "settings.toml",
    CURR_DIR / ".secrets.toml"
    ]
extra_file = os.getenv("GRACEMAP_SETTINGS_FILE_FOR_DYNACONF")
if extra_file:
    settings_files.append(pathlib.Path(extra_file).absolute())

DEFAULTS = {
    "title": "Groundwater Changes 2002-2015",
    "tile_dir": "../../map_tiles/grace_2002-2015",
    "graph_url": "../../graphs/grace_2002-2015",
    "legend_file": "./legend.txt",
    "legend_unit": "cm/month",
    "legend_slots": 25,
    "max_value": 2.0,
    "default_zoom": 2,
    "default_center": [42.0, 0.0],
    "min_zoom": 2,
    "max_zoom": 6,
    "map_type": "hybrid",
    "google_maps_key": "",
    "host": "127.0.0.1",
    "port": 8080,
}

settings = Dynaconf(
    merge_enabled = True,
    envvar_prefix="GRACEMAP",
    DEBUG_LEVEL_FOR_DYNACONF='DEBUG',
    settings_files=settings_files,
    environments=True,
    load_dotenv=True,
)


class ConfigError(Exception):
    """Raised when the settings cannot form a usable map configuration."""


def change_env(new_env):
    """Change the active Dynaconf environment.

    Parameters
    ----------
    new_env : str
        The environment name to switch to (e.g., 'development', 'production').
    """
    settings.setenv(new_env)
    settings.reload()


@dataclass(frozen=True)
class MapConfig:
    """Everything the page, the server and the graph probe read.

    Attributes
    ----------
    title : str
        Page title.
    tile_dir : str
        Directory holding the pre-rendered ``{z}/{x}/{y}.png`` tiles.
    graph_url : str
        Directory or ``http(s)`` base URL holding the per-pixel graphs.
    legend_file : str
        Two-column ``label,color`` legend file.
    legend_unit : str
        Unit printed under the legend heading.
    legend_slots : int
        Number of rows of a generated legend.
    max_value : float
        Magnitude at which the color scale saturates.
    default_zoom : int
        Zoom used at start and by the re-center control.
    default_center : tuple of float
        ``(lat, lng)`` used at start and by the re-center control.
    min_zoom, max_zoom : int
        Zoom range the map widget allows.
    map_type : str
        Map widget base layer.
    google_maps_key : str
        API key handed to the map widget loader.
    host : str
        Interface the server binds.
    port : int
        Port the server binds.
    """

    title: str = DEFAULTS["title"]
    tile_dir: str = DEFAULTS["tile_dir"]
    graph_url: str = DEFAULTS["graph_url"]
    legend_file: str = DEFAULTS["legend_file"]
    legend_unit: str = DEFAULTS["legend_unit"]
    legend_slots: int = DEFAULTS["legend_slots"]
    max_value: float = DEFAULTS["max_value"]
    default_zoom: int = DEFAULTS["default_zoom"]
    default_center: Tuple[float, float] = tuple(DEFAULTS["default_center"])
    min_zoom: int = DEFAULTS["min_zoom"]
    max_zoom: int = DEFAULTS["max_zoom"]
    map_type: str = DEFAULTS["map_type"]
    google_maps_key: str = DEFAULTS["google_maps_key"]
    host: str = DEFAULTS["host"]
    port: int = DEFAULTS["port"]

    @property
    def graph_is_remote(self) -> bool:
        """True when graphs are fetched over HTTP rather than read from disk."""
        return self.graph_url.startswith(("http://", "https://"))

    @classmethod
    def from_settings(cls, source=None):
        """Build a MapConfig from a Dynaconf (or any mapping) settings object.

        Parameters
        ----------
        source : Dynaconf or dict, optional
            Settings to read. Uses the module level ``settings`` if None.

        Returns
        -------
        MapConfig

        Raises
        ------
        ConfigError
            If a value has the wrong shape or ``max_value`` is not positive.
        """
        source = settings if source is None else source
        values = {key: source.get(key, default) for key, default in DEFAULTS.items()}
        try:
            center = tuple(float(c) for c in values["default_center"])
            if len(center) != 2:
                raise ValueError("default_center needs exactly two values")
            config = cls(
                title=str(values["title"]),
                tile_dir=str(values["tile_dir"]),
                graph_url=str(values["graph_url"]).rstrip("/"),
                legend_file=str(values["legend_file"]),
                legend_unit=str(values["legend_unit"]),
                legend_slots=int(values["legend_slots"]),
                max_value=float(values["max_value"]),
                default_zoom=int(values["default_zoom"]),
                default_center=center,
                min_zoom=int(values["min_zoom"]),
                max_zoom=int(values["max_zoom"]),
                map_type=str(values["map_type"]),
                google_maps_key=str(values["google_maps_key"]),
                host=str(values["host"]),
                port=int(values["port"]),
            )
        except (TypeError, ValueError) as err:
            raise ConfigError(f"Invalid map settings: {err}") from err
        if config.max_value <= 0:
            raise ConfigError(f"max_value must be positive, got {config.max_value}")
        if config.legend_slots < 2:
            raise ConfigError(f"legend_slots must be at least 2, got {config.legend_slots}")
        if not config.min_zoom <= config.default_zoom <= config.max_zoom:
            raise ConfigError("default_zoom must lie between min_zoom and max_zoom")
        return config
