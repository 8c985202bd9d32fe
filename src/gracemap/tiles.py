"""Tile addressing for the pre-rendered TWS change overlay.

Tiles follow the slippy map convention ``{z}/{x}/{y}.png``. The world
repeats horizontally at every zoom level, so any integer column is wrapped
back onto ``[0, 2**z - 1]``; rows outside that range simply have no tile.
"""
import math
from typing import NamedTuple, Optional, Tuple

import mercantile

from .pixels import GeoPoint

TILE_SIZE = 256
TILE_EXTENSION = "png"

# Limit of the web mercator projection (where a square world ends)
MAX_LATITUDE = 85.0511287798066


class TileCoordinate(NamedTuple):
    """A tile address, in the same field order as ``mercantile.Tile``."""

    x: int
    y: int
    z: int


def mod(n: int, m: int) -> int:
    """Return ``n`` modulo ``m``, always in ``[0, m - 1]`` for positive ``m``."""
    return ((n % m) + m) % m


def max_tile(zoom: int) -> int:
    """Number of tile columns (and rows) at a zoom level."""
    return 2 ** zoom


def wrap(coord: TileCoordinate) -> Optional[TileCoordinate]:
    """Bring a tile coordinate onto the existing tile grid.

    Parameters
    ----------
    coord : TileCoordinate
        Requested tile. ``x`` may be any integer, ``y`` may be out of range.

    Returns
    -------
    TileCoordinate or None
        The same tile with ``x`` wrapped into ``[0, 2**z - 1]``, or None when
        ``y`` lies outside ``[0, 2**z - 1]``.
    """
    n = max_tile(coord.z)
    if coord.y < 0 or coord.y > (n - 1):
        return None
    return TileCoordinate(mod(coord.x, n), coord.y, coord.z)


def tile_path(coord: TileCoordinate, base: str) -> Optional[str]:
    """Relative path of the tile image for a tile coordinate.

    Parameters
    ----------
    coord : TileCoordinate
        Requested tile.
    base : str
        Directory (or URL prefix) holding the tile pyramid.

    Returns
    -------
    str or None
        ``{base}/{z}/{wrapped x}/{y}.png``, or None when there is no tile.
    """
    wrapped = wrap(coord)
    if wrapped is None:
        return None
    return "/".join([base.rstrip("/"), str(wrapped.z), str(wrapped.x),
                     f"{wrapped.y}.{TILE_EXTENSION}"])


def project(point: GeoPoint) -> Tuple[float, float]:
    """Project a point to web mercator world coordinates.

    The world is one ``TILE_SIZE`` square at zoom 0. Truncating the sine of
    the latitude to 0.9999 limits latitude to about 89.19 degrees, roughly a
    third of a tile past the edge of the world tile.

    Parameters
    ----------
    point : GeoPoint
        Geographic location.

    Returns
    -------
    tuple of float
        ``(x, y)`` world coordinate in pixels.
    """
    siny = math.sin(point.lat * math.pi / 180)
    siny = min(max(siny, -0.9999), 0.9999)
    return (TILE_SIZE * (0.5 + point.lng / 360),
            TILE_SIZE * (0.5 - math.log((1 + siny) / (1 - siny)) / (4 * math.pi)))


def tile_for_point(point: GeoPoint, zoom: int) -> TileCoordinate:
    """The tile containing a geographic point at a zoom level.

    Longitudes past the antimeridian are wrapped, latitudes are clamped to
    the square mercator world.
    """
    lng = mod(point.lng + 180, 360) - 180
    lat = min(max(point.lat, -MAX_LATITUDE), MAX_LATITUDE)
    tile = mercantile.tile(lng, lat, zoom)
    return TileCoordinate(tile.x, tile.y, tile.z)
