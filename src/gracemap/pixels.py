"""Locate the data cell under a map click and name its graph image.

The TWS data is gridded at whole degree resolution, and the graphs are
named after the center of each cell, e.g. ``-3.5, 41.5 Data.jpg``.
"""
import math
from typing import NamedTuple
from urllib.parse import quote

GRAPH_SUFFIX = " Data.jpg"


class GeoPoint(NamedTuple):
    """A latitude/longitude pair in degrees."""

    lat: float
    lng: float

    def __str__(self):
        return f"({self.lat}, {self.lng})"


def pixel_center(point: GeoPoint) -> GeoPoint:
    """Center of the 1x1 degree cell containing ``point``.

    No range validation is done and longitudes are not wrapped at the
    antimeridian.
    """
    return GeoPoint(math.floor(point.lat) + 0.5, math.floor(point.lng) + 0.5)


def graph_name(center: GeoPoint) -> str:
    """File name of the graph drawn for a cell center."""
    return f"{center.lng}, {center.lat}{GRAPH_SUFFIX}"


def graph_url(center: GeoPoint, base: str) -> str:
    """URL of the graph for a cell center below ``base``.

    Spaces are percent encoded, the comma is kept as is.
    """
    return f"{base.rstrip('/')}/{quote(graph_name(center), safe=',')}"
