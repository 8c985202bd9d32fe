"""Shared pytest fixtures for gracemap tests."""

import asyncio
import tempfile
from pathlib import Path

import pytest

from gracemap.config import MapConfig


@pytest.fixture
def temp_dir():
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def tile_dir(temp_dir):
    """Provide a small tile pyramid with a few zoom 3 tiles."""
    tiles = temp_dir / "tiles"
    for x, y in [(0, 0), (7, 0), (0, 7)]:
        tile_path = tiles / "3" / str(x) / f"{y}.png"
        tile_path.parent.mkdir(parents=True, exist_ok=True)
        tile_path.write_bytes(f"tile 3/{x}/{y}".encode())
    return tiles


@pytest.fixture
def graph_dir(temp_dir):
    """Provide a graph directory holding the graph of the cell at (41.5, -3.5)."""
    graphs = temp_dir / "graphs"
    graphs.mkdir()
    (graphs / "-3.5, 41.5 Data.jpg").write_bytes(b"jpeg")
    return graphs


@pytest.fixture
def map_config(temp_dir, tile_dir, graph_dir):
    """Provide a MapConfig pointing at the temporary tiles and graphs."""
    return MapConfig(
        tile_dir=str(tile_dir),
        graph_url=str(graph_dir),
        legend_file=str(temp_dir / "legend.txt"),
    )


class FakeResponse:
    def __init__(self, status):
        self.status = status


class FakeRequest:
    """Async context manager standing in for an aiohttp request."""

    def __init__(self, session):
        self.session = session

    async def __aenter__(self):
        if self.session.delay:
            await asyncio.sleep(self.session.delay)
        if self.session.error is not None:
            raise self.session.error
        return FakeResponse(self.session.status)

    async def __aexit__(self, *exc_info):
        return False


class FakeSession:
    """Records HEAD requests and answers them with a fixed status."""

    def __init__(self, status=200, delay=0, error=None):
        self.status = status
        self.delay = delay
        self.error = error
        self.urls = []

    def head(self, url, **kwargs):
        self.urls.append(url)
        return FakeRequest(self)


@pytest.fixture
def fake_session():
    """Provide a factory for fake aiohttp sessions."""
    return FakeSession
