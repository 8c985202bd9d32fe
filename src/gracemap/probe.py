"""Check whether a graph exists for the data cell under a click.

A missing graph is a normal outcome (the map just shows no popup), so it is
reported as a resolved probe with ``found=False``. Only transport failures
reject a probe. Graphs are either files in a local directory or resources
below an ``http(s)`` URL, which are probed with a ``HEAD`` request.
"""
import asyncio
import enum
import pathlib
from dataclasses import dataclass
from typing import Optional

import aiohttp

from .pixels import GeoPoint, graph_name, graph_url, pixel_center
from .utils import vprint

HTTP_OK = 200
DEFAULT_TIMEOUT = 10


class ProbeState(enum.Enum):
    PENDING = "pending"
    RESOLVED = "resolved"
    REJECTED = "rejected"


@dataclass
class ProbeResult:
    """Outcome of one graph probe.

    Attributes
    ----------
    center : GeoPoint
        Center of the clicked data cell.
    url : str
        Where the page loads the graph from.
    state : ProbeState
        PENDING until the probe finishes.
    found : bool
        True when the graph exists. Only meaningful when RESOLVED.
    error : str, optional
        Reason of a rejection.
    cancelled : bool
        True when the probe was cancelled or replaced by a newer one
        before it finished.
    """

    center: GeoPoint
    url: str
    state: ProbeState = ProbeState.PENDING
    found: bool = False
    error: Optional[str] = None
    cancelled: bool = False

    def as_dict(self):
        return {
            "lat": self.center.lat,
            "lng": self.center.lng,
            "url": self.url,
            "state": self.state.value,
            "found": self.found,
            "error": self.error,
        }


def is_remote(base: str) -> bool:
    return base.startswith(("http://", "https://"))


def pending(point: GeoPoint, base: str, public_base: Optional[str] = None) -> ProbeResult:
    """A not yet started probe for the cell containing ``point``."""
    center = pixel_center(point)
    return ProbeResult(center, graph_url(center, public_base or base))


async def probe_graph(point: GeoPoint, base: str, public_base: Optional[str] = None,
                      session: Optional[aiohttp.ClientSession] = None,
                      timeout: float = DEFAULT_TIMEOUT) -> ProbeResult:
    """Probe for the graph of the data cell containing ``point``.

    Parameters
    ----------
    point : GeoPoint
        Clicked location.
    base : str
        Graph directory, or ``http(s)`` URL below which graphs live.
    public_base : str, optional
        Base used for the URL handed to the page. Defaults to ``base``.
    session : aiohttp.ClientSession, optional
        Session for remote probes. A short lived one is opened if None.
    timeout : float, optional
        Total time allowed for a remote probe, in seconds.

    Returns
    -------
    ProbeResult
        RESOLVED (found or not) or REJECTED.
    """
    result = pending(point, base, public_base)
    if not is_remote(base):
        path = pathlib.Path(base) / graph_name(result.center)
        result.found = path.is_file()
        result.state = ProbeState.RESOLVED
        vprint(f"Graph {path} {'found' if result.found else 'missing'}")
        return result

    url = graph_url(result.center, base)
    try:
        if session is None:
            async with aiohttp.ClientSession() as own_session:
                status = await _head_status(own_session, url, timeout)
        else:
            status = await _head_status(session, url, timeout)
    except (aiohttp.ClientError, asyncio.TimeoutError) as err:
        result.state = ProbeState.REJECTED
        result.error = str(err) or type(err).__name__
        vprint(f"Graph probe for {url} failed: {result.error}")
        return result

    result.found = status == HTTP_OK
    result.state = ProbeState.RESOLVED
    vprint(f"Graph {url} answered HTTP {status}")
    return result


async def _head_status(session, url, timeout):
    async with session.head(url, allow_redirects=True,
                            timeout=aiohttp.ClientTimeout(total=timeout)) as resp:
        return resp.status


class GraphProber:
    """Run graph probes one at a time, the newest one winning.

    Starting a probe while another one is in flight cancels the older one,
    which then returns a REJECTED result marked ``cancelled``. The web page
    aborts superseded lookups on its own, so the server probes statelessly;
    this class serves callers that probe in sequence from Python, such as
    ``gracemap pixel --check``.

    Parameters
    ----------
    base : str
        Graph directory or base URL.
    public_base : str, optional
        Base used for the URLs handed to the page.
    session : aiohttp.ClientSession, optional
        Session shared by the remote probes.
    timeout : float, optional
        Total time allowed for a remote probe, in seconds.
    """

    def __init__(self, base, public_base=None, session=None, timeout=DEFAULT_TIMEOUT):
        self.base = base
        self.public_base = public_base
        self.session = session
        self.timeout = timeout
        self.last = None
        self._task = None

    @property
    def state(self):
        """State of the latest probe, or None before the first one."""
        return None if self.last is None else self.last.state

    def cancel(self):
        """Cancel the probe in flight, if any.

        Its caller gets a REJECTED result marked ``cancelled``.
        """
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def probe(self, point: GeoPoint) -> ProbeResult:
        """Probe for the graph under ``point``, superseding any running probe."""
        self.cancel()
        started = self.last = pending(point, self.base, self.public_base)
        task = asyncio.ensure_future(probe_graph(
            point, self.base, public_base=self.public_base,
            session=self.session, timeout=self.timeout))
        self._task = task
        try:
            result = await task
        except asyncio.CancelledError:
            cancelled = pending(point, self.base, self.public_base)
            cancelled.state = ProbeState.REJECTED
            cancelled.cancelled = True
            # a newer probe owns last once it has started
            if self.last is started:
                cancelled.error = "cancelled"
                self.last = cancelled
            else:
                cancelled.error = "superseded by a newer probe"
            if task is self._task:
                # the caller itself was cancelled
                self._task = None
                raise
            return cancelled
        if self.last is started:
            self.last = result
        if task is self._task:
            self._task = None
        return result
