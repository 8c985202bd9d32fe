"""Legend for the TWS change overlay.

A legend is an ordered list of (label, color) rows, rendered top to bottom.
It is stored as a headerless two column csv file::

    2.00,#0044ff
    1.83,#0053ff
    ...
"""
import pathlib
from typing import List, NamedTuple

import numpy as np
import pandas as pd
from jinja2 import Template

from .colors import get_hex_colors
from .utils import vprint

DEFAULT_SLOTS = 25


class LegendEntry(NamedTuple):
    """One row of the legend."""

    label: str
    color: str


LEGEND_TEMPLATE = Template("""<h3>Legend</h3>
<div>
<p style='text-align:center;'>Change in TWS<br/>{{ units | e }}</p>
<div style='font-size:small;'>
{%- for entry in entries %}
<div style='text-align:center;width:100%;height:15px;background-color:{{ entry.color | e }};margin:1px;'>{{ entry.label | e }}</div>
{%- endfor %}
</div>
</div>
""")


def read_legend(path) -> List[LegendEntry]:
    """Read a legend file.

    Parameters
    ----------
    path : str or pathlib.Path
        Headerless csv file with one ``label,color`` pair per row.

    Returns
    -------
    list of LegendEntry
        Rows in file order.
    """
    df = pd.read_csv(path, header=None, names=["label", "color"], dtype=str,
                     skipinitialspace=True, keep_default_na=False)
    vprint(f"Read {len(df)} legend rows from {path}")
    return [LegendEntry(label.strip(), color.strip())
            for label, color in zip(df["label"], df["color"])]


def write_legend(entries, path):
    """Write legend rows to a headerless csv file.

    Parameters
    ----------
    entries : sequence of LegendEntry
        Rows to write, top row first.
    path : str or pathlib.Path
        Output file. Parent directories are created.
    """
    path = pathlib.Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df = pd.DataFrame(list(entries), columns=["label", "color"])
    df.to_csv(path, header=False, index=False)
    vprint(f"Wrote {len(df)} legend rows to {path}")


def build_legend(max_value: float, slots: int = DEFAULT_SLOTS,
                 fmt: str = "{:.2f}") -> List[LegendEntry]:
    """Sample the color scale into legend rows.

    Parameters
    ----------
    max_value : float
        Magnitude where the scale saturates. Rows run from ``+max_value``
        (top, blue) to ``-max_value`` (bottom, red).
    slots : int, optional
        Number of rows, by default 25.
    fmt : str, optional
        Format of the row labels, by default two decimals.

    Returns
    -------
    list of LegendEntry
    """
    if max_value <= 0:
        raise ValueError(f"max_value must be positive, got {max_value}")
    if slots < 2:
        raise ValueError(f"A legend needs at least 2 slots, got {slots}")
    values = np.linspace(max_value, -max_value, slots)
    values = np.where(np.isclose(values, 0, atol=1e-12 * max_value), 0.0, values)
    colors = get_hex_colors(values, max_value)
    return [LegendEntry(fmt.format(value), color) for value, color in zip(values, colors)]


def load_legend(map_config) -> List[LegendEntry]:
    """Legend rows for a map: the legend file if present, else a generated one."""
    path = pathlib.Path(map_config.legend_file)
    if path.is_file():
        return read_legend(path)
    vprint(f"No legend file at {path}, generating {map_config.legend_slots} rows")
    return build_legend(map_config.max_value, map_config.legend_slots)


def render_legend(entries, units: str) -> str:
    """HTML fragment for the legend box of the map page."""
    return LEGEND_TEMPLATE.render(entries=list(entries), units=units)
