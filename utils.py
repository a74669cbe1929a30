# utils.py

import logging
import os
import sys
import zlib
from typing import Dict, List, Optional, Sequence

import plotly.graph_objects as go

FREE_COLOR = "#d3d3d3"
HIGHLIGHT_COLOR = "#ffd700"

_STANDARD_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class TextFormatter(logging.Formatter):
    """Plain text lines with any `extra=` fields appended as key=value."""

    def format(self, record: logging.LogRecord) -> str:
        msg = super().format(record)
        extras = {k: v for k, v in record.__dict__.items() if k not in _STANDARD_ATTRS}
        if extras:
            msg = f"{msg} | " + " ".join(f"{k}={v}" for k, v in extras.items())
        return msg


def setup_logging(name: str = "memsim") -> logging.Logger:
    """
    Attach one stream handler to the root logger (once) and return `name`'s logger.

    DEBUG=true in the environment switches the level to DEBUG.
    """
    root = logging.getLogger()
    logger = logging.getLogger(name)
    if root.handlers:
        return logger

    debug = os.getenv("DEBUG", "false").lower() == "true"
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(TextFormatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if debug else logging.INFO)
    return logger


def get_color(block) -> str:
    """Return a color for a block: grey when free, a stable pastel per owner."""
    if block.free:
        return FREE_COLOR
    hue = zlib.crc32(block.owner_id.encode("utf-8")) % 360
    return f"hsl({hue}, 70%, 75%)"


def block_label(block) -> str:
    return f"FREE<br>{block.size}" if block.free else f"{block.owner_id}<br>{block.size}"


def block_map_figure(blocks: Sequence, highlight: Optional[int] = None, height: int = 180) -> go.Figure:
    """
    Horizontal memory map: one stacked bar segment per block, in address order.

    `highlight` outlines the candidate index of a staged allocation.
    """
    fig = go.Figure()
    start = 0
    for i, block in enumerate(blocks):
        owner = "free" if block.free else block.owner_id
        hover = f"#{i} {owner}: {start}-{start + block.size - 1} ({block.size})"
        if block.allocated_by is not None:
            hover += f" via {block.allocated_by.label}"
        fig.add_trace(go.Bar(
            x=[block.size],
            y=["memory"],
            orientation="h",
            name=owner,
            text=block_label(block),
            textposition="inside",
            hovertext=hover,
            hoverinfo="text",
            marker_color=get_color(block),
            marker_line_color=HIGHLIGHT_COLOR if i == highlight else "#333333",
            marker_line_width=4 if i == highlight else 1,
        ))
        start += block.size

    fig.update_layout(
        barmode="stack",
        height=height,
        showlegend=False,
        xaxis=dict(title="Address", range=[0, max(start, 1)]),
        yaxis=dict(showticklabels=False),
        margin=dict(l=10, r=10, t=10, b=40),
    )
    return fig


def fragmentation_figure(timeline: Sequence[int], height: int = 300) -> go.Figure:
    """Line chart of external fragmentation per recorded step."""
    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=[f"Step {i + 1}" for i in range(len(timeline))],
        y=list(timeline),
        mode="lines+markers",
        name="External Fragmentation",
    ))
    fig.update_layout(height=height, title="External Fragmentation", yaxis=dict(rangemode="tozero"))
    return fig


def comparison_rows(results: Dict, best=None) -> List[Dict[str, object]]:
    """Table rows for a strategy comparison, one per strategy."""
    rows = []
    for strategy, candidate in results.items():
        rows.append({
            "algorithm": strategy.label + (" *" if strategy is best else ""),
            "can_allocate": candidate is not None,
            "block": candidate.index if candidate else None,
            "block_size": candidate.block_size if candidate else None,
            "leftover": candidate.leftover if candidate else None,
            "efficiency_pct": candidate.efficiency if candidate else None,
        })
    return rows
