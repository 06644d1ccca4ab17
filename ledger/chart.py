"""Spending breakdown donut chart, rendered with plotly."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List

import plotly.graph_objects as go

PALETTE = ["#00ff88", "#00cc66", "#009966", "#006644", "#004433", "#002211"]


def build_pie_figure(data: Dict[str, List[Any]], title: str = "Spending Breakdown") -> go.Figure:
    """Donut chart from ``{"labels": [...], "values": [...]}``."""
    values = [float(value) for value in data["values"]]
    figure = go.Figure(
        go.Pie(
            labels=data["labels"],
            values=values,
            hole=0.45,
            sort=False,
            marker={"colors": PALETTE, "line": {"width": 1}},
        )
    )
    figure.update_layout(title=title, showlegend=True)
    return figure


def write_chart_html(data: Dict[str, List[Any]], path: Path) -> Path:
    figure = build_pie_figure(data)
    path.parent.mkdir(parents=True, exist_ok=True)
    figure.write_html(str(path), include_plotlyjs="cdn")
    return path
