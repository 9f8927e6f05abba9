"""Plotly chart helpers for Streamlit UI."""

from __future__ import annotations

from collections import Counter
from typing import List

import plotly.graph_objects as go

from app.components.cards import STATUS_TONES
from app.payloads import STATUS_LABELS

_TONE_COLORS = {
    "neutral": "#94A3B8",
    "info": "#42A5F5",
    "warning": "#F59E0B",
    "accent": "#8B5CF6",
    "success": "#22C55E",
}


def render_status_chart(units: List[dict], title: str = "Units by status") -> go.Figure:
    counts = Counter(unit.get("status") for unit in units)
    statuses = list(STATUS_LABELS)
    fig = go.Figure(
        go.Bar(
            x=[STATUS_LABELS[s] for s in statuses],
            y=[counts.get(s, 0) for s in statuses],
            marker_color=[_TONE_COLORS[STATUS_TONES[s]] for s in statuses],
        )
    )
    fig.update_layout(
        title=title,
        margin=dict(l=10, r=10, t=40, b=30),
        height=300,
        yaxis_title="Units",
        template="plotly_white",
    )
    return fig


def render_collection_chart(units: List[dict], title: str = "Sale price vs received") -> go.Figure:
    labels = [unit.get("unitNumber") for unit in units]
    fig = go.Figure()
    fig.add_trace(
        go.Bar(
            x=labels,
            y=[unit.get("salePrice") or unit.get("listPrice") or 0 for unit in units],
            name="Sale / list price",
            marker_color="#1565C0",
        )
    )
    fig.add_trace(
        go.Bar(
            x=labels,
            y=[unit.get("totalReceived") or 0 for unit in units],
            name="Received",
            marker_color="#22C55E",
        )
    )
    fig.update_layout(
        title=title,
        barmode="group",
        margin=dict(l=10, r=10, t=40, b=30),
        height=320,
        yaxis_title="Amount",
        template="plotly_white",
    )
    return fig
