import numpy as np
import plotly.graph_objects as go


# --- Color interpolation helpers (kept module-level for reuse) ---
def hex_to_rgb(h: str) -> tuple[int, int, int]:
    h = h.lstrip("#")
    return (
        int(h[0:2], 16),
        int(h[2:4], 16),
        int(h[4:6], 16),
    )


def rgb_to_hex(rgb: tuple[int, int, int]) -> str:
    r, g, b = rgb
    return f"#{r:02X}{g:02X}{b:02X}"


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


# Stops follow the recommendation bands: red below 40, amber to 70, green above
DEFAULT_STOPS: list[tuple[float, str]] = [
    (0.0, "#D73027"),
    (39.0, "#FC8D59"),
    (55.0, "#FEE08B"),
    (70.0, "#91CF60"),
    (100.0, "#1A9850"),
]


def gradient_color(value: float, stops: list[tuple[float, str]] = DEFAULT_STOPS) -> str:
    """Piecewise-linear interpolation across hex color stops."""
    v = float(value)
    if v <= stops[0][0]:
        return stops[0][1]
    if v >= stops[-1][0]:
        return stops[-1][1]
    for i in range(len(stops) - 1):
        v0, c0 = stops[i]
        v1, c1 = stops[i + 1]
        if v0 <= v <= v1:
            t = 0.0 if v1 == v0 else (v - v0) / (v1 - v0)
            r0, g0, b0 = hex_to_rgb(c0)
            r1, g1, b1 = hex_to_rgb(c1)
            r = int(round(lerp(r0, r1, t)))
            g = int(round(lerp(g0, g1, t)))
            b = int(round(lerp(b0, b1, t)))
            return rgb_to_hex((r, g, b))
    return stops[-1][1]


def make_leadership_radar(
    labels: list[str],
    scores: list[float],
    title: str | None = None,
    max_score: float = 100.0,
) -> go.Figure:
    """
    Radar chart with one spoke per dimension, scores as percentages.

    Markers are coloured by band; the default title points at the lowest
    scoring dimension.
    """
    if len(labels) != len(scores):
        raise ValueError("labels and scores must have the same length")

    clipped = [min(max(float(s), 0.0), float(max_score)) for s in scores]
    angles = np.linspace(0.0, 360.0, len(labels), endpoint=False).tolist()
    colors = [gradient_color(s) for s in clipped]

    fig = go.Figure()

    if clipped:
        fig.add_trace(
            go.Scatterpolar(
                r=clipped + [clipped[0]],
                theta=angles + [angles[0]],
                mode="lines",
                line=dict(color="#666666", width=1.5),
                fill="toself",
                fillcolor="rgba(0,0,0,0.08)",
                name="Score (%)",
                hoverinfo="skip",
            )
        )

    fig.add_trace(
        go.Scatterpolar(
            r=clipped,
            theta=angles,
            mode="markers+text",
            marker=dict(size=10, color=colors),
            text=[f"{s:.0f}%" for s in clipped],
            textposition="top center",
            name="Score by Dimension",
            hovertemplate="<b>%{customdata}</b><br>Score: %{r:.0f}%<extra></extra>",
            customdata=labels,
        )
    )

    if title is None and clipped:
        lowest = labels[int(np.argmin(clipped))]
        title = f"{lowest} is the lowest: focus improvement efforts there"

    fig.update_layout(
        title=dict(
            text=title or "Leadership Assessment Results",
            x=0.5,
            xanchor="center",
            font=dict(family="Helvetica, Arial, sans-serif", size=18),
        ),
        showlegend=True,
        legend=dict(orientation="h", x=1, y=-0.1, xanchor="right", yanchor="top"),
        margin=dict(l=40, r=40, t=80, b=80),
        polar=dict(
            radialaxis=dict(
                range=[0, float(max_score)],
                showticklabels=True,
                ticks="outside",
                tickfont=dict(size=10),
                gridcolor="#BFBFBF",
                gridwidth=0.5,
                tickvals=list(range(0, int(max_score) + 1, 20)),
            ),
            angularaxis=dict(
                rotation=90,  # 12 o'clock
                direction="clockwise",
                tickmode="array",
                tickvals=angles,
                ticktext=labels,
                tickfont=dict(size=12),
            ),
        ),
        template="plotly_white",
        height=560,
    )
    return fig
