# file: src/temperature/plots.py
"""
Interactive plotly charts for diagnostics, holdout predictions and forecasts.

Every builder returns a plotly Figure; render() either opens it or writes a
standalone HTML file when an output directory is configured.
"""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Optional

import pandas as pd
import plotly.graph_objects as go
from plotly.subplots import make_subplots

from .config import TemperatureConfig

logger = logging.getLogger(__name__)

ACTUAL_COLOR = "red"
PREDICTED_COLOR = "green"


def _layout(fig: go.Figure, title: str, height: int = 450) -> go.Figure:
    fig.update_layout(
        title=title,
        hovermode="x unified",
        height=height,
        template="plotly_white",
    )
    return fig


def plot_anomaly_diagnostics(
    anomalies: pd.DataFrame,
    date_col: str = "Date",
    anom_color: str = "#FB3029",
    title: str = "Anomaly Diagnostics",
) -> go.Figure:
    """Observed series, recomposed IQR band and flagged anomalies"""
    fig = go.Figure()

    dates = anomalies[date_col]
    fig.add_trace(go.Scatter(
        x=pd.concat([dates, dates[::-1]]),
        y=pd.concat([anomalies["recomposed_l2"], anomalies["recomposed_l1"][::-1]]),
        fill="toself",
        fillcolor="rgba(100, 100, 100, 0.2)",
        line=dict(color="rgba(0, 0, 0, 0)"),
        name="Normal range",
        hoverinfo="skip",
    ))
    fig.add_trace(go.Scatter(
        x=dates,
        y=anomalies["observed"],
        mode="lines",
        name="Observed",
        line=dict(color="#2c3e50", width=1),
    ))

    flagged = anomalies[anomalies["anomaly"] == "Yes"]
    fig.add_trace(go.Scatter(
        x=flagged[date_col],
        y=flagged["observed"],
        mode="markers",
        name="Anomaly",
        marker=dict(color=anom_color, size=6),
    ))

    fig.update_xaxes(title_text="Date")
    fig.update_yaxes(title_text="Temperature")
    return _layout(fig, title)


def plot_seasonal_diagnostics(
    seasonal: pd.DataFrame,
    value_col: str = "Temp",
    title: str = "Seasonal Diagnostics",
) -> go.Figure:
    """One box plot panel per calendar feature"""
    features = list(dict.fromkeys(seasonal["feature"]))
    fig = make_subplots(rows=len(features), cols=1, subplot_titles=features)

    for i, feature in enumerate(features, start=1):
        sub = seasonal[seasonal["feature"] == feature]
        fig.add_trace(
            go.Box(x=sub["value"], y=sub[value_col], name=feature, showlegend=False),
            row=i,
            col=1,
        )

    return _layout(fig, title, height=300 * len(features))


def plot_acf_diagnostics(
    acf_df: pd.DataFrame,
    title: str = "Lag Diagnostics",
) -> go.Figure:
    """ACF and PACF panels with the white-noise band"""
    fig = make_subplots(rows=2, cols=1, subplot_titles=["ACF", "PACF"], shared_xaxes=True)

    for row, col in enumerate(["acf", "pacf"], start=1):
        fig.add_trace(
            go.Scatter(x=acf_df["lag"], y=acf_df[col], mode="lines+markers",
                       name=col.upper(), marker=dict(size=3)),
            row=row,
            col=1,
        )
        for bound in ("white_noise_upper", "white_noise_lower"):
            fig.add_trace(
                go.Scatter(x=acf_df["lag"], y=acf_df[bound], mode="lines",
                           line=dict(color="gray", dash="dash"), showlegend=False,
                           hoverinfo="skip"),
                row=row,
                col=1,
            )

    fig.update_xaxes(title_text="Lag", row=2, col=1)
    return _layout(fig, title, height=600)


def plot_prediction(
    errors: pd.DataFrame,
    date_col: str = "Date",
    title: str = "Predict",
) -> go.Figure:
    """Holdout actual (red) vs predicted (green)"""
    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=errors[date_col],
        y=errors["actual"],
        mode="lines",
        name="Actual",
        line=dict(color=ACTUAL_COLOR),
    ))
    fig.add_trace(go.Scatter(
        x=errors[date_col],
        y=errors["pred"],
        mode="lines",
        name="Predicted",
        line=dict(color=PREDICTED_COLOR),
    ))
    return _layout(fig, title)


def plot_forecast(
    actual: pd.DataFrame,
    forecast: pd.DataFrame,
    date_col: str = "Date",
    value_col: str = "Temp",
    pred_col: str = "pred",
    title: str = "Forecast",
) -> go.Figure:
    """Full history (red) followed by the future predictions (green)"""
    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=actual[date_col],
        y=actual[value_col],
        mode="lines",
        name="Actual",
        line=dict(color=ACTUAL_COLOR),
    ))
    fig.add_trace(go.Scatter(
        x=forecast[date_col],
        y=forecast[pred_col],
        mode="lines",
        name="Predicted",
        line=dict(color=PREDICTED_COLOR),
    ))
    return _layout(fig, title)


def plot_modeltime_forecast(
    table: pd.DataFrame,
    date_col: str = "Date",
    show_conf: bool = True,
    slider: bool = True,
    show_legend: bool = True,
    title: str = "Forecast Plot",
) -> go.Figure:
    """
    Plot a long forecast table [Date, key, value, conf_lo, conf_hi, model_desc].
    """
    fig = go.Figure()

    for desc, sub in table.groupby("model_desc", sort=False):
        is_actual = (sub["key"] == "actual").all()

        if show_conf and not is_actual and sub["conf_lo"].notna().any():
            fig.add_trace(go.Scatter(
                x=pd.concat([sub[date_col], sub[date_col][::-1]]),
                y=pd.concat([sub["conf_hi"], sub["conf_lo"][::-1]]),
                fill="toself",
                fillcolor="rgba(255, 0, 0, 0.2)",
                line=dict(color="rgba(255, 0, 0, 0)"),
                name=f"{desc} interval",
                hoverinfo="skip",
                showlegend=show_legend,
            ))

        fig.add_trace(go.Scatter(
            x=sub[date_col],
            y=sub["value"],
            mode="lines",
            name=desc,
            line=dict(color="#2c3e50" if is_actual else ACTUAL_COLOR, width=1 if is_actual else 2),
            showlegend=show_legend,
        ))

    if slider:
        fig.update_xaxes(rangeslider_visible=True)
    fig.update_layout(showlegend=show_legend)
    return _layout(fig, title, height=500)


def forecast_long_table(
    actual: pd.DataFrame,
    future: pd.DataFrame,
    model_desc: str,
    date_col: str = "Date",
    value_col: str = "Temp",
) -> pd.DataFrame:
    """Stack history with a future forecast into the long plotting format"""
    actual_part = pd.DataFrame({
        date_col: actual[date_col].values,
        "key": "actual",
        "value": actual[value_col].values,
        "conf_lo": math.nan,
        "conf_hi": math.nan,
        "model_desc": "ACTUAL",
    })
    future_part = pd.DataFrame({
        date_col: future[date_col].values,
        "key": "prediction",
        "value": future["pred"].values,
        "conf_lo": future["conf_lo"].values if "conf_lo" in future else math.nan,
        "conf_hi": future["conf_hi"].values if "conf_hi" in future else math.nan,
        "model_desc": model_desc,
    })
    return pd.concat([actual_part, future_part], ignore_index=True)


def accuracy_figure(accuracy: pd.DataFrame, title: str = "Accuracy Table") -> go.Figure:
    """Accuracy table as a plotly Table"""
    shown = accuracy.copy()
    for col in shown.select_dtypes("number").columns:
        if col != "model_id":
            shown[col] = shown[col].round(2)

    fig = go.Figure(go.Table(
        header=dict(values=list(shown.columns), fill_color="#2c3e50", font=dict(color="white")),
        cells=dict(values=[shown[c].tolist() for c in shown.columns]),
    ))
    fig.update_layout(title=title, template="plotly_white")
    return fig


def render(fig: go.Figure, name: str, config: TemperatureConfig) -> Optional[Path]:
    """
    Show the figure, or write <output_dir>/<name>.html when configured.

    Returns:
        Path of the written file, or None when the figure was shown
    """
    path = config.chart_path(name)
    if path is not None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fig.write_html(str(path), include_plotlyjs="cdn")
        logger.info(f"[plots] wrote {path}")
        return path

    if config.show_plots:
        fig.show()
    return None
