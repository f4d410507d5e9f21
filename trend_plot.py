"""
Trend chart rendering.

Draws the oldest-first frame produced by ``trends.trend_frame``: one panel
per metric, values over time, with the healthy bands shaded where the
classifier defines them.
"""

import logging
import math
import os

import matplotlib.pyplot as plt

from classification import BMI_BANDS, BODY_FAT_BANDS, VISCERAL_FAT_BANDS

logger = logging.getLogger(__name__)

# Bands shaded behind a metric's line: (lower, upper, label)
SHADED_BANDS = {
    "bmi": [(BMI_BANDS[0][0], BMI_BANDS[1][0], "Normal BMI")],
    "body_fat_percent": [(BODY_FAT_BANDS[0][0], BODY_FAT_BANDS[1][0], "Good BF%")],
    "visceral_fat": [(0, VISCERAL_FAT_BANDS[0][0], "Healthy visceral fat")],
}

METRIC_TITLES = {
    "weight": "Weight (kg)",
    "bmi": "BMI (kg/m²)",
    "body_fat_percent": "Body Fat (%)",
    "muscle_mass_percent": "Muscle Mass (%)",
    "visceral_fat": "Visceral Fat",
    "metabolic_age": "Metabolic Age (years)",
    "waist": "Waist (cm)",
    "abdomen": "Abdomen (cm)",
}

PLOT_FILENAME = "trend_plot.png"


def create_trend_plot(frame, metrics):
    """
    Creates a grid of line charts, one per metric with at least one value.

    Args:
        frame (pd.DataFrame): Output of trends.trend_frame (oldest first).
        metrics (list): Metric columns to draw.

    Returns:
        matplotlib.figure.Figure: The figure; empty when nothing is plottable.
    """
    plottable = [m for m in metrics if m in frame.columns and frame[m].notna().any()]
    if not plottable:
        fig, _ = plt.subplots(figsize=(6, 4))
        logger.info("No metric has data to plot")
        return fig

    ncols = 2 if len(plottable) > 1 else 1
    nrows = math.ceil(len(plottable) / ncols)
    fig, axes = plt.subplots(nrows, ncols, figsize=(7 * ncols, 3.5 * nrows), squeeze=False)

    for ax, metric in zip(axes.flat, plottable):
        data = frame[["timestamp", metric]].dropna()
        for lower, upper, label in SHADED_BANDS.get(metric, []):
            ax.axhspan(lower, upper, color="lightgreen", alpha=0.2, label=label)
        ax.plot(data["timestamp"], data[metric], marker="o", color="tab:blue")
        ax.set_title(METRIC_TITLES.get(metric, metric))
        ax.grid(True, alpha=0.3)
        if metric in SHADED_BANDS:
            ax.legend(loc="best", fontsize="small")

    for ax in list(axes.flat)[len(plottable):]:
        ax.set_visible(False)

    fig.autofmt_xdate()
    fig.tight_layout()
    return fig


def save_trend_plot(frame, metrics, output_dir):
    """Saves the trend chart as PNG in output_dir and returns its path."""
    os.makedirs(output_dir, exist_ok=True)
    path = os.path.join(output_dir, PLOT_FILENAME)
    fig = create_trend_plot(frame, metrics)
    fig.savefig(path, dpi=150, bbox_inches="tight")
    plt.close(fig)
    return path
