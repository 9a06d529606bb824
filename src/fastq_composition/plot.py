from pathlib import Path
from typing import Sequence

import matplotlib.pyplot as plt
import numpy as np

from .composition import load_json
from .types import BaseComposition

SERIES = (
    ("A", "magenta", "Base A"),
    ("T", "blue", "Base T"),
    ("G", "green", "Base G"),
    ("C", "cyan", "Base C"),
    ("N", "red", "Unknown Base"),
)


def read_composition(path: Path) -> tuple[int, list[BaseComposition]]:
    """Load a composition JSON file written by the extract command."""
    with path.open("r", encoding="utf-8") as handle:
        return load_json(handle.readline())


def _column_values(libs: Sequence[Sequence[BaseComposition]], pos: int) -> np.ndarray:
    return np.array([lib[pos].values() for lib in libs], dtype=np.int64)


def calc_mean(libs: Sequence[Sequence[BaseComposition]], pos: int) -> np.ndarray:
    """Integer mean of each base across libraries at 0-based column ``pos``."""
    return _column_values(libs, pos).sum(axis=0) // len(libs)


def calc_sd(
    libs: Sequence[Sequence[BaseComposition]], mean: np.ndarray, pos: int
) -> np.ndarray:
    """Sample standard deviation of each base across libraries, rounded."""
    squared = (_column_values(libs, pos) - mean) ** 2
    variance = squared.sum(axis=0) // max(len(libs) - 1, 1)
    return np.floor(np.sqrt(variance) + 0.5).astype(np.int64)


def plot_composition(
    table: Sequence[BaseComposition],
    libs: Sequence[Sequence[BaseComposition]],
    output_path: Path,
) -> None:
    """
    Draw one line per base over read position and save the chart.

    :param table: Composition of the library being plotted.
    :param libs: Compositions of other libraries, drawn as mean +/- sd error bars.
    :param output_path: Image file to write; the format follows the suffix.
    """
    fig, ax = plt.subplots(figsize=(12, 6))
    ax.set_title("Percentage", fontsize=16)
    positions = [column.pos for column in table]
    for idx, (_, color, label) in enumerate(SERIES):
        ax.plot(positions, [column.values()[idx] for column in table], color=color, label=label)

    if libs:
        n_positions = min(len(lib) for lib in libs)
        means = np.array([calc_mean(libs, pos) for pos in range(n_positions)]).reshape(-1, len(SERIES))
        sds = np.array([calc_sd(libs, means[pos], pos) for pos in range(n_positions)]).reshape(-1, len(SERIES))
        x = np.arange(1, n_positions + 1)
        for idx, (_, color, _) in enumerate(SERIES):
            lower = np.maximum(means[:, idx] - sds[:, idx], 0)
            upper = means[:, idx] + sds[:, idx]
            # Bars with no spread carry no information
            keep = upper != lower
            if not keep.any():
                continue
            ax.errorbar(
                x[keep],
                means[keep, idx],
                yerr=[means[keep, idx] - lower[keep], upper[keep] - means[keep, idx]],
                fmt="none",
                ecolor=color,
                alpha=0.2,
                capsize=5,
            )

    ax.set_xlabel("Base number")
    ax.set_ylabel("Occurrences (%)")
    ax.set_ylim(0, 100)
    if positions:
        ax.set_xlim(1, max(positions[-1], 2))
    ax.legend(loc="upper right", framealpha=0.8, edgecolor="black")
    ax.grid(True, linestyle="--", linewidth=0.5)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    fig.savefig(output_path)
    plt.close(fig)
