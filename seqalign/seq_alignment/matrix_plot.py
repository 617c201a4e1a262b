"""
DP matrix plotting: score heatmap, back-pointer arrows and traceback paths
"""
import matplotlib.pyplot as plt
import numpy as np
from typing import Optional, Tuple

from .dp import Arrows
from .matrices import SCORE_MIN
from .pairwise import AlignmentResult

# (d_row, d_col) toward the predecessor cell
_ARROW_OFFSETS = {
    Arrows.DIAGONAL: (-1, -1),
    Arrows.UP: (-1, 0),
    Arrows.LEFT: (0, -1),
}


# ---------- helpers ----------
def _display_scores(scores: np.ndarray) -> np.ma.MaskedArray:
    """mask unreachable / forbidden cells so they don't swamp the colour scale"""
    return np.ma.masked_where(scores <= SCORE_MIN, scores.astype(float))


def _axis_labels(seq: str):
    return [""] + list(seq)


# ---------- main API ----------
def plot_dp_matrix(
    result: AlignmentResult,
    figsize: Tuple[int, int] = (8, 8),
    show_scores: bool = True,
    show_arrows: bool = True,
    show_paths: bool = True,
    font_size: int = 10,
    cmap: str = "viridis",
    title: Optional[str] = None,
) -> plt.Figure:
    """
    Draw the filled DP matrix of an alignment result
    - seq1 runs down the rows, seq2 across the columns.
    - Arrows point at the predecessor cell(s).
    - Every optimal traceback path is drawn on top.
    """
    matrix = result.matrix
    fig, ax = plt.subplots(figsize=figsize)

    im = ax.imshow(_display_scores(matrix.scores), cmap=cmap, origin="upper")
    fig.colorbar(im, ax=ax, fraction=0.046, pad=0.04)

    ax.set_xticks(range(matrix.cols))
    ax.set_yticks(range(matrix.rows))
    ax.set_xticklabels(_axis_labels(result.seq2), fontsize=font_size)
    ax.set_yticklabels(_axis_labels(result.seq1), fontsize=font_size)
    ax.xaxis.tick_top()

    if show_scores:
        for i in range(matrix.rows):
            for j in range(matrix.cols):
                s = int(matrix.scores[i, j])
                label = "-inf" if s <= SCORE_MIN else str(s)
                ax.text(j + 0.15, i + 0.25, label, ha="center", va="center",
                        fontsize=font_size - 2, color="w")

    if show_arrows:
        _draw_arrows(ax, matrix)

    if show_paths:
        for path in result.traceback_paths:
            rows = [step.i for step in path]
            cols = [step.j for step in path]
            ax.plot(cols, rows, "r-", lw=2, alpha=0.6)

    if title is None:
        title = f"{result.mode} alignment, score {result.final_score}"
    ax.set_title(title, fontsize=font_size + 2, fontweight="bold")

    plt.tight_layout()
    return fig


def _draw_arrows(ax: plt.Axes, matrix) -> None:
    for i in range(matrix.rows):
        for j in range(matrix.cols):
            bits = Arrows(int(matrix.arrows[i, j]))
            for flag, (di, dj) in _ARROW_OFFSETS.items():
                if bits & flag:
                    ax.annotate(
                        "",
                        xy=(j + 0.4 * dj, i + 0.4 * di),
                        xytext=(j, i),
                        arrowprops=dict(arrowstyle="->", color="0.85", lw=0.8),
                    )
