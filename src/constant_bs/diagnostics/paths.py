from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import pandas as pd

from ..models.stochastic_processes import ConstantBlackScholesProcess
from ..pricers.black_scholes import process_terminal_moments

if TYPE_CHECKING:  # pragma: no cover
    from matplotlib.axes import Axes


def _check_paths(t: np.ndarray, paths: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    t = np.asarray(t, dtype=np.float64)
    paths = np.asarray(paths, dtype=np.float64)
    if paths.ndim != 2 or t.ndim != 1 or paths.shape[1] != t.size:
        raise ValueError(
            f"paths must have shape (n_paths, {t.size}) got {paths.shape}"
        )
    return t, paths


def path_summary(
    t: np.ndarray,
    paths: np.ndarray,
    *,
    process: ConstantBlackScholesProcess | None = None,
    zcrit: float = 1.96,
) -> pd.DataFrame:
    """
    Per-time summary of simulated levels.

    Columns: ``t``, ``mean``, ``std``, ``stderr`` and, when ``process`` is
    given, the exact ``theo_mean`` / ``theo_std`` under the current quotes,
    ``z`` (standardised gap between sample and exact mean) and ``within_ci``
    (``|z| <= zcrit``).
    """
    t, paths = _check_paths(t, paths)
    n_paths = paths.shape[0]

    mean = paths.mean(axis=0)
    std = paths.std(axis=0, ddof=1) if n_paths > 1 else np.zeros_like(mean)
    df = pd.DataFrame(
        {
            "t": t,
            "mean": mean,
            "std": std,
            "stderr": std / np.sqrt(n_paths),
        }
    )

    if process is not None:
        moments = [process_terminal_moments(process, float(ti)) for ti in t]
        df["theo_mean"] = [m for m, _ in moments]
        df["theo_std"] = [np.sqrt(v) for _, v in moments]
        with np.errstate(divide="ignore", invalid="ignore"):
            z = (df["mean"] - df["theo_mean"]) / df["stderr"]
        # t = 0 has no spread: exact match counts as z = 0
        z = z.where(df["stderr"] > 0.0, 0.0)
        df["z"] = z
        df["within_ci"] = z.abs() <= float(zcrit)

    return df


def plot_sample_paths(
    t: np.ndarray,
    paths: np.ndarray,
    *,
    n_plot: int = 10,
    title: str = "Sample paths",
    ax: Axes | None = None,
) -> Axes:
    """
    Plot up to n_plot sample paths against the time grid t.
    """
    t, paths = _check_paths(t, paths)
    if ax is None:
        try:
            import matplotlib.pyplot as plt
        except ModuleNotFoundError as e:
            raise ModuleNotFoundError(
                "plot_sample_paths requires matplotlib. Install it with: pip install matplotlib"
            ) from e
        _, ax = plt.subplots(figsize=(10, 5))

    for i in range(min(int(n_plot), paths.shape[0])):
        ax.plot(t, paths[i], lw=0.8)
    ax.set_title(title)
    ax.set_xlabel("t")
    ax.set_ylabel("Level")
    ax.grid(alpha=0.25)
    return ax
