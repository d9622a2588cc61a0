"""Diagnostics for simulated paths (pandas tables, matplotlib plots)."""

from .paths import path_summary, plot_sample_paths

__all__ = ["path_summary", "plot_sample_paths"]
