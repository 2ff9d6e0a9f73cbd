"""
Visualization utilities for the association evaluation.

All functions save figures to disk rather than displaying them interactively,
making the module suitable for headless execution.
"""

import os
import numpy as np
import matplotlib
matplotlib.use("Agg")          # non-interactive backend
import matplotlib.pyplot as plt


def ensure_output_dirs(scenarios: list, base: str = "results") -> None:
    """Create one output subdirectory per scenario name."""
    for scenario in scenarios:
        os.makedirs(os.path.join(base, scenario), exist_ok=True)


# ---------------------------------------------------------------------------
# Fit-score distribution
# ---------------------------------------------------------------------------

def save_fit_histogram(fit_scores: np.ndarray, policy: str, scenario: str,
                       out_dir: str, threshold: float = None) -> str:
    """Save a histogram of a policy's fit scores.

    Parameters
    ----------
    fit_scores : np.ndarray
        Fit scores of the accepted associations.
    policy : str
        Policy name, used in the title and file name.
    scenario : str
        Scenario name; the figure goes to ``out_dir/scenario``.
    out_dir : str
        Root output directory.
    threshold : float, optional
        Drawn as a vertical line when given.

    Returns
    -------
    str
        Path of the saved figure.
    """
    plt.figure(figsize=(10, 5))
    plt.hist(fit_scores, bins=50, edgecolor="black", alpha=0.7)
    if threshold is not None:
        plt.axvline(threshold, color="red", linestyle="--", linewidth=2,
                    label=f"Threshold = {threshold}")
        plt.legend()
    plt.xlabel("Fit score")
    plt.ylabel("Count")
    plt.title(f"{scenario} – {policy} fit-score distribution")
    plt.grid(True, alpha=0.3)

    path = os.path.join(out_dir, scenario, f"fit_{policy}.jpg")
    plt.savefig(path, dpi=150, bbox_inches="tight")
    plt.close()
    return path


# ---------------------------------------------------------------------------
# Policy comparison
# ---------------------------------------------------------------------------

def save_policy_summary(metrics: list, scenario: str, out_dir: str) -> str:
    """Save a grouped bar chart of precision and recall per policy.

    *metrics* is a list of dicts with ``policy``, ``precision`` and
    ``recall`` keys.
    """
    policies = [m["policy"] for m in metrics]
    precision = [m["precision"] for m in metrics]
    recall = [m["recall"] for m in metrics]

    x = np.arange(len(policies))
    width = 0.35

    fig, ax = plt.subplots(figsize=(10, 5))
    ax.bar(x - width / 2, precision, width, label="Precision")
    ax.bar(x + width / 2, recall, width, label="Recall")
    ax.set_xticks(x)
    ax.set_xticklabels(policies)
    ax.set_ylim(0, 1.05)
    ax.set_title(f"{scenario} – association quality by policy")
    ax.legend()
    ax.grid(True, axis="y", alpha=0.3)

    plt.tight_layout()
    path = os.path.join(out_dir, scenario, "policy_summary.jpg")
    plt.savefig(path, dpi=150, bbox_inches="tight")
    plt.close()
    return path
