"""Chart generation for drawdown simulation results."""

from itertools import accumulate
from pathlib import Path

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import matplotlib.ticker as ticker

from pension_sim_uk.simulation import YearSnapshot

# Strategy color mapping (matches the HTML report row colours)
STRATEGY_COLORS = {
    "Strategy1": "#e1b12c",
    "Strategy2": "#e17055",
    "Strategy3": "#e84393",
    "Strategy3A": "#fdcb6e",
    "Strategy4": "#6c5ce7",
    "Strategy5": "#00b894",
}

DEFAULT_COLOR = "#7f7f7f"
PENSION_COLOR = "#3498db"
SAVINGS_COLOR = "#2ecc71"


def _format_gbp_axis(ax: plt.Axes):
    """£ labels on Y axis with a thousands (k) secondary axis."""
    ax.yaxis.set_major_formatter(
        ticker.FuncFormatter(lambda x, _: f"£{x:,.0f}")
    )
    ax_right = ax.secondary_yaxis("right")
    ax_right.yaxis.set_major_formatter(
        ticker.FuncFormatter(lambda x, _: f"£{x / 1000:,.0f}k" if x != 0 else "0")
    )
    ax_right.set_ylabel("")


def _save(fig, output_path: Path, stem: str, name: str) -> Path:
    output_path.mkdir(parents=True, exist_ok=True)
    suffix = f"-{name}" if name else ""
    filepath = output_path / f"{stem}{suffix}.png"
    fig.tight_layout()
    fig.savefig(filepath, dpi=150)
    plt.close(fig)
    return filepath


def plot_trajectory(
    results: dict[str, list[YearSnapshot]], output_path: Path, name: str = "",
    event_markers: dict[int, float] | None = None,
) -> Path:
    """Generate a line chart of total wealth (pension + savings) per strategy.

    Args:
        results: {strategy_name: timeline} for a single required amount.
        output_path: directory to save the PNG.
        name: optional suffix for the output filename (e.g. "23000" → "trajectory-23000.png").
        event_markers: ad hoc withdrawals {age: amount} to mark on the chart.

    Returns:
        Path to the generated PNG file.
    """
    if not results:
        raise ValueError("No results to plot")

    fig, ax = plt.subplots(figsize=(14, 8))

    for sname, timeline in results.items():
        ages = [s.age for s in timeline]
        totals = [float(s.total_end) for s in timeline]
        color = STRATEGY_COLORS.get(sname, DEFAULT_COLOR)
        ax.plot(ages, totals, label=sname, color=color, linewidth=2)

    ax.set_xlabel("Age")
    ax.set_ylabel("Total wealth at year end")
    ax.set_title("Pension + savings by strategy")
    ax.legend(loc="upper left")
    ax.grid(True, alpha=0.3)
    _format_gbp_axis(ax)

    if event_markers:
        y_lo, y_hi = ax.get_ylim()
        for i, (evt_age, evt_amount) in enumerate(sorted(event_markers.items())):
            ax.axvline(evt_age, color="#888888", linewidth=0.7, linestyle=":", alpha=0.4, zorder=3)
            # Alternate y-position across 4 levels in the lower portion
            y_pos = y_lo + (y_hi - y_lo) * (0.05 + 0.07 * (i % 4))
            ax.annotate(
                f"▲£{float(evt_amount):,.0f}",
                xy=(evt_age, y_pos),
                fontsize=10, color="#c0392b",
                ha="center", va="bottom",
                bbox=dict(boxstyle="round,pad=0.4", fc="white", ec="#c0392b", alpha=0.9, linewidth=0.8),
                zorder=10,
            )

    return _save(fig, output_path, "trajectory", name)


def plot_cumulative_tax(
    results: dict[str, list[YearSnapshot]], output_path: Path, name: str = "",
) -> Path:
    """Generate a line chart of cumulative tax paid per strategy."""
    if not results:
        raise ValueError("No results to plot")

    fig, ax = plt.subplots(figsize=(14, 6))

    for sname, timeline in results.items():
        ages = [s.age for s in timeline]
        cumulative = list(accumulate(float(s.tax_paid) for s in timeline))
        color = STRATEGY_COLORS.get(sname, DEFAULT_COLOR)
        ax.plot(ages, cumulative, label=sname, color=color, linewidth=2)

    ax.set_xlabel("Age")
    ax.set_ylabel("Cumulative tax paid")
    ax.set_title("Cumulative income tax on pension withdrawals")
    ax.legend(loc="upper left")
    ax.grid(True, alpha=0.3)
    _format_gbp_axis(ax)

    return _save(fig, output_path, "tax", name)


def plot_account_split(
    results: dict[str, list[YearSnapshot]], output_path: Path, name: str = "",
) -> Path:
    """Generate stacked pension/savings area charts, one panel per strategy."""
    n = len(results)
    if n == 0:
        raise ValueError("No results to plot")

    cols = 2
    rows = (n + 1) // 2
    fig, axes = plt.subplots(rows, cols, figsize=(14, 4.5 * rows), sharey=True, squeeze=False)

    for idx, (sname, timeline) in enumerate(results.items()):
        row, col = divmod(idx, cols)
        ax = axes[row][col]
        ages = [s.age for s in timeline]
        pension = [float(s.pension_end) for s in timeline]
        savings = [float(s.savings_end) for s in timeline]
        ax.stackplot(ages, pension, savings, labels=["Pension", "Savings"],
                     colors=[PENSION_COLOR, SAVINGS_COLOR], alpha=0.8)
        ax.set_title(sname)
        ax.set_xlabel("Age")
        ax.legend(loc="upper left", fontsize=9)
        ax.grid(True, alpha=0.3)
        _format_gbp_axis(ax)

    # Hide unused subplots
    for idx in range(n, rows * cols):
        row, col = divmod(idx, cols)
        axes[row][col].set_visible(False)

    return _save(fig, output_path, "accounts", name)
