"""Chart rendering for the pet profile dashboard.

Renders the dimension buckets and monthly sign-up trends as PNG images
with matplotlib, returned as bytes so the admin API can stream them.
"""

import io
from typing import Any, Dict, List, Optional

import matplotlib
matplotlib.use("Agg")  # Non-interactive backend (no GUI needed)
import matplotlib.pyplot as plt
import matplotlib.ticker as ticker

from pet_profiles.utils.logger import get_logger

logger = get_logger(__name__)

# ── Shopify-themed color palette (same order as the dashboard legend) ──
COLORS = [
    "#00848E",  # Dark teal
    "#FFA500",  # Orange
    "#E3002B",  # Red
    "#FFD700",  # Gold
    "#9C6ADE",  # Purple
    "#50B83C",  # Green
]

BACKGROUND_COLOR = "#FAFBFC"
GRID_COLOR = "#DFE3E8"
TEXT_COLOR = "#212B36"
SUBTITLE_COLOR = "#637381"

DIMENSION_TITLES = {
    "pet_age": "Pet Age",
    "drug_usage": "Drug Usage",
    "pet_weight": "Pet Weight",
    "pet_type": "Pet Species",
    "stress_level": "Stress Level",
}


class ChartGenerator:
    """Renders dashboard charts to PNG bytes."""

    def __init__(self, dpi: int = 100, figsize: tuple = (10, 6)):
        self.dpi = dpi
        self.figsize = figsize

    def _setup_style(self, fig, ax):
        """Apply consistent Shopify-themed styling to a chart."""
        fig.patch.set_facecolor(BACKGROUND_COLOR)
        ax.set_facecolor(BACKGROUND_COLOR)
        ax.spines["top"].set_visible(False)
        ax.spines["right"].set_visible(False)
        ax.spines["left"].set_color(GRID_COLOR)
        ax.spines["bottom"].set_color(GRID_COLOR)
        ax.tick_params(colors=TEXT_COLOR, labelsize=10)
        ax.title.set_color(TEXT_COLOR)
        ax.grid(True, axis="y", color=GRID_COLOR, linewidth=0.5, alpha=0.7)
        # Customer counts are whole numbers
        ax.yaxis.set_major_locator(ticker.MaxNLocator(integer=True))

    def _render(self, fig) -> bytes:
        buffer = io.BytesIO()
        fig.savefig(
            buffer,
            format="png",
            dpi=self.dpi,
            bbox_inches="tight",
            facecolor=fig.get_facecolor(),
            edgecolor="none",
            pad_inches=0.3,
        )
        plt.close(fig)
        return buffer.getvalue()

    def generate_dimension_chart(
        self, attribute: str, buckets: List[Dict[str, Any]]
    ) -> Optional[bytes]:
        """Bar chart of one attribute's ``{"category", "count"}`` buckets.

        Returns:
            PNG bytes, or None if rendering failed.
        """
        labels = [b["category"] for b in buckets]
        values = [b["count"] for b in buckets]
        title = f"Customers by {DIMENSION_TITLES.get(attribute, attribute)}"

        fig, ax = plt.subplots(figsize=self.figsize)
        try:
            self._setup_style(fig, ax)

            # Truncate long labels
            display_labels = [
                (l[:20] + "...") if len(l) > 23 else l for l in labels
            ]
            colors = [COLORS[i % len(COLORS)] for i in range(len(values))]
            bars = ax.bar(display_labels, values, color=colors, width=0.6,
                          edgecolor="white", linewidth=0.5)

            peak = max(values) if values else 0
            for bar, val in zip(bars, values):
                ax.text(
                    bar.get_x() + bar.get_width() / 2,
                    bar.get_height() + max(peak, 1) * 0.02,
                    str(val),
                    ha="center", va="bottom",
                    fontsize=9, color=SUBTITLE_COLOR, fontweight="bold",
                )

            ax.set_title(title, fontsize=14, fontweight="bold", pad=15)
            ax.set_ylabel("Customers", fontsize=11, color=SUBTITLE_COLOR)
            if not values:
                ax.text(0.5, 0.5, "No profile data", transform=ax.transAxes,
                        ha="center", va="center", color=SUBTITLE_COLOR)
            if len(labels) > 3:
                ax.tick_params(axis="x", labelrotation=30)

            fig.tight_layout()
            return self._render(fig)

        except Exception as e:
            plt.close(fig)
            logger.error("Failed to generate dimension chart", attribute=attribute,
                         error=str(e), exc_info=True)
            return None

    def generate_trend_chart(self, trends: List[Dict[str, Any]]) -> Optional[bytes]:
        """Grouped bars of verified vs. unverified sign-ups per month."""
        labels = [t["month"] for t in trends]
        verified = [t["verified"] for t in trends]
        unverified = [t["unverified"] for t in trends]

        fig, ax = plt.subplots(figsize=self.figsize)
        try:
            self._setup_style(fig, ax)

            positions = range(len(labels))
            width = 0.38
            ax.bar([p - width / 2 for p in positions], verified, width,
                   label="Verified", color=COLORS[0])
            ax.bar([p + width / 2 for p in positions], unverified, width,
                   label="Unverified", color=COLORS[1])
            ax.set_xticks(list(positions))
            ax.set_xticklabels(labels)

            ax.set_title("Email Verification Trends", fontsize=14, fontweight="bold", pad=15)
            ax.set_ylabel("Customers", fontsize=11, color=SUBTITLE_COLOR)
            ax.legend(frameon=False)

            fig.tight_layout()
            return self._render(fig)

        except Exception as e:
            plt.close(fig)
            logger.error("Failed to generate trend chart", error=str(e), exc_info=True)
            return None
