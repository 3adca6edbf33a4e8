"""Cluster visualization for trajclust.

Renders any ClusterResult the same way, whatever its kind:
- One panel per cluster with member trajectories and the cluster mean
- Senator overview with member counts (senator results only)
"""

import logging
import math
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.figure import Figure

from trajclust.models.schemas import ClusterKind, ClusterResult, SenatorBundle

logger = logging.getLogger(__name__)

# Color palette for clusters
CLUSTER_COLORS = [
    "#3498db",  # Blue
    "#e74c3c",  # Red
    "#2ecc71",  # Green
    "#9b59b6",  # Purple
    "#f39c12",  # Orange
    "#1abc9c",  # Teal
    "#e91e63",  # Pink
    "#00bcd4",  # Cyan
    "#795548",  # Brown
    "#607d8b",  # Blue Gray
]

KIND_TITLES = {
    ClusterKind.SLOPE: "Slope clusters",
    ClusterKind.FRECHET: "Fréchet clusters",
    ClusterKind.COMBINED: "Combined slope × Fréchet clusters",
    ClusterKind.SENATOR: "Senator clusters",
}


def cluster_color(label: int) -> str:
    """Color for a 1-based cluster label."""
    return CLUSTER_COLORS[(label - 1) % len(CLUSTER_COLORS)]


class ClusterPlotter:
    """Creates matplotlib figures for clustering results."""

    def __init__(self, dpi: int = 150, panel_size: tuple[float, float] = (4.0, 3.0)) -> None:
        """Initialize the plotter.

        Args:
            dpi: Image resolution (dots per inch).
            panel_size: Size of one cluster panel in inches (width, height).
        """
        self.dpi = dpi
        self.panel_size = panel_size

    def _grid(self, n_panels: int, title: str) -> tuple[Figure, np.ndarray]:
        n_cols = min(n_panels, 3)
        n_rows = math.ceil(n_panels / n_cols)
        fig, axs = plt.subplots(
            n_rows,
            n_cols,
            figsize=(self.panel_size[0] * n_cols, self.panel_size[1] * n_rows),
            sharex=True,
            sharey=True,
            squeeze=False,
        )
        fig.suptitle(title, fontsize=14, fontweight="bold")
        for ax in axs.flat[n_panels:]:
            ax.set_visible(False)
        return fig, axs

    def plot_clusters(self, result: ClusterResult, title: str | None = None) -> Figure:
        """Plot member trajectories of each cluster with the cluster mean.

        Args:
            result: Any clustering result.
            title: Figure title (defaults to one derived from the result kind).

        Returns:
            Matplotlib Figure.
        """
        dataset = result.dataset
        n_clusters = result.n_clusters
        if title is None:
            title = KIND_TITLES[result.kind]
            if result.method is not None:
                title = f"{title} ({result.method.value} on senators)"

        fig, axs = self._grid(n_clusters, title)
        labels = result.partition.to_numpy()

        for label in range(1, n_clusters + 1):
            ax = axs.flat[label - 1]
            members = dataset.values[labels == label]
            color = cluster_color(label)
            for row in members:
                ax.plot(dataset.times, row, color=color, alpha=0.25, linewidth=0.8)
            ax.plot(
                dataset.times,
                members.mean(axis=0),
                color=color,
                linewidth=2.5,
                label="mean",
            )
            ax.set_title(f"Cluster {label} (n={len(members)})")
            ax.grid(True, alpha=0.3)

        fig.tight_layout(rect=[0, 0, 1, 0.95])
        return fig

    def plot_senators(self, bundle: SenatorBundle, title: str = "Senators") -> Figure:
        """Plot every senator trajectory, line width scaled by member count."""
        fig, ax = plt.subplots(figsize=(self.panel_size[0] * 2, self.panel_size[1] * 1.5))
        sizes = bundle.senator_map.sizes()
        largest = max(sizes.values())
        senators = bundle.senators

        for index, name in enumerate(senators.names):
            senator = index + 1
            count = sizes.get(senator, 0)
            ax.plot(
                senators.times,
                senators.values[index],
                color=cluster_color(senator),
                linewidth=0.5 + 2.5 * count / largest,
                alpha=0.7,
                label=f"{name} ({count})" if bundle.n_senators <= 10 else None,
            )

        ax.set_title(f"{title} ({bundle.n_senators} senators)")
        ax.set_xlabel("Time")
        ax.set_ylabel("Value")
        ax.grid(True, alpha=0.3)
        if bundle.n_senators <= 10:
            ax.legend(fontsize=8)
        fig.tight_layout()
        return fig

    def save(self, fig: Figure, output_path: str | Path) -> None:
        """Save and close a figure."""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(output_path, dpi=self.dpi, bbox_inches="tight")
        plt.close(fig)
        logger.debug(f"Saved figure to {output_path}")

    def save_cluster_plots(self, result: ClusterResult, output_dir: str | Path) -> list[Path]:
        """Write cluster (and senator) figures to ``output_dir``.

        Returns:
            Paths of the written images.
        """
        output_dir = Path(output_dir)
        paths = [output_dir / "clusters.png"]
        self.save(self.plot_clusters(result), paths[0])

        if result.senators is not None:
            paths.append(output_dir / "senators.png")
            self.save(self.plot_senators(result.senators), paths[1])

        return paths
