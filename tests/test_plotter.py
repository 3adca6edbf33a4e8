"""Tests for cluster plotting."""

from pathlib import Path

from trajclust.clusterer import TrajectoryClusterer
from trajclust.models.schemas import TrajectoryDataset
from trajclust.visualization.plotter import CLUSTER_COLORS, ClusterPlotter, cluster_color


class TestClusterPlotter:
    """Tests for the ClusterPlotter class."""

    def test_one_panel_per_cluster(self, shape_dataset: TrajectoryDataset) -> None:
        """Test that each cluster gets a visible panel."""
        result = TrajectoryClusterer().cluster_slope(shape_dataset, k=3)
        fig = ClusterPlotter().plot_clusters(result)
        visible = [ax for ax in fig.axes if ax.get_visible()]
        assert len(visible) == 3
        assert visible[0].get_title() == "Cluster 1 (n=3)"

    def test_hidden_spare_panels(self, shape_dataset: TrajectoryDataset) -> None:
        """Test that unused grid cells are hidden."""
        result = TrajectoryClusterer().cluster_combined(shape_dataset, k_slope=2, k_frechet=2)
        fig = ClusterPlotter().plot_clusters(result)
        visible = [ax for ax in fig.axes if ax.get_visible()]
        assert len(visible) == result.n_clusters

    def test_save_cluster_plots(self, large_dataset: TrajectoryDataset, tmp_path: Path) -> None:
        """Test that senator results also get a senator overview."""
        result = TrajectoryClusterer().cluster_senators(
            large_dataset, k=3, n_senators=6, seed=9
        )
        paths = ClusterPlotter(dpi=72).save_cluster_plots(result, tmp_path)
        assert [p.name for p in paths] == ["clusters.png", "senators.png"]
        assert all(p.exists() for p in paths)

    def test_cluster_color_wraps(self) -> None:
        """Test that labels beyond the palette reuse colors."""
        assert cluster_color(1) == CLUSTER_COLORS[0]
        assert cluster_color(len(CLUSTER_COLORS) + 1) == CLUSTER_COLORS[0]
