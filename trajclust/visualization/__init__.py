"""Plotting for trajclust results."""

from trajclust.visualization.plotter import ClusterPlotter, cluster_color

__all__ = ["ClusterPlotter", "cluster_color"]
