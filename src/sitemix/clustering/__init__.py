"""
Production-center clustering of distribution centers.
"""

from .production import ProductionCluster, cluster_distribution_centers

__all__ = [
    "ProductionCluster",
    "cluster_distribution_centers",
]
