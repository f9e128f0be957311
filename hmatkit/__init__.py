"""Clustering, admissibility, dense blocks and low-rank compression for hierarchical matrices."""

__version__ = "0.8.1"