"""Cluster bookkeeping for a small Ceph deployment."""

__version__ = "0.1.0"