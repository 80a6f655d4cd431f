"""Monitoring and observability components."""

from .metrics import MetricsCollector

__all__ = ["MetricsCollector"]
