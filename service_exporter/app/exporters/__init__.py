"""
Exposition formats for exporter scrapes.
"""

from .prometheus import PrometheusExporter

__all__ = ["PrometheusExporter"]
