# TICKWISE Analyzer Plugins
"""
Analyzer plugins for run reporting.

Available Plugins:
    - performance_analyzer: Roundtrips, exposure and performance report
"""

from .performance_analyzer import PerformanceAnalyzer, Roundtrip

__all__ = [
    "PerformanceAnalyzer",
    "Roundtrip",
]
