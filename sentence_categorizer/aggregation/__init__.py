"""
Aggregation module for the sentence categorizer.
"""

from .report import render_text_report
from .result_aggregator import ResultAggregator, aggregate

__all__ = [
    "ResultAggregator",
    "aggregate",
    "render_text_report",
]
