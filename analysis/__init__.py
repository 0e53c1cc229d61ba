"""
analysis package marker.

Exposes the two entry points of the CSV pattern-analysis engine.
"""

from analysis.analyzer import AnalysisResult, PatternReport, analyze
from analysis.ingestor import Dataset, ParseError, parse

__all__ = [
    "AnalysisResult",
    "Dataset",
    "ParseError",
    "PatternReport",
    "analyze",
    "parse",
]
