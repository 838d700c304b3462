"""Observation signal processing.

Normalizes raw market observations into bounded metrics, detects market
phase, weighs price/volume/sentiment agreement, and renders the
deterministic text signatures used as similarity-search queries.
"""

from agent.signals.alignment import (
    analyze_risk,
    analyze_trend,
    calculate_alignment_factor,
    calculate_signal_weights,
)
from agent.signals.models import (
    MarketPhase,
    MarketStats,
    NormalizedMetrics,
    RiskAssessment,
    RiskLevel,
    SeriesStats,
    SignalWeights,
    TrendAssessment,
)
from agent.signals.normalizer import compute_market_stats, normalize
from agent.signals.numerical import compute_series_stats
from agent.signals.phase import detect_market_phase
from agent.signals.signature import describe
from agent.signals.window import describe_window

__all__ = [
    "MarketPhase",
    "MarketStats",
    "NormalizedMetrics",
    "RiskAssessment",
    "RiskLevel",
    "SeriesStats",
    "SignalWeights",
    "TrendAssessment",
    "analyze_risk",
    "analyze_trend",
    "calculate_alignment_factor",
    "calculate_signal_weights",
    "compute_market_stats",
    "compute_series_stats",
    "describe",
    "describe_window",
    "detect_market_phase",
    "normalize",
]
