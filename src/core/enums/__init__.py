"""
Core enumerations for the backtesting engine.

This module provides centralized enumerations for domain concepts
like exchanges, benchmark transitions, performance methods and stepping modes.
"""

from .backtesting import BenchmarkPerformanceType, SteppingMode, TransitionType
from .exchanges import Exchange

__all__ = ["Exchange", "TransitionType", "BenchmarkPerformanceType", "SteppingMode"]
