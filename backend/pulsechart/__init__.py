"""
PulseChart Engine

Market time-series cache and technical-indicator engine behind the
dashboard charts.
"""

__version__ = "0.1.0"
