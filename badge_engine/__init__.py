"""
Badge engine for a fitness competition.

Turns exercise activities into badge progress, tier awards and badge points,
and detects group activities (several athletes, same place, same time).
"""

__version__ = "0.1.0"
