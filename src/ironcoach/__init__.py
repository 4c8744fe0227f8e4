"""
ironcoach - research-based set, weight and progression engine.

Internal Codename: IRONCOACH
"""

__version__ = "0.1.0"
