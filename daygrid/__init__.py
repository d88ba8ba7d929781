"""
daygrid - Day calendar slot grid, occupancy and drag selection for salon schedules.
"""

__version__ = "0.1.0"
