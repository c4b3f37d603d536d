"""
Initialisation des entités du domaine
"""

from .daily_activity import (
    DailyActivity,
    FieldUpdate,
    ActivityStatistics,
    HeatmapCell,
    Heatmap,
)

__all__ = [
    "DailyActivity", "FieldUpdate",
    "ActivityStatistics", "HeatmapCell", "Heatmap",
]
