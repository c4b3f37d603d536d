"""
Entité DailyActivity - Domain Layer
Un enregistrement d'activités par jour calendaire, clé YYYY-MM-DD.
"""
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field, JSON, Column
from typing import Optional, Dict, Any, List, Union
from datetime import datetime, timezone
from uuid import UUID, uuid4


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DailyActivity(SQLModel, table=True):
    """Activités d'une journée. Les valeurs des champs sont stockées en JSON
    pour que le catalogue puisse évoluer sans migration."""
    id: Optional[UUID] = Field(default_factory=uuid4, primary_key=True)
    date: str = Field(index=True, unique=True, max_length=10)

    activity_values: Dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=False),
        description="Valeurs par activité du catalogue"
    )

    # Score dérivé, recalculé à chaque écriture
    total_activity_count: float = Field(default=0)

    # Compteur de concurrence optimiste
    version: int = Field(default=1)

    # Timestamps UTC
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))


class FieldUpdate(SQLModel):
    """Corps d'une mise à jour d'un seul champ"""
    value: Any = None


class ActivityStatistics(SQLModel):
    """Statistiques calculées sur un intervalle de dates"""
    startDate: str
    endDate: str
    totalDays: int
    completedDays: Dict[str, int]
    totals: Dict[str, Union[int, float]]
    averageActivityCount: float


class HeatmapCell(SQLModel):
    """Case de la heatmap pour un jour"""
    date: str
    count: Union[int, float]
    level: int


class Heatmap(SQLModel):
    """Heatmap annuelle, globale ou pour une activité"""
    year: int
    activity: Optional[str] = None
    palette: str
    maxLevel: int
    cells: List[HeatmapCell]
