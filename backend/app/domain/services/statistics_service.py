"""
Service de statistiques : agrégats sur un intervalle et heatmap annuelle.
Tout est dérivé des enregistrements à la volée, rien n'est stocké.
"""
import logging
from typing import List, Optional

from sqlmodel import Session

from app.domain.catalog import ActivityKind, ActivityPalette
from app.domain.entities import ActivityStatistics, Heatmap, HeatmapCell, DailyActivity
from app.domain.services.activity_store import ActivityStore
from app.domain.services.date_keys import iter_year_days
from app.domain.services.metric_engine import Score, compute_total, contribution

logger = logging.getLogger(__name__)

# Seuils d'intensité de la heatmap au-delà du niveau 1 : jusqu'à 3, jusqu'à 6, au-delà
HEATMAP_THRESHOLDS = (3, 6)
MAX_LEVEL = 4


def heatmap_level(count: Score) -> int:
    """Niveau d'intensité (0 à MAX_LEVEL) d'une case de heatmap.

    Le niveau 1 est réservé à un score d'exactement 1 ; un score fractionnaire
    inférieur à 1 (ex: 0.5 km de marche) tombe dans le niveau 2.
    """
    if count <= 0:
        return 0
    if count == 1:
        return 1
    for level, threshold in enumerate(HEATMAP_THRESHOLDS, start=2):
        if count <= threshold:
            return level
    return MAX_LEVEL


class StatisticsService:

    def __init__(self, store: ActivityStore):
        self.store = store
        self.catalog = store.catalog

    def summarize(self, records: List[DailyActivity], start: str, end: str) -> ActivityStatistics:
        completed_days = {d.key: 0 for d in self.catalog.activities if d.is_boolean}
        totals = {
            d.key: 0.0 if d.kind == ActivityKind.REAL else 0
            for d in self.catalog.activities if d.is_numeric
        }
        score_sum = 0

        for record in records:
            fields = self.catalog.project(record.activity_values)
            for key in completed_days:
                if fields[key]:
                    completed_days[key] += 1
            for key in totals:
                totals[key] += fields[key]
            score_sum += compute_total(fields, self.catalog)

        total_days = len(records)
        return ActivityStatistics(
            startDate=start,
            endDate=end,
            totalDays=total_days,
            completedDays=completed_days,
            totals=totals,
            averageActivityCount=score_sum / total_days if total_days > 0 else 0,
        )

    def compute_statistics(self, session: Session, start: str, end: str) -> ActivityStatistics:
        """Nombre de jours, jours réalisés par activité booléenne, sommes des
        activités numériques et score moyen sur [start, end]."""
        records = self.store.get_by_date_range(session, start, end)
        logger.debug(f"Statistiques {start} -> {end}: {len(records)} jours enregistres")
        return self.summarize(records, start, end)

    def build_heatmap(self, session: Session, year: int, activity: Optional[str] = None) -> Heatmap:
        """Une case par jour de l'année. Sans activité : score du jour ;
        avec activité : contribution de cette activité au score."""
        definition = self.catalog.require(activity) if activity else None
        by_date = {r.date: r for r in self.store.get_year(session, year)}

        cells = []
        for day in iter_year_days(year):
            record = by_date.get(day)
            count: Score = 0
            if record is not None:
                fields = self.catalog.project(record.activity_values)
                if definition is None:
                    count = compute_total(fields, self.catalog)
                else:
                    count = contribution(definition, fields[definition.key])
            cells.append(HeatmapCell(date=day, count=count, level=heatmap_level(count)))

        palette = definition.palette if definition else ActivityPalette.POSITIVE
        return Heatmap(
            year=year,
            activity=activity,
            palette=palette.value,
            maxLevel=MAX_LEVEL,
            cells=cells,
        )
