"""
Store des activités quotidiennes : lecture par date / intervalle, upsert,
mise à jour d'un champ, suppression.

Chaque écriture suit le cycle lecture -> fusion -> validation -> recalcul du
score -> persistance. Le cycle est atomique par date grâce à une concurrence
optimiste : la mise à jour n'est appliquée que si la colonne `version` n'a pas
bougé depuis la lecture, et la contrainte d'unicité sur `date` arbitre les
créations simultanées. En cas de conflit le cycle complet est rejoué.
"""
import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from app.domain.catalog import ActivityCatalog
from app.domain.entities import DailyActivity
from app.domain.exceptions import (
    ActivityValidationError,
    ConcurrentWriteError,
    StoreUnavailableError,
)
from app.domain.services.date_keys import (
    month_bounds,
    validate_date_key,
    validate_date_range,
    year_bounds,
)
from app.domain.services.metric_engine import compute_total

logger = logging.getLogger(__name__)

DEFAULT_WRITE_ATTEMPTS = 5


class _StaleWrite(Exception):
    """La version lue n'est plus la version stockée."""


class ActivityStore:
    """Accès aux enregistrements DailyActivity, un par date."""

    def __init__(self, catalog: ActivityCatalog, max_attempts: int = DEFAULT_WRITE_ATTEMPTS):
        self.catalog = catalog
        self.max_attempts = max_attempts

    @contextmanager
    def _guard(self, session: Session, operation: str):
        try:
            yield
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error(f"Base de donnees indisponible ({operation}): {exc}")
            raise StoreUnavailableError(
                f"Base de donnees indisponible pendant {operation}"
            ) from exc

    def _find(self, session: Session, date: str) -> Optional[DailyActivity]:
        return session.exec(
            select(DailyActivity).where(DailyActivity.date == date)
        ).first()

    # ---- Lecture ----

    def get_by_date(self, session: Session, date: str) -> Optional[DailyActivity]:
        """Retourne l'enregistrement du jour, ou None s'il n'existe pas."""
        date = validate_date_key(date)
        with self._guard(session, "lecture"):
            return self._find(session, date)

    def get_by_date_range(self, session: Session, start: str, end: str) -> List[DailyActivity]:
        """Enregistrements entre start et end inclus, triés par date croissante."""
        start, end = validate_date_range(start, end)
        if start > end:
            return []
        with self._guard(session, "lecture intervalle"):
            return list(session.exec(
                select(DailyActivity)
                .where(DailyActivity.date >= start, DailyActivity.date <= end)
                .order_by(DailyActivity.date)
            ).all())

    def get_year(self, session: Session, year: int) -> List[DailyActivity]:
        return self.get_by_date_range(session, *year_bounds(year))

    def get_month(self, session: Session, year: int, month: int) -> List[DailyActivity]:
        return self.get_by_date_range(session, *month_bounds(year, month))

    # ---- Ecriture ----

    def upsert(self, session: Session, date: str, values: Mapping[str, Any]) -> DailyActivity:
        """Fusionne des valeurs partielles sur l'enregistrement du jour (créé si absent)."""
        date = validate_date_key(date)
        if isinstance(values, Mapping) and "date" in values and values["date"] != date:
            raise ActivityValidationError(
                f"La date du corps ({values['date']}) ne correspond pas a {date}"
            )
        changes = self.catalog.validate_changes(values)
        if not changes:
            raise ActivityValidationError("Aucune activite a enregistrer")
        return self._merge_and_save(session, date, changes)

    def update_field(self, session: Session, date: str, field: str, value: Any) -> DailyActivity:
        """Met à jour une seule activité du jour. Champ inconnu ou valeur négative refusés."""
        date = validate_date_key(date)
        changes = {field: self.catalog.validate_value(field, value)}
        return self._merge_and_save(session, date, changes)

    def delete_by_date(self, session: Session, date: str) -> bool:
        """Supprime l'enregistrement du jour. Retourne False s'il n'existait pas."""
        date = validate_date_key(date)
        with self._guard(session, "suppression"):
            result = session.execute(
                delete(DailyActivity).where(DailyActivity.date == date)
            )
            session.commit()
        deleted = result.rowcount > 0
        if deleted:
            logger.info(f"Activites du {date} supprimees")
        return deleted

    def _merge_and_save(self, session: Session, date: str, changes: Dict[str, Any]) -> DailyActivity:
        with self._guard(session, "ecriture"):
            for attempt in range(1, self.max_attempts + 1):
                try:
                    return self._try_merge(session, date, changes)
                except (_StaleWrite, IntegrityError):
                    session.rollback()
                    logger.warning(
                        f"Conflit d'ecriture sur {date} (tentative {attempt}/{self.max_attempts})"
                    )
        raise ConcurrentWriteError(date, self.max_attempts)

    def _try_merge(self, session: Session, date: str, changes: Dict[str, Any]) -> DailyActivity:
        existing = self._find(session, date)
        now = datetime.now(timezone.utc)

        if existing is None:
            merged = {**self.catalog.defaults(), **changes}
            record = DailyActivity(
                date=date,
                activity_values=merged,
                total_activity_count=compute_total(merged, self.catalog),
                created_at=now,
                updated_at=now,
            )
            session.add(record)
            # IntegrityError si une autre requête a créé la date entre-temps
            session.commit()
            session.refresh(record)
            logger.info(f"Activites du {date} creees (score {record.total_activity_count})")
            return record

        merged = {**self.catalog.project(existing.activity_values), **changes}
        total = compute_total(merged, self.catalog)
        if merged == existing.activity_values and total == existing.total_activity_count:
            return existing

        result = session.execute(
            update(DailyActivity)
            .where(
                DailyActivity.id == existing.id,
                DailyActivity.version == existing.version,
            )
            .values(
                activity_values=merged,
                total_activity_count=total,
                version=existing.version + 1,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise _StaleWrite()
        session.commit()
        session.refresh(existing)
        logger.info(f"Activites du {date} mises a jour (score {total})")
        return existing

    # ---- Représentation ----

    def to_payload(self, record: Optional[DailyActivity], date: Optional[str] = None) -> Dict[str, Any]:
        """Forme JSON d'un enregistrement, clés alignées sur le catalogue.

        Un jour sans enregistrement est rendu avec les valeurs par défaut et un
        score nul.
        """
        if record is None:
            return {
                "date": date,
                **self.catalog.defaults(),
                "totalActivityCount": 0,
                "createdAt": None,
                "updatedAt": None,
            }
        fields = self.catalog.project(record.activity_values)
        return {
            "date": record.date,
            **fields,
            "totalActivityCount": compute_total(fields, self.catalog),
            "createdAt": record.created_at.isoformat() if record.created_at else None,
            "updatedAt": record.updated_at.isoformat() if record.updated_at else None,
        }
