"""
Routes statistiques : agregats sur un intervalle, heatmap annuelle.
Routes = validation + delegation au service. Pas de logique metier ici.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from app.core.database import get_session
from app.domain.entities import ActivityStatistics, Heatmap
from app.domain.services.statistics_service import StatisticsService
from app.api.routers._shared import DOMAIN_ERRORS, get_statistics_service, to_http_error

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/statistics/{start_date}/{end_date}", response_model=ActivityStatistics)
async def get_statistics(
    start_date: str,
    end_date: str,
    session: Session = Depends(get_session),
    service: StatisticsService = Depends(get_statistics_service),
):
    """Statistiques sur un intervalle de dates (bornes incluses)"""
    try:
        return service.compute_statistics(session, start_date, end_date)
    except DOMAIN_ERRORS as e:
        raise to_http_error(e)


@router.get("/heatmap/{year}", response_model=Heatmap)
async def get_heatmap(
    year: int,
    activity: Optional[str] = Query(None, description="Cle d'activite du catalogue (score global si vide)"),
    session: Session = Depends(get_session),
    service: StatisticsService = Depends(get_statistics_service),
):
    """Heatmap annuelle : une case par jour avec son niveau d'intensite"""
    try:
        return service.build_heatmap(session, year, activity)
    except DOMAIN_ERRORS as e:
        raise to_http_error(e)
