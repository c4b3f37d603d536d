"""
Routes des activites quotidiennes : lecture par date / intervalle, upsert,
mise a jour d'un champ, suppression, catalogue.
Routes = validation + delegation au store. Pas de logique metier ici.
"""
import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, Query, Request, Response
from sqlmodel import Session

from app.core.database import get_session
from app.domain.catalog import ActivityCatalog
from app.domain.entities import FieldUpdate
from app.domain.services.activity_store import ActivityStore
from app.api.routers._shared import (
    DOMAIN_ERRORS,
    get_activity_store,
    get_catalog,
    limiter,
    to_http_error,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/catalog")
async def get_activity_catalog(catalog: ActivityCatalog = Depends(get_catalog)):
    """Liste ordonnee des activites suivies avec leur type et valeur par defaut"""
    return [definition.model_dump(mode="json") for definition in catalog.activities]


@router.get("/activities")
async def get_activities_in_range(
    start: str = Query(..., description="Date minimale incluse (YYYY-MM-DD)"),
    end: str = Query(..., description="Date maximale incluse (YYYY-MM-DD)"),
    session: Session = Depends(get_session),
    store: ActivityStore = Depends(get_activity_store),
) -> List[Dict[str, Any]]:
    """Recupere les activites d'un intervalle, triees par date croissante"""
    try:
        records = store.get_by_date_range(session, start, end)
    except DOMAIN_ERRORS as e:
        raise to_http_error(e)
    return [store.to_payload(r) for r in records]


@router.get("/activities/year/{year}")
async def get_activities_for_year(
    year: int,
    session: Session = Depends(get_session),
    store: ActivityStore = Depends(get_activity_store),
) -> List[Dict[str, Any]]:
    """Recupere toutes les activites d'une annee"""
    try:
        records = store.get_year(session, year)
    except DOMAIN_ERRORS as e:
        raise to_http_error(e)
    return [store.to_payload(r) for r in records]


@router.get("/activities/month/{year}/{month}")
async def get_activities_for_month(
    year: int,
    month: int,
    session: Session = Depends(get_session),
    store: ActivityStore = Depends(get_activity_store),
) -> List[Dict[str, Any]]:
    """Recupere les activites d'un mois"""
    try:
        records = store.get_month(session, year, month)
    except DOMAIN_ERRORS as e:
        raise to_http_error(e)
    return [store.to_payload(r) for r in records]


@router.get("/activities/{date}")
async def get_activity(
    date: str,
    session: Session = Depends(get_session),
    store: ActivityStore = Depends(get_activity_store),
) -> Dict[str, Any]:
    """Recupere les activites d'un jour (valeurs par defaut si rien n'est enregistre)"""
    try:
        record = store.get_by_date(session, date)
    except DOMAIN_ERRORS as e:
        raise to_http_error(e)
    return store.to_payload(record, date)


@router.api_route("/activities/{date}", methods=["PUT", "POST"])
@limiter.limit("60/minute")
async def upsert_activity(
    request: Request,
    response: Response,
    date: str,
    values: Dict[str, Any] = Body(...),
    session: Session = Depends(get_session),
    store: ActivityStore = Depends(get_activity_store),
) -> Dict[str, Any]:
    """Cree ou met a jour les activites d'un jour avec des valeurs partielles"""
    try:
        record = store.upsert(session, date, values)
    except DOMAIN_ERRORS as e:
        raise to_http_error(e)
    return store.to_payload(record)


@router.patch("/activities/{date}/{field}")
@limiter.limit("120/minute")
async def update_activity_field(
    request: Request,
    response: Response,
    date: str,
    field: str,
    body: FieldUpdate,
    session: Session = Depends(get_session),
    store: ActivityStore = Depends(get_activity_store),
) -> Dict[str, Any]:
    """Met a jour une seule activite d'un jour"""
    try:
        record = store.update_field(session, date, field, body.value)
    except DOMAIN_ERRORS as e:
        raise to_http_error(e)
    return store.to_payload(record)


@router.delete("/activities/{date}")
async def delete_activity(
    date: str,
    session: Session = Depends(get_session),
    store: ActivityStore = Depends(get_activity_store),
):
    """Supprime les activites d'un jour (sans erreur si rien n'existe)"""
    try:
        deleted = store.delete_by_date(session, date)
    except DOMAIN_ERRORS as e:
        raise to_http_error(e)
    return {"message": "Activites supprimees avec succes", "date": date, "deleted": deleted}
