"""
Utilitaires partages entre les routers API : rate limiter et dependances.
"""
import logging
from functools import lru_cache

from fastapi import HTTPException, status
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.core.settings import get_settings
from app.domain.catalog import ActivityCatalog, get_activity_catalog
from app.domain.exceptions import (
    ActivityValidationError,
    ConcurrentWriteError,
    StoreUnavailableError,
)
from app.domain.services.activity_store import ActivityStore
from app.domain.services.statistics_service import StatisticsService

logger = logging.getLogger(__name__)

_settings = get_settings()

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[_settings.RATE_LIMIT_DEFAULT],
    headers_enabled=True,
    enabled=_settings.RATE_LIMIT_ENABLED,
)


def get_catalog() -> ActivityCatalog:
    return get_activity_catalog()


@lru_cache()
def get_activity_store() -> ActivityStore:
    """Store construit une seule fois avec le catalogue configure."""
    return ActivityStore(get_activity_catalog(), max_attempts=get_settings().WRITE_RETRY_ATTEMPTS)


@lru_cache()
def get_statistics_service() -> StatisticsService:
    return StatisticsService(get_activity_store())


DOMAIN_ERRORS = (ActivityValidationError, ConcurrentWriteError, StoreUnavailableError)


def to_http_error(exc: Exception) -> HTTPException:
    """Traduit une erreur du domaine en HTTPException."""
    if isinstance(exc, ActivityValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if isinstance(exc, ConcurrentWriteError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if isinstance(exc, StoreUnavailableError):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))
    logger.error(f"Erreur inattendue: {type(exc).__name__}: {exc}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Erreur interne du serveur",
    )
