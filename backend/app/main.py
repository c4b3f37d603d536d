"""
Application FastAPI principale du tracker d'activites quotidiennes
Point d'entrée de l'API backend
"""
import logging
from logging.handlers import RotatingFileHandler
import sys
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.requests import Request
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
import sentry_sdk

from app.core.settings import get_settings
from app.api.routers import router, limiter
from app.core.database import create_db_and_tables, check_database_health
from app.domain.catalog import get_activity_catalog

APP_VERSION = "1.0.0"

settings = get_settings()

# Initialiser Sentry (uniquement si SENTRY_DSN est configure)
if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENVIRONMENT,
        traces_sample_rate=0.2 if settings.ENVIRONMENT == "production" else 1.0,
        send_default_pii=False,
    )

# Configuration du logging conditionnée par ENVIRONMENT
_log_level = getattr(logging, settings.LOG_LEVEL, logging.INFO)

_handler = logging.StreamHandler(sys.stdout)

if settings.ENVIRONMENT == "production":
    from pythonjsonlogger import jsonlogger
    _handler.setFormatter(jsonlogger.JsonFormatter(
        "%(asctime)s %(name)s %(levelname)s %(message)s",
        rename_fields={"asctime": "timestamp", "levelname": "level"},
    ))
else:
    _handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    ))

_handlers: list[logging.Handler] = [_handler]
if settings.ENVIRONMENT not in ("production", "test"):
    _handlers.append(RotatingFileHandler(
        'app.log', maxBytes=5_000_000, backupCount=3,
    ))

logging.basicConfig(
    level=_log_level,
    handlers=_handlers,
)

# En production, réduire le bruit des modules tiers
if settings.ENVIRONMENT == "production":
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Gestionnaire de cycle de vie de l'application"""
    # Startup
    logger.info(f"🚀 Démarrage du tracker d'activités v{APP_VERSION}")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Debug mode: {settings.DEBUG}")

    # Charger le catalogue une fois pour toutes (erreur fatale si invalide)
    catalog = get_activity_catalog()
    logger.info(f"✅ Catalogue chargé: {', '.join(catalog.keys())}")

    # Initialiser la base de données
    create_db_and_tables()
    logger.info("✅ Base de données initialisée")

    yield

    # Shutdown
    logger.info("🛑 Arrêt du tracker d'activités")

app = FastAPI(
    title="Daily Activity Tracker API",
    description="API de suivi des activités quotidiennes et de la heatmap annuelle",
    version=APP_VERSION,
    docs_url="/docs" if settings.ENVIRONMENT != "production" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT != "production" else None,
    lifespan=lifespan
)

# Rate limiting
app.state.limiter = limiter


def _custom_rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Retourne un 429 propre avec headers Retry-After et X-RateLimit-*."""
    response = JSONResponse(
        status_code=429,
        content={
            "detail": "Trop de requetes",
            "message": f"Rate limit exceeded: {exc.detail}",
        },
    )
    view_rate_limit = getattr(request.state, "view_rate_limit", None)
    if view_rate_limit is not None:
        response = request.app.state.limiter._inject_headers(response, view_rate_limit)
    return response


app.add_exception_handler(RateLimitExceeded, _custom_rate_limit_handler)
app.add_middleware(SlowAPIMiddleware)

# Configuration CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["*"],
)

# Inclure les routes
app.include_router(router, prefix="/api/v1")


@app.get("/health")
@limiter.exempt
async def health_check():
    """Point de santé de l'API (503 si la base ne répond pas)"""
    database_ok = check_database_health()
    return JSONResponse(
        status_code=200 if database_ok else 503,
        content={
            "status": "healthy" if database_ok else "degraded",
            "version": APP_VERSION,
            "environment": settings.ENVIRONMENT,
            "services": {
                "database": "connected" if database_ok else "disconnected",
            },
        }
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc):
    """Gestionnaire global des exceptions"""
    logger.error(f"Erreur non gérée: {type(exc).__name__}: {str(exc)}", exc_info=True)
    if settings.DEBUG:
        content = {
            "detail": "Erreur interne du serveur",
            "type": type(exc).__name__,
            "message": str(exc),
        }
    else:
        content = {
            "detail": "Erreur interne du serveur",
            "message": "Une erreur s'est produite",
        }
    return JSONResponse(status_code=500, content=content)

if __name__ == "__main__":
    import uvicorn
    logger.info("Lancement de l'application sur le port 8000")
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
