"""
Configuration de la base de données avec SQLModel
"""
import logging

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import create_engine, SQLModel, Session
from app.core.settings import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

# SQLite refuse par défaut le partage de connexion entre threads (workers FastAPI)
_connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

# Créer l'engine de base de données
engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_pre_ping=True,
    connect_args=_connect_args,
)


def create_db_and_tables():
    """Créer toutes les tables de la base de données"""
    # Import des entités pour enregistrer les tables dans les métadonnées
    from app.domain import entities  # noqa: F401
    SQLModel.metadata.create_all(engine)


def get_session():
    """Générateur de session de base de données pour l'injection de dépendance"""
    with Session(engine) as session:
        yield session


def check_database_health() -> bool:
    """Vérifie que la base répond à un SELECT 1. Retourne True si OK, False sinon."""
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as exc:
        logger.warning(f"Database health check échoué: {exc}")
        return False
