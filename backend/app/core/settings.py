"""
Configuration centralisée pour le tracker d'activités quotidiennes
Utilise pydantic-settings pour la gestion des variables d'environnement
"""
from pydantic_settings import BaseSettings
from pydantic import Field, model_validator
from typing import List, Optional
from functools import lru_cache


class Settings(BaseSettings):
    """Configuration de l'application"""

    # Database
    DATABASE_URL: str = Field(
        default="sqlite:///./daily_tracker.db",
        description="URL de la base de données (PostgreSQL en production)"
    )

    # Catalogue d'activités
    ACTIVITY_CATALOG_PATH: Optional[str] = Field(
        default=None,
        description="Fichier JSON du catalogue d'activités (catalogue par défaut si vide)"
    )
    WRITE_RETRY_ATTEMPTS: int = Field(
        default=5,
        ge=1,
        description="Nombre de tentatives d'écriture en cas de conflit concurrent sur une date"
    )

    # URLs de l'application
    FRONTEND_URL: str = Field(
        default="http://localhost:3000",
        description="URL du frontend (utilisée pour CORS)"
    )

    # CORS
    ALLOWED_ORIGINS: List[str] = Field(
        default=[],
        description="Origines autorisées pour CORS (configuré automatiquement selon ENVIRONMENT si vide)"
    )

    # Monitoring (Sentry)
    SENTRY_DSN: str = Field(
        default="",
        description="DSN Sentry pour le error tracking (vide = Sentry desactive)"
    )

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = Field(default=True)
    RATE_LIMIT_DEFAULT: str = Field(
        default="120/minute",
        description="Limite par défaut appliquée par adresse client"
    )

    # Application
    DEBUG: bool = Field(default=False)
    ENVIRONMENT: str = Field(default="development")
    LOG_LEVEL: str = Field(
        default="",
        description="Niveau de logging (auto-configuré selon ENVIRONMENT si vide)"
    )

    @model_validator(mode="after")
    def _configure_environment(self) -> "Settings":
        """Configure DEBUG et LOG_LEVEL selon ENVIRONMENT."""
        is_prod = self.ENVIRONMENT == "production"
        # En production, forcer DEBUG=False
        if is_prod:
            self.DEBUG = False
        # LOG_LEVEL par défaut selon ENVIRONMENT
        if not self.LOG_LEVEL:
            self.LOG_LEVEL = "WARNING" if is_prod else "INFO"
        self.LOG_LEVEL = self.LOG_LEVEL.upper()
        return self

    @model_validator(mode="after")
    def _set_default_origins(self) -> "Settings":
        """Définit les origines CORS par défaut selon ENVIRONMENT si non configurées."""
        if not self.ALLOWED_ORIGINS:
            if self.ENVIRONMENT != "production":
                self.ALLOWED_ORIGINS = [
                    "http://localhost:3000",
                    "http://127.0.0.1:3000",
                    "http://localhost:5173",
                    "http://127.0.0.1:5173",
                ]
        # Toujours inclure FRONTEND_URL dans les origines autorisees
        frontend = self.FRONTEND_URL.rstrip("/")
        if frontend and frontend not in self.ALLOWED_ORIGINS:
            self.ALLOWED_ORIGINS.append(frontend)
        return self

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Récupère la configuration (chargée une seule fois par processus)"""
    return Settings()
