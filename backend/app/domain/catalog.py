"""
Catalogue des activités suivies - Domain Layer

Le catalogue est l'unique source de vérité sur les champs d'un enregistrement
quotidien : leur nom, leur type, leur valeur par défaut. Il est immuable,
chargé une fois au démarrage (catalogue par défaut ou fichier JSON) puis
transmis explicitement au store et au calcul du score.
"""
import logging
import math
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.core.settings import get_settings
from app.domain.exceptions import ActivityValidationError

logger = logging.getLogger(__name__)

# Clés gérées par le store, jamais écrites par l'appelant
READ_ONLY_KEYS = ("date", "totalActivityCount", "createdAt", "updatedAt")


class ActivityKind(str, Enum):
    """Types de valeurs supportés"""
    BOOLEAN = "boolean"
    INTEGER = "non-negative-integer"
    REAL = "non-negative-real"


class ActivityPalette(str, Enum):
    """Palette de la heatmap : vert pour les bonnes habitudes, rouge pour les mauvaises"""
    POSITIVE = "positive"
    WARNING = "warning"


FieldValue = Union[bool, int, float]


class ActivityDefinition(BaseModel):
    """Déclaration d'une activité du catalogue"""
    model_config = ConfigDict(frozen=True)

    key: str = Field(pattern=r"^[A-Za-z][A-Za-z0-9_]*$")
    kind: ActivityKind
    default: FieldValue
    label: str = ""
    unit: Optional[str] = None
    palette: ActivityPalette = ActivityPalette.POSITIVE

    @model_validator(mode="before")
    @classmethod
    def _fill_defaults(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            kind = data.get("kind")
            default = data.get("default")
            if kind == ActivityKind.BOOLEAN:
                data["default"] = False if default is None else default
            elif kind == ActivityKind.REAL:
                if default is None:
                    data["default"] = 0.0
                elif isinstance(default, int) and not isinstance(default, bool):
                    data["default"] = float(default)
            elif default is None:
                data["default"] = 0
            elif isinstance(default, float) and default.is_integer():
                data["default"] = int(default)
            if not data.get("label"):
                data["label"] = data.get("key", "")
        return data

    @model_validator(mode="after")
    def _check_default(self) -> "ActivityDefinition":
        self.coerce(self.default)
        return self

    @property
    def is_boolean(self) -> bool:
        return self.kind == ActivityKind.BOOLEAN

    @property
    def is_numeric(self) -> bool:
        return self.kind != ActivityKind.BOOLEAN

    def coerce(self, value: Any) -> FieldValue:
        """Valide une valeur pour cette activité et la retourne normalisée.

        Les booléens ne sont acceptés que pour les activités booléennes : en
        Python `True` est un `int`, il faut donc l'exclure des types numériques.
        """
        if value is None:
            raise ActivityValidationError(f"Valeur manquante pour {self.key}")

        if self.kind == ActivityKind.BOOLEAN:
            if not isinstance(value, bool):
                raise ActivityValidationError(
                    f"{self.key} attend un booleen, recu {value!r}"
                )
            return value

        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ActivityValidationError(
                f"{self.key} attend un nombre, recu {value!r}"
            )
        if isinstance(value, float) and not math.isfinite(value):
            raise ActivityValidationError(f"{self.key} attend un nombre fini, recu {value!r}")
        if value < 0:
            raise ActivityValidationError(
                f"{self.key} doit etre positif ou nul, recu {value!r}"
            )

        if self.kind == ActivityKind.INTEGER:
            if isinstance(value, float):
                if not value.is_integer():
                    raise ActivityValidationError(
                        f"{self.key} attend un entier, recu {value!r}"
                    )
                return int(value)
            return value

        return float(value)


class ActivityCatalog(BaseModel):
    """Ensemble ordonné et fermé des activités suivies"""
    model_config = ConfigDict(frozen=True)

    activities: Tuple[ActivityDefinition, ...]

    @model_validator(mode="after")
    def _check_keys(self) -> "ActivityCatalog":
        if not self.activities:
            raise ValueError("Le catalogue doit declarer au moins une activite")
        seen = set()
        for definition in self.activities:
            if definition.key in READ_ONLY_KEYS:
                raise ValueError(f"Cle reservee dans le catalogue: {definition.key}")
            if definition.key in seen:
                raise ValueError(f"Cle dupliquee dans le catalogue: {definition.key}")
            seen.add(definition.key)
        return self

    def keys(self) -> Tuple[str, ...]:
        return tuple(d.key for d in self.activities)

    def get(self, key: str) -> Optional[ActivityDefinition]:
        for definition in self.activities:
            if definition.key == key:
                return definition
        return None

    def contains(self, key: str) -> bool:
        return self.get(key) is not None

    def require(self, key: str) -> ActivityDefinition:
        definition = self.get(key)
        if definition is None:
            raise ActivityValidationError(
                f"Champ inconnu: {key}. Champs valides: {', '.join(self.keys())}"
            )
        return definition

    def defaults(self) -> Dict[str, FieldValue]:
        return {d.key: d.default for d in self.activities}

    def validate_value(self, key: str, value: Any) -> FieldValue:
        return self.require(key).coerce(value)

    def validate_changes(self, values: Mapping[str, Any]) -> Dict[str, FieldValue]:
        """Valide un ensemble de valeurs partielles. Les clés en lecture seule sont ignorées."""
        if not isinstance(values, Mapping):
            raise ActivityValidationError("Le corps de la requete doit etre un objet JSON")
        changes = {}
        for key, value in values.items():
            if key in READ_ONLY_KEYS:
                continue
            changes[key] = self.validate_value(key, value)
        return changes

    def project(self, stored: Optional[Mapping[str, Any]]) -> Dict[str, FieldValue]:
        """Champs d'un enregistrement vus à travers le catalogue courant.

        Les activités absentes (ajoutées au catalogue après l'écriture) prennent
        leur valeur par défaut, celles retirées du catalogue disparaissent.
        """
        stored = stored or {}
        fields = {}
        for definition in self.activities:
            if definition.key not in stored:
                fields[definition.key] = definition.default
                continue
            try:
                fields[definition.key] = definition.coerce(stored[definition.key])
            except ActivityValidationError as exc:
                logger.warning(f"Valeur stockee incompatible avec le catalogue, defaut applique: {exc}")
                fields[definition.key] = definition.default
        return fields


DEFAULT_CATALOG = ActivityCatalog(activities=(
    ActivityDefinition(key="bath", kind=ActivityKind.BOOLEAN, default=False, label="Bath"),
    ActivityDefinition(key="problems", kind=ActivityKind.INTEGER, default=0, label="Problems Solved"),
    ActivityDefinition(key="workout", kind=ActivityKind.BOOLEAN, default=False, label="Workout"),
    ActivityDefinition(key="walk", kind=ActivityKind.REAL, default=0.0, label="Walk", unit="km"),
    ActivityDefinition(key="water", kind=ActivityKind.INTEGER, default=0, label="Water"),
    ActivityDefinition(key="meditation", kind=ActivityKind.BOOLEAN, default=False, label="Meditation/Yoga"),
    ActivityDefinition(key="jobsApplied", kind=ActivityKind.INTEGER, default=0, label="Jobs Applied"),
    ActivityDefinition(key="jobOffers", kind=ActivityKind.INTEGER, default=0, label="Job Offers"),
    ActivityDefinition(key="skillWork", kind=ActivityKind.BOOLEAN, default=False, label="Skill Upgrade Work"),
    ActivityDefinition(key="startupWork", kind=ActivityKind.BOOLEAN, default=False, label="Startup Work"),
    ActivityDefinition(
        key="junkFood", kind=ActivityKind.INTEGER, default=0,
        label="Junk Food Count", palette=ActivityPalette.WARNING,
    ),
))


def load_activity_catalog(path: Optional[str] = None) -> ActivityCatalog:
    """Charge le catalogue depuis un fichier JSON, ou retourne le catalogue par défaut."""
    if not path:
        return DEFAULT_CATALOG
    catalog = ActivityCatalog.model_validate_json(Path(path).read_text(encoding="utf-8"))
    logger.info(f"Catalogue charge depuis {path}: {len(catalog.activities)} activites")
    return catalog


@lru_cache()
def get_activity_catalog() -> ActivityCatalog:
    """Catalogue configuré pour ce processus (chargé une seule fois)"""
    return load_activity_catalog(get_settings().ACTIVITY_CATALOG_PATH)
