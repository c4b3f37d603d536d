"""
Calcul du score d'activité quotidien (totalActivityCount).

Règle :
  - activité booléenne vraie        -> 1
  - activité numérique v > 0        -> min(v, NUMERIC_CAP)
  - sinon                            -> 0

Le score est la somme des contributions sur tout le catalogue ; une activité
absente de l'enregistrement compte pour sa valeur par défaut. Les contributions
fractionnaires (ex: 1.5 km de marche) sont conservées telles quelles.
"""
from typing import Any, Mapping, Union

from app.domain.catalog import ActivityCatalog, ActivityDefinition

NUMERIC_CAP = 2

Score = Union[int, float]


def contribution(definition: ActivityDefinition, value: Any) -> Score:
    """Contribution d'une activité au score, toujours dans [0, NUMERIC_CAP]."""
    if definition.is_boolean:
        return 1 if value else 0
    if value is None or isinstance(value, bool) or value <= 0:
        return 0
    return min(value, NUMERIC_CAP)


def compute_total(fields: Mapping[str, Any], catalog: ActivityCatalog) -> Score:
    """Score total d'une journée. Fonction pure : aucune I/O, aucun état."""
    total: Score = 0
    for definition in catalog.activities:
        value = fields.get(definition.key, definition.default)
        total += contribution(definition, value)
    return total
