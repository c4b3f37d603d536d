"""
Erreurs du domaine.

Les routers traduisent ces exceptions en codes HTTP :
  - ActivityValidationError -> 400 (corrigeable par l'appelant, jamais rejouée)
  - ConcurrentWriteError    -> 409
  - StoreUnavailableError   -> 503
"""


class ActivityValidationError(ValueError):
    """Date mal formée, champ inconnu, type invalide ou valeur négative."""


class StoreUnavailableError(RuntimeError):
    """La base de données ne répond pas ou a refusé l'opération."""


class ConcurrentWriteError(RuntimeError):
    """Conflits d'écriture répétés sur une même date, tentatives épuisées."""

    def __init__(self, date: str, attempts: int):
        self.date = date
        self.attempts = attempts
        super().__init__(
            f"Ecriture concurrente sur {date}: abandon après {attempts} tentatives"
        )
