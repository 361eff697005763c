"""
Mémoire de deltas pour l'agent de métriques

Conserve exactement deux générations de lectures brutes (courante et
précédente) afin de calculer des taux entre deux échantillons successifs.
"""

from typing import Any, Dict, Optional


class DeltaStore:
    """
    Stockage à deux générations des compteurs bruts

    Les collecteurs écrivent dans la génération courante avec store() et
    lisent la génération précédente avec retrieve(). L'Inspector appelle
    cycle() une seule fois par collecte, avant tout collecteur.
    """

    def __init__(self):
        self._current: Dict[str, Any] = {}
        self._previous: Dict[str, Any] = {}

    def store(self, key: str, value: Any):
        """
        Enregistre une lecture brute dans la génération courante

        Args:
            key: Identifiant du compteur (ex: 'cpu_values')
            value: Lecture brute
        """
        self._current[key] = value

    def retrieve(self, key: str) -> Optional[Any]:
        """
        Récupère la lecture du cycle précédent

        Args:
            key: Identifiant du compteur

        Returns:
            La valeur stockée au cycle précédent, ou None si absente
        """
        return self._previous.get(key)

    def cycle(self):
        """Fait de la génération courante la génération précédente"""
        self._previous = self._current
        self._current = {}
