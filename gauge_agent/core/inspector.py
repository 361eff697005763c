"""
Module d'inspection pour l'agent de métriques

Ce module orchestre un cycle de collecte :
- Avancement du DeltaStore d'une génération
- Appel des quatre groupes de métriques dans un ordre fixe
- Assemblage des échantillons en un instantané unique
"""

import time
from datetime import datetime
from typing import Dict, Any


# Ordre fixe des groupes de métriques
GROUPS = ('cpu', 'memory', 'disks', 'filesystem')


class Inspector:
    """
    Orchestrateur d'un cycle de collecte

    Cette classe fait avancer le DeltaStore puis interroge le collecteur de
    plateforme pour chaque groupe, en fusionnant les résultats.
    """

    def __init__(self, probe, store, logger):
        """
        Initialise l'inspecteur

        Args:
            probe: Collecteur de plateforme (BaseProbe)
            store: Instance de DeltaStore partagée avec le collecteur
            logger: Instance de AgentLogger
        """
        self.probe = probe
        self.store = store
        self.logger = logger.get_logger()

        # Statistiques du dernier cycle
        self.cycles_count = 0
        self._last_inspection_time = None
        self._last_duration = None
        self._last_metrics_count = 0

        self.logger.info(f"Inspector initialisé ({probe.__class__.__name__})")
        for group, source in probe.get_sources().items():
            self.logger.info(f"Source {group}: {source}")

    def inspect(self) -> Dict[str, float]:
        """
        Effectue un cycle de collecte complet

        Returns:
            dict: Instantané fusionné {nom de métrique: valeur}
        """
        start_time = time.time()

        # Avant tout collecteur : retrieve() lira le cycle précédent
        self.store.cycle()

        loaders = {
            'cpu': self.probe.load_cpu,
            'memory': self.probe.load_memory,
            'disks': self.probe.load_disks,
            'filesystem': self.probe.load_filesystem,
        }

        snapshot: Dict[str, float] = {}
        for group in GROUPS:
            try:
                sample = loaders[group]()
            except Exception:
                self.logger.exception(f"Erreur inattendue dans le groupe {group}")
                continue

            snapshot.update(sample)

        duration = time.time() - start_time
        self.cycles_count += 1
        self._last_inspection_time = datetime.now()
        self._last_duration = duration
        self._last_metrics_count = len(snapshot)

        self.logger.info(f"Cycle {self.cycles_count}: {len(snapshot)} métrique(s) en {duration:.2f}s")
        return snapshot

    def get_inspection_stats(self) -> Dict[str, Any]:
        """
        Retourne les statistiques du dernier cycle

        Returns:
            dict: Statistiques d'inspection
        """
        if not self._last_inspection_time:
            return {'status': 'no_inspection_yet'}

        return {
            'status': 'success',
            'last_inspection_time': self._last_inspection_time.isoformat(),
            'inspection_duration': round(self._last_duration, 2),
            'metrics_count': self._last_metrics_count,
            'cycles_count': self.cycles_count,
            'probe': self.probe.get_collection_stats()
        }
