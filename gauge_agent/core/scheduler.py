"""
Module de planification pour l'agent de métriques

Ce module gère :
- Le réveil sur des frontières d'intervalle alignées sur l'horloge
- Le déclenchement d'un cycle d'inspection
- La transmission de l'instantané au collecteur distant
- L'arrêt propre de la boucle
"""

import threading
import time
from datetime import datetime
from typing import Callable, Optional

from .config import DEFAULT_INTERVAL


def next_boundary(now: float, interval: int = DEFAULT_INTERVAL) -> float:
    """
    Prochaine frontière d'intervalle (multiple de interval) après now

    Args:
        now: Horodatage courant (secondes)
        interval: Intervalle de rapport (secondes)

    Returns:
        float: Horodatage de la prochaine frontière
    """
    return now - (now % interval) + interval


def compute_sleep(now: float, interval: int = DEFAULT_INTERVAL) -> float:
    """
    Durée d'attente jusqu'à la prochaine frontière, jamais négative

    Pour un intervalle de 60 secondes et une seconde courante s, l'attente
    vaut 60 - (s mod 60).
    """
    return max(0.0, next_boundary(now, interval) - now)


class MetricsScheduler:
    """
    Boucle de collecte à intervalle fixe

    Chaque itération recalcule la frontière à partir de l'horloge : un cycle
    lent raccourcit l'attente suivante au lieu de décaler tous les cycles.
    """

    def __init__(self, inspector, sink, hostname: str, logger,
                 interval: int = DEFAULT_INTERVAL,
                 clock: Optional[Callable[[], float]] = None):
        """
        Initialise le scheduler

        Args:
            inspector: Instance de Inspector
            sink: Destinataire des jauges (méthode gauge(name, value))
            hostname: Préfixe des noms de métriques
            logger: Instance de AgentLogger
            interval: Intervalle de rapport en secondes
            clock: Horloge en secondes (time.time par défaut)
        """
        if interval <= 0:
            raise ValueError(f"Intervalle invalide: {interval}")

        self.inspector = inspector
        self.sink = sink
        self.hostname = hostname
        self.logger = logger.get_logger()
        self.interval = interval
        self.clock = clock or time.time

        # État du scheduler
        self.is_running = False
        self.stop_event = threading.Event()
        self.next_run = None
        self.cycles_run = 0

        self.logger.info(f"MetricsScheduler initialisé (intervalle: {interval}s, hôte: {hostname})")

    def run(self):
        """
        Boucle principale : attendre la frontière, collecter, transmettre

        Tourne jusqu'à l'appel de stop().
        """
        self.logger.info("Démarrage de la boucle de collecte")
        self.is_running = True
        self.stop_event.clear()

        try:
            self.next_run = next_boundary(self.clock(), self.interval)
            while not self.stop_event.is_set():
                self.logger.debug(f"Prochaine collecte: {datetime.fromtimestamp(self.next_run)}")

                # Frontière déjà passée (cycle précédent trop long) : attente nulle
                delay = max(0.0, self.next_run - self.clock())
                if self.stop_event.wait(timeout=delay):
                    break

                # Frontière suivante fixée avant le cycle : un cycle qui la
                # dépasse est suivi d'un cycle immédiat
                self.next_run = next_boundary(max(self.clock(), self.next_run), self.interval)
                self.run_once()
        finally:
            self.is_running = False
            self.logger.info("Boucle de collecte terminée")

    def run_once(self) -> int:
        """
        Effectue un cycle d'inspection et transmet l'instantané

        Les erreurs du cycle sont journalisées sans interrompre la boucle.

        Returns:
            int: Nombre de jauges transmises
        """
        try:
            snapshot = self.inspector.inspect()
        except Exception:
            self.logger.exception("Erreur lors du cycle d'inspection")
            return 0

        self.cycles_run += 1
        return self._forward(snapshot)

    def _forward(self, snapshot) -> int:
        """
        Transmet chaque métrique sous le nom '<hostname>.<métrique>'

        Args:
            snapshot: Instantané {nom: valeur}

        Returns:
            int: Nombre de jauges transmises sans erreur
        """
        sent = 0
        for name in sorted(snapshot):
            try:
                self.sink.gauge(f"{self.hostname}.{name}", snapshot[name])
                sent += 1
            except Exception as e:
                self.logger.error(f"Erreur lors de l'envoi de la jauge {name}: {e}")

        self.logger.debug(f"{sent}/{len(snapshot)} jauge(s) transmise(s)")
        return sent

    def stop(self):
        """Demande l'arrêt de la boucle (l'attente en cours est interrompue)"""
        self.logger.info("Arrêt du scheduler...")
        self.stop_event.set()

    def get_status(self) -> dict:
        """
        Retourne le statut actuel du scheduler

        Returns:
            dict: Informations sur l'état du scheduler
        """
        return {
            'is_running': self.is_running,
            'interval': self.interval,
            'hostname': self.hostname,
            'next_run': datetime.fromtimestamp(self.next_run).isoformat() if self.next_run else None,
            'cycles_run': self.cycles_run
        }
