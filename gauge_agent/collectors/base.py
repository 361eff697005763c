"""
Classe de base pour tous les collecteurs de métriques

Ce module définit l'interface commune que chaque collecteur de plateforme
doit implémenter, ainsi que l'accès aux utilitaires et pseudo-fichiers
du système.
"""

import os
import shutil
import subprocess
import time
from abc import ABC, abstractmethod
from collections import deque
from typing import Callable, Dict, List, Optional

from ..core.errors import CommandUnavailable, ParseFailure
from ..core.logger import get_logger
from .parsers import DiskUsage, InodeUsage, bytes_to_mb, device_name, percent


Sample = Dict[str, float]

ROOT_ALIAS = 'root'


class CommandRunner:
    """
    Exécute les utilitaires système et lit les pseudo-fichiers

    La présence de chaque utilitaire est résolue une seule fois puis mise en
    cache pour toute la durée de vie du collecteur.
    """

    def __init__(self, timeout: Optional[float] = 30):
        """
        Args:
            timeout: Délai maximal d'exécution d'une commande (secondes)
        """
        self.timeout = timeout
        self._available: Dict[str, bool] = {}

    def is_available(self, command: str) -> bool:
        """Vérifie (une seule fois) la présence d'un utilitaire dans le PATH"""
        if command not in self._available:
            self._available[command] = shutil.which(command) is not None
        return self._available[command]

    def run(self, args: List[str]) -> str:
        """
        Exécute une commande et retourne sa sortie standard

        Args:
            args: Commande et arguments

        Returns:
            str: Sortie de la commande

        Raises:
            CommandUnavailable: Utilitaire absent, en échec ou hors délai
        """
        command = args[0]
        if not self.is_available(command):
            raise CommandUnavailable(command)

        try:
            result = subprocess.run(
                args,
                capture_output=True,
                text=True,
                timeout=self.timeout
            )
        except subprocess.TimeoutExpired:
            raise CommandUnavailable(' '.join(args), f"timeout après {self.timeout}s")
        except OSError as e:
            raise CommandUnavailable(' '.join(args), str(e))

        if result.returncode != 0:
            raise CommandUnavailable(' '.join(args), f"code de sortie {result.returncode}")

        return result.stdout

    def read(self, path: str) -> str:
        """
        Lit un pseudo-fichier (ex: /proc/stat)

        Raises:
            CommandUnavailable: Fichier absent ou illisible
        """
        if not os.path.exists(path):
            raise CommandUnavailable(path)

        try:
            with open(path, 'r', encoding='utf-8') as f:
                return f.read()
        except OSError as e:
            raise CommandUnavailable(path, str(e))


class BaseProbe(ABC):
    """
    Classe de base abstraite pour les collecteurs de plateforme

    Chaque variante implémente quatre groupes de métriques (cpu, mémoire,
    disques, système de fichiers). Les méthodes publiques load_* ne lèvent
    jamais : un utilitaire absent ou une sortie inattendue vide le groupe
    concerné sans interrompre le cycle.
    """

    def __init__(self, store, logger=None, runner: Optional[CommandRunner] = None,
                 clock: Optional[Callable[[], float]] = None):
        """
        Initialise le collecteur de base

        Args:
            store: Instance de DeltaStore partagée avec l'Inspector
            logger: Logger (logging.Logger)
            runner: Exécuteur de commandes (injectable pour les tests)
            clock: Horloge en secondes (time.time par défaut)
        """
        self.store = store
        self.logger = logger or get_logger()
        self.runner = runner or CommandRunner()
        self.clock = clock or time.time

        self.collector_name = self.__class__.__name__
        self.collection_errors = deque(maxlen=50)

    # Groupes de métriques publics

    def load_cpu(self) -> Sample:
        return self._guarded('cpu', self._load_cpu)

    def load_memory(self) -> Sample:
        return self._guarded('memory', self._load_memory)

    def load_disks(self) -> Sample:
        return self._guarded('disks', self._load_disks)

    def load_filesystem(self) -> Sample:
        return self._guarded('filesystem', self._load_filesystem)

    @abstractmethod
    def _load_cpu(self) -> Sample:
        pass

    @abstractmethod
    def _load_memory(self) -> Sample:
        pass

    @abstractmethod
    def _load_disks(self) -> Sample:
        pass

    @abstractmethod
    def _load_filesystem(self) -> Sample:
        pass

    @abstractmethod
    def get_sources(self) -> Dict[str, str]:
        """Sources utilisées par groupe de métriques"""
        pass

    def _guarded(self, group: str, func: Callable[[], Sample]) -> Sample:
        """
        Exécute un groupe de collecte en confinant ses erreurs

        Args:
            group: Nom du groupe (pour les logs)
            func: Fonction de collecte du groupe

        Returns:
            dict: Métriques du groupe, vide en cas d'erreur
        """
        start_time = time.time()
        try:
            sample = func()
        except CommandUnavailable as e:
            self._record_error(f"Groupe {group} ignoré: {e}", warning=False)
            return {}
        except ParseFailure as e:
            self._record_error(f"Groupe {group} ignoré: {e}")
            return {}

        self.logger.debug(f"Collecte {self.collector_name}.{group}: {len(sample)} métrique(s) "
                          f"en {time.time() - start_time:.2f}s")
        return sample

    def _partial(self, group: str, sample: Sample, func: Callable[[], Sample]):
        """
        Ajoute au groupe une source secondaire dont l'échec n'invalide pas le reste

        Args:
            group: Nom du groupe (pour les logs)
            sample: Métriques déjà collectées, complétées sur place
            func: Fonction de collecte de la source secondaire
        """
        try:
            sample.update(func())
        except CommandUnavailable as e:
            self._record_error(f"Source {group} ignorée: {e}", warning=False)
        except ParseFailure as e:
            self._record_error(f"Source {group} ignorée: {e}")

    def _record_error(self, message: str, warning: bool = True):
        self.collection_errors.append(message)
        if warning:
            self.logger.warning(message)
        else:
            self.logger.info(message)

    # Utilitaires partagés

    def _emit_device(self, sample: Sample, prefix: str, device: str, mount_point: str,
                     values: Dict[str, float]):
        """
        Ajoute les métriques d'un périphérique, dupliquées sous l'alias 'root'
        lorsqu'il est monté sur '/'
        """
        names = [device_name(device)]
        if mount_point == '/':
            names.append(ROOT_ALIAS)

        for name in names:
            for metric, value in values.items():
                sample[f"{prefix}.{name}.{metric}"] = value

    def _disk_capacity_sample(self, usages: List[DiskUsage]) -> Sample:
        """Métriques de capacité (MB et pourcentage disponible) par disque"""
        sample: Sample = {}
        for usage in usages:
            values = {
                'total_mb': bytes_to_mb(usage.total_bytes),
                'used_mb': bytes_to_mb(usage.used_bytes),
                'available_mb': bytes_to_mb(usage.available_bytes),
            }
            available_percent = percent(usage.available_bytes, usage.total_bytes)
            if available_percent is not None:
                values['available_percent'] = available_percent
            self._emit_device(sample, 'disk', usage.device, usage.mount_point, values)
        return sample

    def _inode_sample(self, usages: List[InodeUsage]) -> Sample:
        """Métriques d'inodes par système de fichiers"""
        sample: Sample = {}
        for usage in usages:
            total = usage.used + usage.free
            values = {
                'inodes_total': float(total),
                'inodes_used': float(usage.used),
                'inodes_free': float(usage.free),
            }
            free_percent = percent(usage.free, total)
            if free_percent is not None:
                values['inodes_free_percent'] = free_percent
            self._emit_device(sample, 'filesystem', usage.device, usage.mount_point, values)
        return sample

    def _memory_sample(self, prefix: str, total_mb: float, used_mb: float, free_mb: float) -> Sample:
        """Métriques mémoire ou swap : total, utilisé, libre (MB) et pourcentage libre"""
        sample = {
            f"{prefix}.total_mb": total_mb,
            f"{prefix}.used_mb": used_mb,
            f"{prefix}.free_mb": free_mb,
        }
        free_percent = percent(free_mb, total_mb)
        if free_percent is not None:
            sample[f"{prefix}.free_percent"] = free_percent
        return sample

    def _load_sample(self, loads) -> Sample:
        one, five, fifteen = loads
        return {
            'cpu.load_1min': one,
            'cpu.load_5min': five,
            'cpu.load_15min': fifteen,
        }

    def get_collection_stats(self) -> Dict[str, object]:
        """
        Retourne les statistiques d'erreurs du collecteur

        Returns:
            dict: Statistiques du collecteur
        """
        return {
            'collector_name': self.collector_name,
            'errors_count': len(self.collection_errors),
            'errors': list(self.collection_errors)
        }
