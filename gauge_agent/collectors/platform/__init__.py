"""
Package des collecteurs spécifiques par plateforme

Ce package contient les collecteurs qui utilisent les outils
propres à chaque système d'exploitation :
- Linux (procfs, free, df, mount)
- macOS (top, sysctl, vm_stat, df)

Le collecteur est choisi une seule fois au démarrage.
"""

import sys
from typing import Optional

from ...core.errors import UnsupportedPlatform
from ...core.logger import get_logger


def get_platform_probe(store, logger=None, runner=None, platform: Optional[str] = None):
    """
    Instancie le collecteur correspondant au système d'exploitation

    Args:
        store: Instance de DeltaStore
        logger: Logger (logging.Logger)
        runner: Exécuteur de commandes (optionnel)
        platform: Plateforme à utiliser (sys.platform par défaut)

    Returns:
        BaseProbe: Collecteur de la plateforme

    Raises:
        UnsupportedPlatform: Aucun collecteur pour cette plateforme
    """
    platform = platform or sys.platform
    logger = logger or get_logger()

    if platform.startswith('linux'):
        from .linux import LinuxProbe
        probe_class = LinuxProbe

    elif platform == 'darwin':
        from .macos import MacOSProbe
        probe_class = MacOSProbe

    else:
        raise UnsupportedPlatform(platform)

    logger.info(f"Collecteur de plateforme sélectionné: {probe_class.__name__}")
    return probe_class(store, logger=logger, runner=runner)
