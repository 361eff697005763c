"""
Watchman Gauge Agent - Envoi périodique de l'utilisation des ressources

Ce module principal fournit un agent qui mesure à intervalle fixe
l'utilisation du CPU, de la mémoire, des disques et des systèmes de fichiers
et envoie les valeurs sous forme de jauges à un collecteur distant.

Author: Watchman Agent Client Team
Version: 1.0.0
"""

__version__ = "1.0.0"
__author__ = "Watchman Agent Client Team"

# Imports principaux pour faciliter l'utilisation
from .core.config import AgentConfig
from .core.delta_store import DeltaStore
from .core.inspector import Inspector
from .core.logger import AgentLogger

__all__ = ['AgentConfig', 'AgentLogger', 'DeltaStore', 'Inspector']
