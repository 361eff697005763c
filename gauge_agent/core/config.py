"""
Module de configuration pour l'agent de métriques

Ce module gère la configuration de l'agent, incluant :
- Lecture des fichiers de configuration
- Validation des paramètres
- Valeurs par défaut
- Configuration spécifique par plateforme
"""

import os
import sys
import configparser
from typing import Dict, Any, Optional


DEFAULT_INTERVAL = 60


class AgentConfig:
    """
    Gestionnaire de configuration pour l'agent de métriques

    Cette classe centralise la gestion de toute la configuration de l'agent,
    incluant le collecteur distant, l'intervalle de rapport et les logs.
    """

    def __init__(self, config_file: Optional[str] = None):
        """
        Initialise la configuration de l'agent

        Args:
            config_file: Chemin vers le fichier de configuration (optionnel)
        """
        self.config = configparser.ConfigParser()
        self.config_file = config_file or self._get_default_config_path()

        # Définir les valeurs par défaut
        self._set_defaults()

        # Charger la configuration depuis le fichier
        self._load_config()

    def _get_default_config_path(self) -> str:
        """
        Détermine le chemin par défaut du fichier de configuration

        Returns:
            str: Chemin vers le fichier de configuration
        """
        return "/etc/watchman-gauge-agent/config.ini"

    def _set_defaults(self):
        """
        Définit les valeurs de configuration par défaut

        Ces valeurs sont utilisées si aucun fichier de configuration n'est trouvé
        ou si certaines sections/clés sont manquantes.
        """
        # Collecteur distant
        self.config.add_section('collector')
        self.config.set('collector', 'url', 'http://localhost:8000/api/v1/gauges')
        self.config.set('collector', 'auth_token', '')
        self.config.set('collector', 'timeout', '10')
        self.config.set('collector', 'verify_ssl', 'false')

        # Configuration agent
        self.config.add_section('agent')
        self.config.set('agent', 'hostname', '')  # vide = nom d'hôte de la machine
        self.config.set('agent', 'interval', str(DEFAULT_INTERVAL))
        self.config.set('agent', 'command_timeout', '30')
        self.config.set('agent', 'log_level', 'INFO')

        # Configuration logging
        self.config.add_section('logging')
        self.config.set('logging', 'log_file', self._get_default_log_path())
        self.config.set('logging', 'max_log_size', '10485760')  # 10MB
        self.config.set('logging', 'backup_count', '5')

    def _get_default_log_path(self) -> str:
        """
        Détermine le chemin par défaut des logs selon la plateforme

        Returns:
            str: Chemin vers le fichier de log
        """
        if sys.platform == "darwin":
            return "/usr/local/var/log/watchman-gauge-agent/agent.log"
        return "/var/log/watchman-gauge-agent/agent.log"

    def _load_config(self):
        """
        Charge la configuration depuis le fichier

        Si le fichier n'existe pas, utilise les valeurs par défaut.
        En cas d'erreur de lecture, signale l'erreur et continue avec les défauts.
        """
        try:
            if os.path.exists(self.config_file):
                self.config.read(self.config_file)
                print(f"Configuration chargée depuis: {self.config_file}")
            else:
                print(f"Fichier de configuration non trouvé: {self.config_file}")
                print("Utilisation des valeurs par défaut")

        except configparser.Error as e:
            print(f"Erreur lors du chargement de la configuration: {e}")
            print("Utilisation des valeurs par défaut")

    def get(self, section: str, option: str, fallback: Any = None) -> str:
        """
        Récupère une valeur de configuration

        Args:
            section: Nom de la section
            option: Nom de l'option
            fallback: Valeur par défaut si non trouvée

        Returns:
            str: Valeur de configuration
        """
        return self.config.get(section, option, fallback=fallback)

    def getboolean(self, section: str, option: str, fallback: bool = False) -> bool:
        """Récupère une valeur booléenne de configuration"""
        return self.config.getboolean(section, option, fallback=fallback)

    def getint(self, section: str, option: str, fallback: int = 0) -> int:
        """Récupère une valeur entière de configuration"""
        return self.config.getint(section, option, fallback=fallback)

    def getfloat(self, section: str, option: str, fallback: float = 0.0) -> float:
        """Récupère une valeur décimale de configuration"""
        return self.config.getfloat(section, option, fallback=fallback)

    def save(self):
        """
        Sauvegarde la configuration dans le fichier

        Crée les dossiers parents si nécessaire.
        """
        config_dir = os.path.dirname(self.config_file)
        if config_dir and not os.path.exists(config_dir):
            os.makedirs(config_dir, exist_ok=True)

        with open(self.config_file, 'w') as f:
            self.config.write(f)

        print(f"Configuration sauvegardée dans: {self.config_file}")

    def get_collector_config(self) -> Dict[str, Any]:
        """
        Récupère la configuration complète du collecteur distant

        Returns:
            dict: Configuration du collecteur
        """
        return {
            'url': self.get('collector', 'url'),
            'auth_token': self.get('collector', 'auth_token', ''),
            'timeout': self.getfloat('collector', 'timeout', 10.0),
            'verify_ssl': self.getboolean('collector', 'verify_ssl', True)
        }

    def get_agent_config(self) -> Dict[str, Any]:
        """
        Récupère la configuration complète de l'agent

        Returns:
            dict: Configuration agent
        """
        return {
            'hostname': self.get('agent', 'hostname', ''),
            'interval': self.getint('agent', 'interval', DEFAULT_INTERVAL),
            'command_timeout': self.getfloat('agent', 'command_timeout', 30.0),
            'log_level': self.get('agent', 'log_level', 'INFO')
        }

    def validate(self) -> bool:
        """
        Valide la configuration courante

        Returns:
            bool: True si la configuration est valide, False sinon
        """
        errors = []

        # Valider l'URL du collecteur
        collector_url = self.get('collector', 'url')
        if not collector_url or not collector_url.startswith(('http://', 'https://')):
            errors.append("URL du collecteur invalide")

        try:
            if self.getint('agent', 'interval') <= 0:
                errors.append("Intervalle invalide (doit être un entier positif)")
        except ValueError:
            errors.append("Intervalle invalide (doit être un entier positif)")

        for section, option in (('collector', 'timeout'), ('agent', 'command_timeout')):
            try:
                if self.getfloat(section, option) <= 0:
                    errors.append(f"Timeout {section}.{option} invalide (doit être positif)")
            except ValueError:
                errors.append(f"Timeout {section}.{option} invalide (doit être positif)")

        # Valider le niveau de log
        log_level = self.get('agent', 'log_level')
        if log_level not in ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']:
            errors.append("Niveau de log invalide")

        if errors:
            for error in errors:
                print(f"Erreur de configuration: {error}")
            return False

        return True


# Fonction utilitaire pour créer une configuration par défaut
def create_default_config(config_path: str) -> AgentConfig:
    """
    Crée un fichier de configuration par défaut

    Args:
        config_path: Chemin où créer le fichier de configuration

    Returns:
        AgentConfig: Instance de configuration créée
    """
    config = AgentConfig(config_path)
    config.save()
    return config
