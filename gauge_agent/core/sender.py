"""
Module de communication avec le collecteur de métriques

Ce module gère :
- L'envoi des jauges au collecteur distant (HTTP)
- L'authentification
- La journalisation des erreurs réseau, sans nouvelle tentative
"""

from datetime import datetime
from typing import Any, Dict

import requests
import urllib3

from .. import __version__

# Désactiver les warnings SSL si nécessaire
urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)


class GaugeSender:
    """
    Envoi des jauges au collecteur distant

    Chaque appel à gauge() est un envoi unique : une erreur est journalisée
    et comptée, jamais retentée ni mise en tampon.
    """

    def __init__(self, config, logger):
        """
        Initialise le sender avec la configuration

        Args:
            config: Instance de AgentConfig
            logger: Instance de AgentLogger
        """
        self.config = config
        self.logger = logger.get_logger()

        collector_config = config.get_collector_config()
        self.collector_url = collector_config['url']
        self.auth_token = collector_config['auth_token']
        self.timeout = collector_config['timeout']
        self.verify_ssl = collector_config['verify_ssl']

        self.session = requests.Session()
        self.session.headers.update({
            'Content-Type': 'application/json',
            'User-Agent': f'WatchmanGaugeAgent/{__version__}'
        })
        if self.auth_token:
            self.session.headers['Authorization'] = f'Bearer {self.auth_token}'

        # Statistiques de communication
        self.last_successful_send = None
        self.send_attempts = 0
        self.send_failures = 0

        self.logger.info("GaugeSender initialisé")
        self.logger.info(f"URL du collecteur: {self.collector_url}")

    def gauge(self, name: str, value: float):
        """
        Envoie une jauge au collecteur

        Args:
            name: Nom complet de la métrique (ex: 'web01.cpu.user')
            value: Valeur instantanée
        """
        self.send_attempts += 1

        payload = {
            'name': name,
            'value': value,
            'timestamp': datetime.now().isoformat()
        }

        try:
            response = self.session.post(
                url=self.collector_url,
                json=payload,
                timeout=self.timeout,
                verify=self.verify_ssl
            )

        except requests.exceptions.Timeout:
            self.send_failures += 1
            self.logger.error(f"Timeout lors de l'envoi de {name} (>{self.timeout}s)")
            return

        except requests.exceptions.RequestException as e:
            self.send_failures += 1
            self.logger.error(f"Erreur de connexion lors de l'envoi de {name}: {e}")
            return

        if response.status_code >= 400:
            self.send_failures += 1
            self.logger.error(f"Erreur collecteur HTTP {response.status_code} pour {name}: "
                              f"{response.text[:200]}")
            return

        self.last_successful_send = datetime.now()

    def get_stats(self) -> Dict[str, Any]:
        """
        Retourne les statistiques de communication

        Returns:
            dict: Statistiques d'envoi
        """
        return {
            'last_successful_send': self.last_successful_send.isoformat() if self.last_successful_send else None,
            'total_attempts': self.send_attempts,
            'total_failures': self.send_failures,
            'success_rate': ((self.send_attempts - self.send_failures) / self.send_attempts * 100) if self.send_attempts > 0 else 0,
            'collector_url': self.collector_url
        }

    def close(self):
        self.session.close()


class LoggingGaugeSink:
    """Destinataire de test : journalise les jauges au lieu de les envoyer"""

    def __init__(self, logger):
        self.logger = logger.get_logger()

    def gauge(self, name: str, value: float):
        self.logger.info(f"{name} = {value:.2f}")
