"""
Point d'entrée principal du Watchman Gauge Agent

Ce module assemble les composants de l'agent et peut être exécuté :
- En mode service (boucle de collecte continue)
- En mode collecte unique (--once)
- En mode test, sans envoi au collecteur (--dry-run)
"""

import signal
import socket
import sys
import threading
import argparse
from typing import Any, Optional

from .core.config import AgentConfig, create_default_config
from .core.delta_store import DeltaStore
from .core.errors import InvalidConfiguration, UnsupportedPlatform
from .core.inspector import Inspector
from .core.logger import AgentLogger
from .core.scheduler import MetricsScheduler
from .core.sender import GaugeSender, LoggingGaugeSink
from .collectors.base import CommandRunner
from .collectors.platform import get_platform_probe


def _option(options, name: str, default: Any = None) -> Any:
    """Lit une option depuis un dict ou un objet (argparse.Namespace)"""
    if options is None:
        return default
    if isinstance(options, dict):
        value = options.get(name, default)
    else:
        value = getattr(options, name, default)
    return default if value is None else value


class GaugeAgent:
    """
    Watchman Gauge Agent principal

    Cette classe construit une seule fois l'état partagé (DeltaStore), le
    collecteur de la plateforme, l'inspecteur et le scheduler.
    """

    def __init__(self, options=None):
        """
        Initialise l'agent

        Args:
            options: dict ou objet fournissant hostname, interval, config,
                dry_run et sink (tous optionnels)

        Raises:
            UnsupportedPlatform: Aucun collecteur pour cette plateforme
            InvalidConfiguration: Configuration rejetée par validate()
        """
        self.config = AgentConfig(_option(options, 'config'))
        if not self.config.validate():
            raise InvalidConfiguration(self.config.config_file)

        self.logger = AgentLogger(self.config)
        self.app_logger = self.logger.get_logger()
        self.logger.log_config_info(self.config)

        agent_config = self.config.get_agent_config()
        self.hostname = (_option(options, 'hostname')
                         or agent_config['hostname']
                         or socket.gethostname())
        self.interval = int(_option(options, 'interval', agent_config['interval']))

        # État partagé pour toute la durée du processus
        self.store = DeltaStore()
        self.probe = get_platform_probe(
            self.store,
            logger=self.app_logger,
            runner=CommandRunner(timeout=agent_config['command_timeout'])
        )
        self.inspector = Inspector(self.probe, self.store, self.logger)

        self.sink = _option(options, 'sink')
        if self.sink is None:
            if _option(options, 'dry_run', False):
                self.sink = LoggingGaugeSink(self.logger)
            else:
                self.sink = GaugeSender(self.config, self.logger)

        self.scheduler = MetricsScheduler(
            self.inspector,
            self.sink,
            self.hostname,
            self.logger,
            interval=self.interval
        )

        self.app_logger.info("Watchman Gauge Agent initialisé")

    def run_service_mode(self):
        """
        Lance la boucle de collecte jusqu'à réception d'un signal d'arrêt
        """
        self.app_logger.info("Démarrage du Watchman Gauge Agent en mode service")
        self._setup_signal_handlers()

        try:
            self.scheduler.run()
        except KeyboardInterrupt:
            self.app_logger.info("Interruption clavier détectée")
        finally:
            self.shutdown()

    def run_once(self) -> int:
        """
        Effectue un seul cycle de collecte et d'envoi

        Returns:
            int: Nombre de jauges transmises
        """
        self.app_logger.info("=== Collecte unique ===")
        return self.scheduler.run_once()

    def _setup_signal_handlers(self):
        """
        Configure les gestionnaires de signaux pour l'arrêt propre
        """
        # signal.signal n'est utilisable que depuis le thread principal
        if threading.current_thread() is not threading.main_thread():
            return

        def signal_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            self.app_logger.info(f"Signal {signal_name} reçu - Arrêt en cours...")
            self.scheduler.stop()

        if hasattr(signal, 'SIGTERM'):
            signal.signal(signal.SIGTERM, signal_handler)

        if hasattr(signal, 'SIGINT'):
            signal.signal(signal.SIGINT, signal_handler)

    def shutdown(self):
        """
        Arrête proprement l'agent
        """
        self.scheduler.stop()
        if isinstance(self.sink, GaugeSender):
            self.sink.close()
        self.app_logger.info("Watchman Gauge Agent arrêté proprement")

    def get_status(self) -> dict:
        """
        Retourne le statut actuel de l'agent

        Returns:
            dict: Statut de tous les composants
        """
        status = {
            'hostname': self.hostname,
            'scheduler': self.scheduler.get_status(),
            'inspector': self.inspector.get_inspection_stats(),
            'config': {
                'file': self.config.config_file,
                'valid': self.config.validate()
            }
        }
        if isinstance(self.sink, GaugeSender):
            status['sender'] = self.sink.get_stats()
        return status


def run(options=None) -> Optional[int]:
    """
    Lance l'agent de métriques

    Args:
        options: dict ou objet fournissant au minimum 'hostname' (nom d'hôte
            de la machine par défaut) ; 'interval', 'config', 'once',
            'dry_run' et 'sink' sont optionnels

    Returns:
        int: Nombre de jauges transmises en mode 'once', None sinon
    """
    agent = GaugeAgent(options)

    if _option(options, 'once', False):
        return agent.run_once()

    agent.run_service_mode()
    return None


def main(argv=None) -> int:
    """
    Point d'entrée principal avec gestion des arguments de ligne de commande
    """
    parser = argparse.ArgumentParser(
        description="Watchman Gauge Agent - Envoi périodique de l'utilisation des ressources"
    )

    parser.add_argument('--config', '-c', type=str,
                        help='Chemin vers le fichier de configuration')
    parser.add_argument('--hostname', type=str,
                        help="Préfixe des métriques (nom d'hôte de la machine par défaut)")
    parser.add_argument('--interval', '-i', type=int,
                        help='Intervalle de rapport en secondes')
    parser.add_argument('--once', action='store_true',
                        help='Effectue une seule collecte puis termine')
    parser.add_argument('--dry-run', action='store_true',
                        help='Journalise les jauges au lieu de les envoyer')
    parser.add_argument('--create-config', action='store_true',
                        help='Crée un fichier de configuration par défaut')
    parser.add_argument('--validate-config', action='store_true',
                        help='Valide la configuration actuelle')

    args = parser.parse_args(argv)

    if args.create_config:
        if not args.config:
            print("❌ --config est requis avec --create-config")
            return 1
        try:
            create_default_config(args.config)
            print(f"✅ Configuration par défaut créée: {args.config}")
            return 0
        except OSError as e:
            print(f"❌ Erreur création configuration: {e}")
            return 1

    if args.validate_config:
        if AgentConfig(args.config).validate():
            print("✅ Configuration valide")
            return 0
        print("❌ Configuration invalide")
        return 1

    if args.interval is not None and args.interval <= 0:
        print("❌ L'intervalle doit être un entier positif")
        return 1

    try:
        run(args)
        return 0

    except (UnsupportedPlatform, InvalidConfiguration) as e:
        print(f"❌ {e}")
        return 1
    except KeyboardInterrupt:
        print("\n🛑 Arrêt demandé par l'utilisateur")
        return 0


if __name__ == '__main__':
    sys.exit(main())
