"""
Exceptions de l'agent de métriques

Taxonomie des erreurs rencontrées pendant la collecte :
- CommandUnavailable : utilitaire ou pseudo-fichier absent de l'hôte
- ParseFailure : sortie d'un utilitaire dans un format inattendu
- UnsupportedPlatform : aucun collecteur pour le système d'exploitation
- InvalidConfiguration : configuration inutilisable au démarrage
"""


class GaugeAgentError(Exception):
    """Classe de base des erreurs de l'agent"""


class CommandUnavailable(GaugeAgentError):
    """
    Utilitaire (ou pseudo-fichier) requis absent ou inutilisable

    Le groupe de métriques concerné est ignoré pour ce cycle.
    """

    def __init__(self, command: str, detail: str = ""):
        self.command = command
        self.detail = detail
        message = f"Commande indisponible: {command}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class ParseFailure(GaugeAgentError):
    """Sortie d'un utilitaire présent qui ne correspond pas au format attendu"""

    def __init__(self, source: str, detail: str = ""):
        self.source = source
        self.detail = detail
        message = f"Sortie non reconnue pour {source}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class UnsupportedPlatform(GaugeAgentError):
    """Aucun collecteur n'existe pour cette plateforme - fatal au démarrage"""

    def __init__(self, platform: str):
        self.platform = platform
        super().__init__(f"Plateforme non supportée: {platform}")


class InvalidConfiguration(GaugeAgentError):
    """Fichier de configuration rejeté par AgentConfig.validate() - fatal au démarrage"""

    def __init__(self, config_file: str):
        self.config_file = config_file
        super().__init__(f"Configuration invalide: {config_file}")
