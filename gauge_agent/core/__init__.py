"""
Module Core - Composants principaux de l'agent de métriques

Ce module contient les fonctionnalités de base de l'agent :
- Configuration
- Logging
- Mémoire de deltas
- Inspection (cycle de collecte)
- Planification alignée sur l'horloge
- Communication avec le collecteur
"""
