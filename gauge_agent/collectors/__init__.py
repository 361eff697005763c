"""
Package des collecteurs de métriques

Ce package contient :
- Le collecteur de base (classe abstraite) et l'exécuteur de commandes
- Les fonctions d'analyse des sorties d'utilitaires
- Les collecteurs spécifiques par plateforme
"""
