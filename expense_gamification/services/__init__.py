"""
Service Layer Package

- GamificationService: activity recording, profile and achievement queries,
  budget classification
- ServiceContainer: lazy wiring of settings, storage and services
"""

from expense_gamification.services.container import ServiceContainer, create_storage, init_container
from expense_gamification.services.gamification_service import GamificationService

__all__ = [
    "ServiceContainer",
    "create_storage",
    "init_container",
    "GamificationService",
]
