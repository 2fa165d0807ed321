"""
Application services.

Exports:
  - ConversationOrchestrator: Per-message chat flow
  - MaterialService: Training material administration
"""

from onboarding_buddy.application.services.material_service import MaterialService
from onboarding_buddy.application.services.orchestrator import ConversationOrchestrator

__all__ = [
    "ConversationOrchestrator",
    "MaterialService",
]
