"""
Material store contract.

The conversation core reads training materials through this protocol only;
the SQL-backed implementation lives in the boundary layer and tests supply
in-memory fakes.

Dependencies: onboarding_buddy.models
System role: Read seam between conversation core and persistence
"""

from typing import Protocol, Sequence

from onboarding_buddy.models.training_material import TrainingMaterial


class MaterialStore(Protocol):
    async def list_active(self) -> Sequence[TrainingMaterial]:
        """Active materials with attachments, ordered by category then title."""
        ...


class InMemoryMaterialStore:
    """Fixed list of materials for tests and embedding callers."""

    def __init__(self, materials: Sequence[TrainingMaterial] | None = None) -> None:
        self.materials = list(materials or [])

    async def list_active(self) -> Sequence[TrainingMaterial]:
        active = [m for m in self.materials if m.is_active]
        return sorted(active, key=lambda m: (m.category, m.title))
