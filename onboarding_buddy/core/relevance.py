"""
Training material relevance selection.

Ranks active training materials against a user query and renders the
selection into the context blob injected into the model prompt.

Empty query (first exchange of a session): persona/system-prompt material
plus onboarding guidance. Non-empty query: keyword scoring over title,
category and content, falling back to the first materials in canonical
order so the model never receives an empty context.

Dependencies: onboarding_buddy.models
System role: Context retrieval for the conversation orchestrator
"""

import logging
from collections.abc import Iterable, Sequence

from onboarding_buddy.models.attachment import FileAttachment
from onboarding_buddy.models.training_material import TrainingMaterial

logger = logging.getLogger(__name__)

MAX_RESULTS = 5
MAX_INITIAL_CANDIDATES = 8
FALLBACK_COUNT = 3
MIN_TOKEN_LENGTH = 3

TITLE_WEIGHT = 3
CATEGORY_WEIGHT = 2
CONTENT_WEIGHT = 1

ONBOARDING_KEYWORDS = ("onboarding", "welcome", "getting started", "getting-started")


def canonical_order(materials: Iterable[TrainingMaterial]) -> list[TrainingMaterial]:
    """Sort materials by (category, title), case-insensitively."""
    return sorted(materials, key=lambda m: (m.category.lower(), m.title.lower()))


def tokenize(query: str) -> list[str]:
    """Lowercase whitespace tokens, dropping those shorter than three characters."""
    return [t for t in query.lower().split() if len(t) >= MIN_TOKEN_LENGTH]


def score_material(material: TrainingMaterial, tokens: Sequence[str]) -> int:
    """
    Keyword relevance score.

    Each token adds 3 if it occurs in the title, 2 if in the category and
    1 if in the content (substring match, case-insensitive).
    """
    title = material.title.lower()
    category = material.category.lower()
    content = material.content.lower()

    score = 0
    for token in tokens:
        if token in title:
            score += TITLE_WEIGHT
        if token in category:
            score += CATEGORY_WEIGHT
        if token in content:
            score += CONTENT_WEIGHT
    return score


class MaterialRelevanceSelector:
    """Selects and renders the training materials relevant to a query."""

    def select(
        self,
        materials: Sequence[TrainingMaterial],
        query: str,
    ) -> list[TrainingMaterial]:
        """
        Select up to five materials for a query.

        Args:
            materials: Candidate materials (inactive ones are ignored)
            query: User message, or empty for the initial session load

        Returns:
            list[TrainingMaterial]: Ranked selection, at most five entries
        """
        active = canonical_order(m for m in materials if m.is_active)
        if not active:
            return []

        if not query or not query.strip():
            return self._select_initial(active)
        return self._select_by_keywords(active, query)

    def _select_initial(self, active: list[TrainingMaterial]) -> list[TrainingMaterial]:
        system = [m for m in active if "system" in m.category.lower()]
        onboarding = [m for m in active if _mentions_onboarding(m)]

        candidates: list[TrainingMaterial] = []
        seen: set[str] = set()
        for material in system + onboarding:
            if material.id not in seen:
                seen.add(material.id)
                candidates.append(material)
        candidates = candidates[:MAX_INITIAL_CANDIDATES]

        if len(candidates) < MAX_RESULTS:
            for material in active:
                if len(candidates) >= MAX_RESULTS:
                    break
                if material.id not in seen:
                    seen.add(material.id)
                    candidates.append(material)

        logger.debug(
            "Initial material selection",
            extra={"candidate_count": len(candidates), "active_count": len(active)},
        )
        return candidates[:MAX_RESULTS]

    def _select_by_keywords(
        self,
        active: list[TrainingMaterial],
        query: str,
    ) -> list[TrainingMaterial]:
        tokens = tokenize(query)
        scored = [(score_material(m, tokens), m) for m in active]
        # sorted() is stable, so equal scores keep canonical order
        ranked = sorted(
            ((score, m) for score, m in scored if score > 0),
            key=lambda pair: pair[0],
            reverse=True,
        )
        if not ranked:
            logger.debug("No keyword match, using fallback materials", extra={"token_count": len(tokens)})
            return active[:FALLBACK_COUNT]
        return [m for _, m in ranked[:MAX_RESULTS]]

    def render(self, materials: Sequence[TrainingMaterial]) -> str:
        """
        Render selected materials into one context string.

        Each material becomes ``**{title}** (Category: {category})`` followed
        by its content and any processed attachment text; blocks are
        separated by blank lines and keep selection order.
        """
        return "\n\n".join(_render_material(m) for m in materials)


def _mentions_onboarding(material: TrainingMaterial) -> bool:
    haystack = f"{material.category} {material.title}".lower()
    return any(keyword in haystack for keyword in ONBOARDING_KEYWORDS)


def _render_material(material: TrainingMaterial) -> str:
    parts = [f"**{material.title}** (Category: {material.category})\n{material.content}"]
    for attachment in material.attachments:
        if attachment.has_processed_text:
            parts.append(f"{_attachment_heading(attachment)}\n{attachment.processed_content.strip()}")
    return "\n\n".join(parts)


def _attachment_heading(attachment: FileAttachment) -> str:
    if attachment.description and attachment.description.strip():
        return f"Attachment ({attachment.description.strip()}): {attachment.original_file_name}"
    return f"Attachment: {attachment.original_file_name}"
