"""
Conversation history reconstruction.

Turns the flattened ``"Human: ..."``/``"Assistant: ..."`` log kept by the
session store back into role-tagged pairs. Only complete human/assistant
pairs survive; assistant-only entries (welcome turns), malformed entries and
an unpaired trailing entry are dropped.

Dependencies: onboarding_buddy.models.conversation
System role: History replay for provider payloads
"""

from collections.abc import Sequence

from onboarding_buddy.models.conversation import ASSISTANT_PREFIX, HUMAN_PREFIX


def split_history(log: Sequence[str]) -> list[tuple[str, str]]:
    """
    Split a flattened log into ``(user, assistant)`` pairs, oldest first.

    Args:
        log: Flattened history entries

    Returns:
        list[tuple[str, str]]: Complete pairs with prefixes stripped
    """
    pairs: list[tuple[str, str]] = []
    i = 0
    while i < len(log):
        entry = log[i]
        if (
            entry.startswith(HUMAN_PREFIX)
            and i + 1 < len(log)
            and log[i + 1].startswith(ASSISTANT_PREFIX)
        ):
            pairs.append((entry[len(HUMAN_PREFIX):], log[i + 1][len(ASSISTANT_PREFIX):]))
            i += 2
        else:
            i += 1
    return pairs


def flatten_history(pairs: Sequence[tuple[str, str]]) -> str:
    """Serialize pairs into a single transcript string."""
    lines: list[str] = []
    for user, assistant in pairs:
        lines.append(f"{HUMAN_PREFIX}{user}")
        lines.append(f"{ASSISTANT_PREFIX}{assistant}")
    return "\n".join(lines)
