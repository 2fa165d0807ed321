"""
System prompt composition.

The admin-authored persona (training materials filed under "System
Prompts") arrives inside the rendered training context, so the context is
used verbatim as the instruction base. Fixed formatting and closed-book
directives are always appended; they are not editable from the admin UI.

Dependencies: None
System role: Instruction text for the upstream model
"""

DEFAULT_PERSONA = (
    "You are OnboardingBuddy, an AI assistant helping new employees with their onboarding journey."
)

HUMAN_CONTACT_FALLBACK = (
    "I don't have that information in my training materials. "
    "Please contact your manager or HR department for assistance."
)

FORMATTING_RULES = """MANDATORY OUTPUT FORMATTING RULES:
- Format every reply as clean HTML using only these tags: <h3>, <h4>, <p>, <ul>, <ol>, <li>, <strong>, <em>, <a>, <br>.
- Never use raw Markdown: no ** or __ for emphasis, no # headings, no - or * bullet markers, no [text](url) links.
- Never wrap the reply, or any part of it, in fenced code blocks (``` or ```html).
- Do not include <html>, <head>, <body> or <style> tags; return only the reply fragment.
- Keep paragraphs short and use lists for steps or checklists."""

CLOSED_BOOK_RULES = f"""STRICT KNOWLEDGE CONSTRAINTS:
- Answer ONLY from the training materials and attached files supplied in this conversation.
- Do not use general knowledge, assumptions or outside sources to fill gaps.
- If the supplied context does not cover the question, say so explicitly and reply: "{HUMAN_CONTACT_FALLBACK}"
- Never invent policies, names, dates, links or procedures."""

PROMPT_SUFFIX = f"{FORMATTING_RULES}\n\n{CLOSED_BOOK_RULES}"


class PromptBuilder:
    """Builds the system prompt sent with every provider request."""

    def __init__(self, default_persona: str = DEFAULT_PERSONA) -> None:
        self.default_persona = default_persona

    def build(self, training_context: str) -> str:
        """
        Compose the system prompt.

        Args:
            training_context: Rendered training materials (may be empty)

        Returns:
            str: Context (or default persona) followed by the fixed rule blocks
        """
        base = training_context.strip() if training_context and training_context.strip() else self.default_persona
        return f"{base}\n\n{PROMPT_SUFFIX}"
