"""Conversation core: relevance selection, session state, prompts, provider payloads."""
