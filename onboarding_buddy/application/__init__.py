"""Application services: chat orchestration and material administration."""
