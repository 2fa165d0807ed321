"""Boundary adapters: upstream model provider and training-material store."""
