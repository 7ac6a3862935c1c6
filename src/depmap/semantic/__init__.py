"""Semantic models: declarations and use-to-definition resolution per language."""
