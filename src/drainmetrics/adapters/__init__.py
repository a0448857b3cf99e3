"""Adapters implementing the pipeline's collaborators."""
