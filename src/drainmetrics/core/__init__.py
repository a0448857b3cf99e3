"""Core domain: models, ports and the line-to-record pipeline."""
