"""Core offload engine: identity, upload coordination, rewriting, pruning."""
