"""Application layer - use cases built on the provider port."""
