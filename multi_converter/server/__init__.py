"""HTTP API for the multi-format converter."""
