"""Coffee shop ordering and delivery batching."""
