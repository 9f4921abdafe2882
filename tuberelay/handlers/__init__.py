"""Chat command handlers."""
