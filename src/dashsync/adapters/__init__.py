"""Source adapters for dashsync."""
