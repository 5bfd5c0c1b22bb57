"""Command implementations for brewdeck."""
