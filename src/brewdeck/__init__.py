"""brewdeck - an interactive inventory manager for Homebrew packages."""

__version__ = "0.3.0"
