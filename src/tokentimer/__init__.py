"""tokentimer: token-addressed interval timers."""

__version__ = "0.1.0"
