"""Lock In: reward and progression engine for focus sessions."""

__version__ = "0.1.0"
