"""Dev wizard answers: identity resolution and persisted prompt answers."""

__version__ = "0.4.0"
