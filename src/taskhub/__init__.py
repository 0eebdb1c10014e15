"""taskhub: team and task collaboration backend."""

__version__ = "1.0.0"
