"""FreightSmith - freight tracking header resolution and container risk engine."""

__version__ = "0.1.0"
