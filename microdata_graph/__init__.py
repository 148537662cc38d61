"""microdata-graph: HTML microdata to JSON-LD graph extraction."""

__version__ = "0.1.0"
