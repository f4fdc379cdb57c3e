"""Portfolio admin - ordered collection editing against the portfolio REST API."""

__version__ = "0.1.0"
