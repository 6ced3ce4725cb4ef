"""Reader and structural checker for the union-syntax proposal document."""

__version__ = "0.1.0"
