"""PharmaCare backend: catalog, point of sale, ledgers, directories and reports."""

__version__ = "0.1.0"
