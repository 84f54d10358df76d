"""Analysis reports: rental prices, sports stats, factory reliability, regression."""

__version__ = "0.1.0"
