"""Report builders: rental prices, sports statistics, factory reliability."""

from analysis_reports.reports.base import Report

__all__ = ["Report"]
