"""
specmap: spreadsheet ingestion, geocoding enrichment and spec aggregation.
"""

__version__ = "1.0.0"
