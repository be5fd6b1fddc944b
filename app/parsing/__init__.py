"""
app/parsing package marker.
"""

from app.parsing.csv_stream import CSVStreamError, TalkCsvParser

__all__ = [
    "CSVStreamError",
    "TalkCsvParser",
]
