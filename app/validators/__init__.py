"""
app/validators package marker.
"""

from app.validators.csv_validator import NUMERIC_FIELDS, REQUIRED_FIELDS, TalkRowValidator

__all__ = [
    "NUMERIC_FIELDS",
    "REQUIRED_FIELDS",
    "TalkRowValidator",
]
