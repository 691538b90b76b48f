"""
overdose_trends/validators package marker.
"""

from overdose_trends.validators.value_parsers import date_key, parse_date, parse_number

__all__ = [
    "date_key",
    "parse_date",
    "parse_number",
]
