"""
Utility functions for generating consistent reference formats for various entities.
"""

import random
import string
from datetime import date


def generate_quote_number(quote_date: date, sequence: int) -> str:
    """
    Generate a quote number in the format WH-YYYYMMDD-NNN.

    Args:
        quote_date (date): The day the quote is issued
        sequence (int): The 1-based position of the quote within that day

    Returns:
        str: A formatted quote number (e.g., WH-20240101-007)
    """
    return f"{quote_number_prefix(quote_date)}{sequence:03d}"


def quote_number_prefix(quote_date: date) -> str:
    return f"WH-{quote_date:%Y%m%d}-"


def generate_booking_reference(booking_date: date) -> str:
    """
    Generate a booking reference in the format BK-YYYYMMDD-XXXXXX.

    Returns:
        str: A reference with a random 6-character suffix (e.g., 'BK-20240101-X7K9M2')
    """
    characters = string.ascii_uppercase + string.digits
    suffix = "".join(random.choices(characters, k=6))
    return f"BK-{booking_date:%Y%m%d}-{suffix}"

