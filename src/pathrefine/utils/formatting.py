"""Number formatting helpers shared by the serializers."""

import math


def format_number(value: float, precision: int) -> str:
    """Format a coordinate with fixed precision and no trailing zeros.

    Args:
        value: Number to format
        precision: Maximum decimal digits

    Returns:
        Compact decimal string; non-finite values are written as 0

    Examples:
        >>> format_number(100.0, 2)
        '100'
        >>> format_number(-0.004, 2)
        '0'
        >>> format_number(3.14159, 3)
        '3.142'
    """
    if not math.isfinite(value):
        return "0"
    text = f"{value:.{precision}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("-0", ""):
        return "0"
    return text
