"""Display formatting for report values."""


def format_currency(value: float | None) -> str:
    """Dollar amount with thousands separators and two decimals.

    A missing value renders as an empty string.
    """
    if value is None:
        return ""
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def format_percentage(value: float) -> str:
    return f"{value:.1f}%"
