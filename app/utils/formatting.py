"""
==============================================================================
Price Formatting Module
==============================================================================

Rupee formatting with Indian digit grouping.

The last three digits form one group and every group above that has two
digits, so 1234567 renders as 12,34,567.

==============================================================================
"""

CURRENCY_PREFIX = "₹ "


def group_indian(amount: int) -> str:
    """
    Group digits in the Indian numbering style.

    Example:
        >>> group_indian(1234567)
        '12,34,567'
    """
    digits = str(abs(amount))
    if len(digits) > 3:
        head, tail = digits[:-3], digits[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        digits = ",".join(groups + [tail])
    return f"-{digits}" if amount < 0 else digits


def format_inr(amount: int) -> str:
    """Format a whole-rupee amount for display, e.g. '₹ 4,999'."""
    return f"{CURRENCY_PREFIX}{group_indian(amount)}"
