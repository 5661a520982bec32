"""Numeric helpers."""


def percent_half_up(part: int, total: int) -> int:
    """Integer percentage of ``part`` over ``total``, rounding halves up.

    Returns 0 when ``total`` is 0. Uses integer arithmetic so results do not
    depend on float representation (1/6 -> 17, 1/8 -> 13).

    >>> percent_half_up(1, 3)
    33
    >>> percent_half_up(1, 8)
    13
    """
    if total <= 0:
        return 0
    return (part * 200 + total) // (total * 2)
