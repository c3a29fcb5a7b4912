from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal('0.01')


def to_money(value) -> Decimal:
    """Coerce config strings, floats or Decimals to a cent-rounded Decimal."""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def halve(prize) -> Decimal:
    return (to_money(prize) / 2).quantize(CENT, rounding=ROUND_HALF_UP)


def price_guess(prize_before, previous_guess_count: int) -> Decimal:
    """Prize left after a guess.

    The opening guess on a game costs nothing; every guess after it halves
    the pool.
    """
    if previous_guess_count == 0:
        return to_money(prize_before)
    return halve(prize_before)


def price_hint(prize_before) -> Decimal:
    """Hints always halve the pool, however many guesses came before."""
    return halve(prize_before)
