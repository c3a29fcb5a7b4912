from decimal import Decimal

from app.services.games.pricing import halve, price_guess, price_hint, to_money


def test_first_guess_is_free():
    assert price_guess(Decimal('50.00'), 0) == Decimal('50.00')


def test_later_guesses_halve():
    assert price_guess(Decimal('50.00'), 1) == Decimal('25.00')
    assert price_guess(Decimal('25.00'), 4) == Decimal('12.50')


def test_hint_always_halves():
    assert price_hint(Decimal('50.00')) == Decimal('25.00')
    assert price_hint(Decimal('12.50')) == Decimal('6.25')


def test_halving_rounds_to_cents():
    assert halve(Decimal('6.25')) == Decimal('3.13')
    assert halve('0.01') == Decimal('0.01')


def test_prize_never_increases_under_repeated_halving():
    prize = to_money('50.00')
    for _ in range(20):
        nxt = price_hint(prize)
        assert nxt <= prize
        prize = nxt
    assert prize >= Decimal('0.00')


def test_to_money_accepts_config_strings_and_floats():
    assert to_money('7.5') == Decimal('7.50')
    assert to_money(7.5) == Decimal('7.50')
