from datetime import UTC, datetime, timedelta
import math

import pytest

from goalplan.financial import (
    future_value_of_present,
    net_target_after_existing,
    periods_per_year,
    required_lump_sum_for_future_value,
    required_payment_for_future_value,
    year_fraction_from_dates,
)


def _accumulate(payment: float, rate_percent: float, n_per_year: int, periods: int) -> float:
    periodic_rate = rate_percent / 100 / n_per_year
    balance = 0.0
    for _ in range(periods):
        balance = balance * (1 + periodic_rate) + payment
    return balance


def test_periods_per_year():
    assert periods_per_year("monthly") == 12
    assert periods_per_year("yearly") == 1


def test_year_fraction_uses_julian_year():
    start = datetime(2026, 1, 1, tzinfo=UTC)
    assert year_fraction_from_dates(start, start + timedelta(days=365.25 * 3)) == pytest.approx(3.0)
    assert year_fraction_from_dates(start, start - timedelta(days=365.25)) == pytest.approx(-1.0)


@pytest.mark.parametrize(
    ("rate", "n_per_year", "years"),
    [
        (6.0, 12, 10),
        (4.5, 1, 7),
        (12.0, 12, 3),
        (0.5, 12, 25),
    ],
)
def test_payment_reconstructs_net_target(rate, n_per_year, years):
    net_target = 75000.0
    payment = required_payment_for_future_value(net_target, rate, n_per_year, years)

    assert _accumulate(payment, rate, n_per_year, n_per_year * years) == pytest.approx(net_target, rel=1e-9)


def test_ten_year_monthly_payment_value():
    payment = required_payment_for_future_value(120000, 6, 12, 10)

    assert payment == pytest.approx(120000 * 0.005 / (1.005**120 - 1))
    assert payment == pytest.approx(732.25, abs=0.05)


def test_zero_rate_is_straight_division():
    assert required_payment_for_future_value(12000, 0, 12, 10) == 100.0
    assert required_payment_for_future_value(5000, 0, 1, 4) == 1250.0


def test_payment_decreases_as_rate_increases():
    payments = [required_payment_for_future_value(50000, rate, 12, 8) for rate in (0.5, 1, 3, 6, 10, 25)]

    assert all(later < earlier for earlier, later in zip(payments, payments[1:]))


def test_no_periods_returns_remaining_target_or_zero():
    assert required_payment_for_future_value(8000, 5, 12, 0) == 8000
    assert required_payment_for_future_value(8000, 5, 12, -1.5) == 8000
    assert required_payment_for_future_value(0, 5, 12, 0) == 0.0


def test_lump_sum_discounts_net_target():
    lump = required_lump_sum_for_future_value(10000, 6, 12, 5)

    assert lump == pytest.approx(10000 / 1.005**60)
    assert future_value_of_present(lump, 6, 12, 5) == pytest.approx(10000)


def test_lump_sum_degenerate_horizon_and_rate():
    assert required_lump_sum_for_future_value(10000, 6, 12, 0) == 10000
    assert required_lump_sum_for_future_value(10000, 0, 12, 5) == 10000


def test_future_value_of_present_passthrough():
    assert future_value_of_present(1000, 0, 12, 5) == 1000
    assert future_value_of_present(1000, 5, 12, 0) == 1000
    assert future_value_of_present(1000, 10, 1, 2) == pytest.approx(1210)


def test_net_target_subtracts_grown_existing_savings():
    net = net_target_after_existing(20000, 5000, 6, 12, 5)

    assert net == pytest.approx(20000 - 5000 * 1.005**60)


def test_net_target_never_negative():
    assert net_target_after_existing(1000, 5000, 6, 12, 5) == 0.0
    assert required_payment_for_future_value(0.0, 6, 12, 5) == 0.0


def test_rate_at_or_below_minus_one_hundred_percent_is_not_computable():
    payment = required_payment_for_future_value(10000, -1500, 12, 5)
    lump = required_lump_sum_for_future_value(10000, -1500, 12, 5)

    assert not math.isfinite(payment)
    assert not math.isfinite(lump)


def test_huge_growth_does_not_raise():
    payment = required_payment_for_future_value(10000, 100, 12, 10000)
    lump = required_lump_sum_for_future_value(10000, 100, 12, 10000)

    assert payment == 0.0
    assert lump == 0.0
