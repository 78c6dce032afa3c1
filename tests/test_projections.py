import pytest

from fire_core import (
    AccumulationParams,
    DecumulationParams,
    ExtraEvent,
    inflate,
    net_cash_flow,
    project_accumulation,
    project_decumulation,
)


@pytest.mark.parametrize("years", [0, 1, 10, 40])
def test_inflate_zero_rate_is_identity(years):
    assert inflate(12_345.0, 0.0, years) == 12_345.0


@pytest.mark.parametrize("rate", [-0.03, 0.0, 0.02, 0.5])
def test_inflate_zero_years_is_identity(rate):
    assert inflate(12_345.0, rate, 0) == 12_345.0


def test_inflate_compounds():
    assert inflate(20_200, 0.02, 15) == pytest.approx(20_200 * 1.02 ** 15)


def test_net_cash_flow_sums_matching_events():
    incomes = [
        ExtraEvent(1, 10_000, 60, "payout"),
        ExtraEvent(2, 5_000, 60, "gift"),
        ExtraEvent(3, 7_000, 61, "other year"),
        ExtraEvent(4, -3_000, 60, "negative is ignored"),
    ]
    expenses = [
        ExtraEvent(1, 4_000, 60, "car"),
        ExtraEvent(2, 0, 60, "zero is ignored"),
    ]
    assert net_cash_flow(incomes, expenses, 60) == 11_000
    assert net_cash_flow(incomes, expenses, 61) == 7_000
    assert net_cash_flow(incomes, expenses, 62) == 0
    assert net_cash_flow([], expenses, 60) == -4_000


def test_accumulation_matches_closed_form():
    initial, contribution, rate, inflation, years = 250_000, 1_000, 0.07 * (1 - 0.26), 0.02, 15
    result = project_accumulation(
        AccumulationParams(
            initial_value=initial,
            monthly_contribution=contribution,
            annual_return=rate,
            annual_inflation=inflation,
            years=years,
            start_age=44,
            general_expenses=20_200,
        )
    )

    m = rate / 12
    growth = (1 + m) ** 12
    expected = initial * growth ** years
    for y in range(years):
        yearly_contribution_fv = contribution * (1 + inflation) ** y * (growth - 1) / m
        expected += yearly_contribution_fv * growth ** (years - 1 - y)

    assert result.final_value == pytest.approx(expected, rel=1e-10)
    assert len(result.yearly_points) == years + 1
    assert result.yearly_points[0].age == 44
    assert result.yearly_points[0].value == 250_000
    assert result.yearly_points[-1].age == 59
    assert result.yearly_points[-1].value == pytest.approx(expected, abs=0.5)


def test_accumulation_without_growth_adds_only_extra_events():
    incomes = (
        ExtraEvent(1, 500, 32, "bonus"),
        ExtraEvent(2, 800, 30, "at start age, never applied"),
        ExtraEvent(3, 900, 40, "after the horizon"),
    )
    expenses = (ExtraEvent(1, 300, 33, "trip"), ExtraEvent(2, -50, 31, "ignored"))
    result = project_accumulation(
        AccumulationParams(
            initial_value=1_000,
            monthly_contribution=0,
            annual_return=0,
            annual_inflation=0.03,
            years=5,
            start_age=30,
            extra_incomes=incomes,
            extra_expenses=expenses,
        )
    )
    assert result.final_value == 1_200
    assert [p.value for p in result.yearly_points] == [1_000, 1_000, 1_500, 1_200, 1_200, 1_200]


def test_accumulation_reports_inflated_expenses_and_mortgage():
    result = project_accumulation(
        AccumulationParams(
            initial_value=0,
            monthly_contribution=100,
            annual_return=0,
            annual_inflation=0.02,
            years=4,
            start_age=40,
            general_expenses=10_000,
            fixed_annual_mortgage=6_600,
            mortgage_end_age=42,
        )
    )
    points = result.yearly_points
    assert [p.general_expenses for p in points] == [
        10_000,
        10_200,
        10_404,
        round(10_000 * 1.02 ** 3),
        round(10_000 * 1.02 ** 4),
    ]
    assert points[0].total_expenses == 16_600
    assert points[2].total_expenses == 10_404 + 6_600
    assert points[3].total_expenses == points[3].general_expenses
    # contribution grows with inflation once per year
    assert result.final_value == pytest.approx(1_200 * (1 + 1.02 + 1.02 ** 2 + 1.02 ** 3))
    assert all(p.pension_income is None for p in points)


def test_accumulation_keeps_going_when_negative():
    result = project_accumulation(
        AccumulationParams(
            initial_value=1_000,
            monthly_contribution=0,
            annual_return=0,
            annual_inflation=0,
            years=3,
            start_age=30,
            extra_expenses=(ExtraEvent(1, 5_000, 31, "loss"),),
        )
    )
    assert result.final_value == -4_000
    assert len(result.yearly_points) == 4


def _decumulation(**overrides) -> DecumulationParams:
    params = dict(
        start_value=100_000,
        initial_annual_withdrawal=30_000,
        annual_return=0.0,
        annual_inflation=0.0,
        duration=10,
        retirement_age=60,
    )
    params.update(overrides)
    return DecumulationParams(**params)


def test_decumulation_from_zero_stops_immediately():
    points = project_decumulation(_decumulation(start_value=0))
    assert len(points) == 1
    assert points[0].age == 61
    assert points[0].value == 0


def test_decumulation_stops_at_depletion_and_never_goes_negative():
    points = project_decumulation(_decumulation())
    assert [p.value for p in points] == [70_000, 40_000, 10_000, 0]
    assert [p.age for p in points] == [61, 62, 63, 64]
    assert all(p.value >= 0 for p in points)


def test_decumulation_late_income_revives_depleted_portfolio():
    points = project_decumulation(
        _decumulation(extra_incomes=(ExtraEvent(1, 50_000, 64, "inheritance"),))
    )
    assert [p.value for p in points] == [70_000, 40_000, 10_000, 50_000, 20_000, 0]


def test_decumulation_extra_expense_is_clamped_to_zero():
    points = project_decumulation(
        _decumulation(
            initial_annual_withdrawal=0,
            extra_expenses=(ExtraEvent(1, 150_000, 61, "house"),),
        )
    )
    assert len(points) == 1
    assert points[0].value == 0


def test_decumulation_pension_starts_at_start_age_and_revalues():
    points = project_decumulation(
        _decumulation(
            start_value=2_000_000,
            initial_annual_withdrawal=20_000,
            annual_return=0.05,
            annual_inflation=0.02,
            pension_at_start_age=12_000,
            pension_start_age=63,
            pension_revaluation_rate=0.01,
        )
    )
    by_age = {p.age: p for p in points}
    assert by_age[61].pension_income == 0
    assert by_age[62].pension_income == 0
    assert by_age[63].pension_income == 12_000
    assert by_age[64].pension_income == 12_120
    assert by_age[65].pension_income == round(12_000 * 1.01 ** 2)
    assert by_age[61].general_expenses == 20_000
    assert by_age[62].general_expenses == 20_400


def test_decumulation_mortgage_ends_after_end_age():
    points = project_decumulation(
        _decumulation(
            start_value=1_000_000,
            initial_annual_withdrawal=20_000,
            fixed_annual_mortgage=6_600,
            mortgage_end_age=65,
        )
    )
    by_age = {p.age: p for p in points}
    assert by_age[65].total_expenses == 26_600
    assert by_age[66].total_expenses == 20_000


def test_decumulation_pension_above_expenses_never_adds_cash():
    points = project_decumulation(
        _decumulation(
            initial_annual_withdrawal=10_000,
            pension_at_start_age=15_000,
            pension_start_age=0,
        )
    )
    assert len(points) == 10
    assert all(p.value == 100_000 for p in points)


def test_decumulation_balance_rounding_to_zero_keeps_going():
    points = project_decumulation(
        _decumulation(
            start_value=12_000.4,
            initial_annual_withdrawal=12_000,
            pension_at_start_age=12_000,
            pension_start_age=62,
            duration=5,
        )
    )
    assert [p.age for p in points] == [61, 62, 63, 64, 65]
    assert all(p.value == 0 for p in points)
