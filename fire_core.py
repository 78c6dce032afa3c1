"""Core functionality for FIRE projections and Monte Carlo simulations."""

from __future__ import annotations

import json
import logging
import math
import os
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np
from numba import njit, prange


logger = logging.getLogger(__name__)


# Multiple of annual net spending treated as financial independence (4% rule)
FIRE_MULTIPLIER = 25

# Simulations stop at this age unless the scenario says otherwise
DEFAULT_HORIZON_AGE = 100

DEFAULT_NUMBER_OF_SIMULATIONS = 5_000

# Paths kept for plotting when collect_paths is requested
MAX_COLLECTED_PATHS = 2_000

CURRENCY_SYMBOL = "€"

CONFIG_FILE = "fire_config.json"


def parse_percent(val: str) -> float:
    """Convert a percentage string like '26%' to a float 0.26."""

    try:
        pct = float(val.strip().rstrip("%")) / 100
    except ValueError as exc:  # pragma: no cover - error path simple
        raise ValueError(f"Invalid percentage: {val!r}") from exc
    if not 0 <= pct <= 1:
        raise ValueError("Percentage must be between 0% and 100%")
    return pct


def parse_rate(val: str) -> float:
    """Convert a signed rate string like '-1.5%' to a float -0.015."""

    try:
        return float(val.strip().rstrip("%")) / 100
    except ValueError as exc:  # pragma: no cover - error path simple
        raise ValueError(f"Invalid rate: {val!r}") from exc


def parse_dollars(val: str) -> float:
    """Convert a currency string like '€1,234' or '$1,234' to a float 1234.0."""

    cleaned = val.replace("$", "").replace(CURRENCY_SYMBOL, "").replace(",", "").strip()
    try:
        amt = float(cleaned)
    except ValueError as exc:  # pragma: no cover - error path simple
        raise ValueError(f"Invalid amount: {val!r}") from exc
    if amt < 0:
        raise ValueError("Amount cannot be negative")
    return amt


def format_currency(value: Optional[float]) -> str:
    if value is None:
        return "N/A"
    return f"{CURRENCY_SYMBOL}{value:,.0f}"


def format_axis_currency(tick: float) -> str:
    """Compact currency label for chart axes: €1.2M, €250k, €900."""
    if tick is None or math.isnan(tick):
        return ""
    if abs(tick) >= 1_000_000:
        return f"{CURRENCY_SYMBOL}{tick / 1_000_000:.1f}M"
    if abs(tick) >= 1_000:
        return f"{CURRENCY_SYMBOL}{tick / 1_000:.0f}k"
    return f"{CURRENCY_SYMBOL}{tick:,.0f}"


@dataclass(frozen=True)
class ExtraEvent:
    """One-time, non-inflated cash flow that lands in the year ``age`` is reached."""

    id: int
    amount: float
    age: int
    description: str = ""


def parse_extra_events(text: str) -> Tuple[ExtraEvent, ...]:
    """Parse one event per line written as ``age, amount[, description]``."""

    events = []
    for line in text.splitlines():
        line = line.strip()
        if not line:
            continue
        parts = [p.strip() for p in line.split(",", 2)]
        if len(parts) < 2:
            raise ValueError(f"Extra event needs an age and an amount: {line!r}")
        try:
            age = int(parts[0])
        except ValueError as exc:
            raise ValueError(f"Invalid event age: {parts[0]!r}") from exc
        amount = parse_dollars(parts[1])
        description = parts[2] if len(parts) > 2 else ""
        events.append(ExtraEvent(len(events) + 1, amount, age, description))
    return tuple(events)


def format_extra_events(events: Sequence[ExtraEvent]) -> str:
    """Write events back in the line format read by :func:`parse_extra_events`."""
    lines = []
    for event in events:
        # Cents survive, trailing zeros do not
        amount = f"{event.amount:.2f}".rstrip("0").rstrip(".")
        line = f"{event.age}, {amount}"
        if event.description:
            line += f", {event.description}"
        lines.append(line)
    return "\n".join(lines)


@dataclass(frozen=True)
class ProjectionDataPoint:
    age: int
    value: float
    general_expenses: float
    total_expenses: float
    pension_income: Optional[float] = None


def inflate(base_value: float, annual_rate: float, years: int) -> float:
    """Compound ``base_value`` forward by ``annual_rate`` over ``years`` years."""
    return base_value * (1 + annual_rate) ** years


def net_cash_flow(
    incomes: Sequence[ExtraEvent], expenses: Sequence[ExtraEvent], age: int
) -> float:
    """Net one-time cash flow at ``age``: matching incomes minus matching expenses.

    Events with a non-positive amount are ignored.
    """
    total = 0.0
    for income in incomes:
        if income.age == age and income.amount > 0:
            total += income.amount
    for expense in expenses:
        if expense.age == age and expense.amount > 0:
            total -= expense.amount
    return total


def _round_currency(value: float) -> float:
    # Half-up rounding; NaN stays NaN
    return float(np.floor(value + 0.5))


def _events_tuple(obj, name: str) -> None:
    object.__setattr__(obj, name, tuple(getattr(obj, name)))


@dataclass(frozen=True)
class AccumulationParams:
    initial_value: float
    monthly_contribution: float
    annual_return: float
    annual_inflation: float
    years: int
    start_age: int
    general_expenses: float = 0.0
    fixed_annual_mortgage: float = 0.0
    mortgage_end_age: int = 0
    extra_incomes: Tuple[ExtraEvent, ...] = ()
    extra_expenses: Tuple[ExtraEvent, ...] = ()

    def __post_init__(self) -> None:
        _events_tuple(self, "extra_incomes")
        _events_tuple(self, "extra_expenses")


@dataclass(frozen=True)
class AccumulationResult:
    final_value: float
    yearly_points: List[ProjectionDataPoint]


def project_accumulation(params: AccumulationParams) -> AccumulationResult:
    """Grow the portfolio month by month through the saving years.

    Contributions arrive at the end of each month after that month's growth
    and are raised by inflation once a year. The expense figures are carried
    for reporting only; nothing is withdrawn in this phase.
    """
    monthly_rate = params.annual_return / 12
    portfolio = params.initial_value
    contribution = params.monthly_contribution
    general_expenses = params.general_expenses

    initial_total = general_expenses
    if params.start_age <= params.mortgage_end_age:
        initial_total += params.fixed_annual_mortgage
    points = [
        ProjectionDataPoint(
            age=params.start_age,
            value=_round_currency(portfolio),
            general_expenses=_round_currency(general_expenses),
            total_expenses=_round_currency(initial_total),
        )
    ]

    for year in range(1, params.years + 1):
        age = params.start_age + year

        portfolio += net_cash_flow(params.extra_incomes, params.extra_expenses, age)

        general_expenses = inflate(general_expenses, params.annual_inflation, 1)
        total_expenses = general_expenses
        if age <= params.mortgage_end_age:
            total_expenses += params.fixed_annual_mortgage

        for _ in range(12):
            portfolio = portfolio * (1 + monthly_rate) + contribution

        contribution = inflate(contribution, params.annual_inflation, 1)

        points.append(
            ProjectionDataPoint(
                age=age,
                value=_round_currency(portfolio),
                general_expenses=_round_currency(general_expenses),
                total_expenses=_round_currency(total_expenses),
            )
        )

    return AccumulationResult(final_value=portfolio, yearly_points=points)


@dataclass(frozen=True)
class DecumulationParams:
    start_value: float
    initial_annual_withdrawal: float
    annual_return: float
    annual_inflation: float
    duration: int
    retirement_age: int
    fixed_annual_mortgage: float = 0.0
    mortgage_end_age: int = 0
    pension_at_start_age: float = 0.0
    pension_start_age: int = 0
    pension_revaluation_rate: float = 0.0
    extra_incomes: Tuple[ExtraEvent, ...] = ()
    extra_expenses: Tuple[ExtraEvent, ...] = ()

    def __post_init__(self) -> None:
        _events_tuple(self, "extra_incomes")
        _events_tuple(self, "extra_expenses")


def project_decumulation(params: DecumulationParams) -> List[ProjectionDataPoint]:
    """Draw the portfolio down month by month after retirement.

    The trajectory ends early at the first year closing with an empty
    portfolio; a balance that merely rounds to zero keeps going. Extra events
    are applied after the monthly loop, so a lump sum arriving in the year of
    depletion keeps the trajectory going.
    """
    monthly_rate = params.annual_return / 12
    portfolio = params.start_value
    withdrawal = params.initial_annual_withdrawal
    # Pension is already expressed at its start age
    pension = params.pension_at_start_age
    points: List[ProjectionDataPoint] = []

    for year in range(1, params.duration + 1):
        age = params.retirement_age + year

        total_expenses = withdrawal
        if age <= params.mortgage_end_age:
            total_expenses += params.fixed_annual_mortgage

        pension_contribution = pension if age >= params.pension_start_age else 0.0
        monthly_withdrawal = max(0.0, total_expenses - pension_contribution) / 12

        for _ in range(12):
            portfolio *= 1 + monthly_rate
            portfolio -= monthly_withdrawal
            if portfolio <= 0:
                portfolio = 0.0
                break

        portfolio += net_cash_flow(params.extra_incomes, params.extra_expenses, age)
        if portfolio < 0:
            portfolio = 0.0

        point = ProjectionDataPoint(
            age=age,
            value=_round_currency(portfolio),
            general_expenses=_round_currency(withdrawal),
            total_expenses=_round_currency(total_expenses),
            pension_income=_round_currency(pension_contribution),
        )
        points.append(point)

        withdrawal = inflate(withdrawal, params.annual_inflation, 1)
        if age >= params.pension_start_age:
            pension = inflate(pension, params.pension_revaluation_rate, 1)

        if portfolio == 0:
            break

    return points


@dataclass(frozen=True)
class MonteCarloParams:
    initial_portfolio: float
    initial_annual_withdrawal: float
    mean_return: float
    std_dev: float
    annual_inflation: float
    duration: int
    retirement_age: int
    simulations: int = DEFAULT_NUMBER_OF_SIMULATIONS
    fixed_annual_mortgage: float = 0.0
    mortgage_end_age: int = 0
    pension_at_start_age: float = 0.0
    pension_start_age: int = 0
    pension_revaluation_rate: float = 0.0
    extra_incomes: Tuple[ExtraEvent, ...] = ()
    extra_expenses: Tuple[ExtraEvent, ...] = ()

    def __post_init__(self) -> None:
        if self.simulations < 1:
            raise ValueError("Number of simulations must be at least 1")
        _events_tuple(self, "extra_incomes")
        _events_tuple(self, "extra_expenses")


Sampler = Callable[[float, float, Tuple[int, ...]], np.ndarray]


def box_muller_transform(u: np.ndarray, v: np.ndarray) -> np.ndarray:
    """Map two independent uniforms in (0, 1] to a standard normal sample."""
    return np.sqrt(-2.0 * np.log(u)) * np.cos(2.0 * np.pi * v)


class BoxMullerSampler:
    """Draw normal(mean, std_dev) samples via the Box-Muller transform.

    Uniform draws of exactly zero are rejected and redrawn so the logarithm
    stays finite.
    """

    def __init__(self, rng: Optional[np.random.Generator] = None, seed: Optional[int] = None):
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    def _nonzero_uniform(self, size) -> np.ndarray:
        u = np.asarray(self.rng.random(size), dtype=np.float64)
        zeros = u == 0.0
        while zeros.any():
            u[zeros] = self.rng.random(int(zeros.sum()))
            zeros = u == 0.0
        return u

    def __call__(self, mean: float, std_dev: float, size) -> np.ndarray:
        u = self._nonzero_uniform(size)
        v = self._nonzero_uniform(size)
        return mean + box_muller_transform(u, v) * std_dev


@njit(cache=True, parallel=True)
def _survival_parallel(
    n_sims: int,
    years: int,
    retirement_age: int,
    initial_portfolio: float,
    initial_annual_withdrawal: float,
    fixed_annual_mortgage: float,
    mortgage_end_age: int,
    annual_inflation: float,
    pension_at_start_age: float,
    pension_start_age: int,
    pension_revaluation_rate: float,
    extra_flows: np.ndarray,  # (years,) net extra cash flow per year
    annual_returns: np.ndarray,  # (n_sims, years)
    balances: np.ndarray,  # (n_recorded, years + 1), rows for the first n_recorded trials
) -> np.ndarray:
    """Run every trial and return 1 for survivors, 0 for depleted portfolios."""
    results = np.zeros(n_sims, dtype=np.int64)

    for sim in prange(n_sims):
        portfolio = initial_portfolio
        withdrawal = initial_annual_withdrawal
        pension = pension_at_start_age
        survived = True
        record = sim < balances.shape[0]
        if record:
            balances[sim, 0] = portfolio

        for year in range(1, years + 1):
            age = retirement_age + year
            monthly_rate = annual_returns[sim, year - 1] / 12

            expenses = withdrawal
            if age <= mortgage_end_age:
                expenses += fixed_annual_mortgage
            pension_contribution = 0.0
            if age >= pension_start_age:
                pension_contribution = pension
            net_withdrawal = expenses - pension_contribution
            if net_withdrawal < 0.0:
                net_withdrawal = 0.0
            monthly_withdrawal = net_withdrawal / 12

            for _ in range(12):
                portfolio *= 1 + monthly_rate
                portfolio -= monthly_withdrawal
                if portfolio <= 0:
                    portfolio = 0.0
                    survived = False
                    break

            if survived:
                portfolio += extra_flows[year - 1]
                if portfolio <= 0:
                    portfolio = 0.0
                    survived = False

            if record:
                balances[sim, year] = portfolio
            if not survived:
                break

            withdrawal *= 1 + annual_inflation
            if age >= pension_start_age:
                pension *= 1 + pension_revaluation_rate

        if survived:
            results[sim] = 1

    return results


def estimate_survival_probability(
    params: MonteCarloParams,
    sampler: Optional[Sampler] = None,
    seed: Optional[int] = None,
    collect_paths: bool = False,
):
    """Fraction of Monte Carlo trials whose portfolio lasts the whole horizon.

    Each trial draws one annual return per year from ``sampler(mean, std_dev,
    size)``; the default is a seeded :class:`BoxMullerSampler`. With
    ``collect_paths`` the yearly balances of up to ``MAX_COLLECTED_PATHS``
    trials are returned too, split into successes and failures.
    """
    if sampler is None:
        sampler = BoxMullerSampler(seed=seed)

    n_sims = params.simulations
    years = max(0, params.duration)

    annual_returns = np.asarray(
        sampler(params.mean_return, params.std_dev, (n_sims, years)), dtype=np.float64
    ).reshape(n_sims, years)

    extra_flows = np.array(
        [
            net_cash_flow(params.extra_incomes, params.extra_expenses, params.retirement_age + year)
            for year in range(1, years + 1)
        ],
        dtype=np.float64,
    )
    # Only the paths that can be returned are recorded
    n_recorded = min(n_sims, MAX_COLLECTED_PATHS) if collect_paths else 0
    balances = np.zeros((n_recorded, years + 1), dtype=np.float64)

    results = _survival_parallel(
        n_sims=n_sims,
        years=years,
        retirement_age=int(params.retirement_age),
        initial_portfolio=float(params.initial_portfolio),
        initial_annual_withdrawal=float(params.initial_annual_withdrawal),
        fixed_annual_mortgage=float(params.fixed_annual_mortgage),
        mortgage_end_age=int(params.mortgage_end_age),
        annual_inflation=float(params.annual_inflation),
        pension_at_start_age=float(params.pension_at_start_age),
        pension_start_age=int(params.pension_start_age),
        pension_revaluation_rate=float(params.pension_revaluation_rate),
        extra_flows=extra_flows,
        annual_returns=annual_returns,
        balances=balances,
    )

    success_count = int(np.sum(results))
    probability = success_count / n_sims
    logger.debug(
        "Monte Carlo: %d/%d trials survived %d years", success_count, n_sims, years
    )

    if collect_paths:
        success_paths = [balances[i].tolist() for i in range(n_recorded) if results[i]]
        failure_paths = [balances[i].tolist() for i in range(n_recorded) if not results[i]]
        return probability, success_paths, failure_paths

    return probability


@dataclass
class FireScenario:
    current_age: int
    current_savings: float
    monthly_contribution: float
    years_to_retirement: int
    general_annual_expenses: float
    monthly_mortgage_payment: float
    remaining_mortgage_years: int
    pension_start_age: int
    annual_pension_income: float
    gross_annual_return: float
    annual_inflation: float
    capital_gains_tax_rate: float
    pension_revaluation_rate: float
    sim_gross_mean_return: float
    sim_std_dev: float
    number_of_simulations: int = DEFAULT_NUMBER_OF_SIMULATIONS
    horizon_age: int = DEFAULT_HORIZON_AGE
    extra_incomes: Tuple[ExtraEvent, ...] = ()
    extra_expenses: Tuple[ExtraEvent, ...] = ()
    # Derived values
    retirement_age: int = field(default=0, init=False)
    decumulation_years: int = field(default=0, init=False)
    annual_mortgage: float = field(default=0.0, init=False)
    mortgage_end_age: int = field(default=0, init=False)
    net_annual_return: float = field(default=0.0, init=False)
    sim_net_mean_return: float = field(default=0.0, init=False)
    inflated_general_expenses: float = field(default=0.0, init=False)
    expenses_at_retirement: float = field(default=0.0, init=False)
    fire_target: float = field(default=0.0, init=False)

    def __post_init__(self) -> None:
        if self.years_to_retirement < 0:
            raise ValueError("Years to retirement cannot be negative")
        if self.remaining_mortgage_years < 0:
            raise ValueError("Mortgage years left cannot be negative")
        if self.number_of_simulations < 1:
            raise ValueError("Number of simulations must be at least 1")
        self.extra_incomes = tuple(self.extra_incomes)
        self.extra_expenses = tuple(self.extra_expenses)
        self._compute_derived_values()

    def _compute_derived_values(self) -> None:
        """Turn user-level inputs into the figures the projectors consume."""
        self.retirement_age = self.current_age + self.years_to_retirement
        self.decumulation_years = max(0, self.horizon_age - self.retirement_age)
        self.annual_mortgage = self.monthly_mortgage_payment * 12
        self.mortgage_end_age = self.current_age + self.remaining_mortgage_years

        self.net_annual_return = self.gross_annual_return * (1 - self.capital_gains_tax_rate)
        self.sim_net_mean_return = self.sim_gross_mean_return * (1 - self.capital_gains_tax_rate)

        self.inflated_general_expenses = inflate(
            self.general_annual_expenses, self.annual_inflation, self.years_to_retirement
        )
        self.expenses_at_retirement = self.inflated_general_expenses
        # First retirement year is retirement_age + 1
        if self.retirement_age < self.mortgage_end_age:
            self.expenses_at_retirement += self.annual_mortgage

        pension_at_retirement = 0.0
        if self.pension_start_age <= self.retirement_age:
            pension_at_retirement = inflate(
                self.annual_pension_income,
                self.pension_revaluation_rate,
                self.retirement_age - self.pension_start_age,
            )
        self.fire_target = FIRE_MULTIPLIER * max(
            0.0, self.expenses_at_retirement - pension_at_retirement
        )

    def accumulation_params(self) -> AccumulationParams:
        return AccumulationParams(
            initial_value=self.current_savings,
            monthly_contribution=self.monthly_contribution,
            annual_return=self.net_annual_return,
            annual_inflation=self.annual_inflation,
            years=self.years_to_retirement,
            start_age=self.current_age,
            general_expenses=self.general_annual_expenses,
            fixed_annual_mortgage=self.annual_mortgage,
            mortgage_end_age=self.mortgage_end_age,
            extra_incomes=self.extra_incomes,
            extra_expenses=self.extra_expenses,
        )

    def decumulation_params(self, start_value: float) -> DecumulationParams:
        return DecumulationParams(
            start_value=start_value,
            initial_annual_withdrawal=self.inflated_general_expenses,
            annual_return=self.net_annual_return,
            annual_inflation=self.annual_inflation,
            duration=self.decumulation_years,
            retirement_age=self.retirement_age,
            fixed_annual_mortgage=self.annual_mortgage,
            mortgage_end_age=self.mortgage_end_age,
            pension_at_start_age=self.annual_pension_income,
            pension_start_age=self.pension_start_age,
            pension_revaluation_rate=self.pension_revaluation_rate,
            extra_incomes=self.extra_incomes,
            extra_expenses=self.extra_expenses,
        )

    def monte_carlo_params(self, initial_portfolio: float) -> MonteCarloParams:
        return MonteCarloParams(
            initial_portfolio=initial_portfolio,
            initial_annual_withdrawal=self.inflated_general_expenses,
            mean_return=self.sim_net_mean_return,
            std_dev=self.sim_std_dev,
            annual_inflation=self.annual_inflation,
            duration=self.decumulation_years,
            retirement_age=self.retirement_age,
            simulations=self.number_of_simulations,
            fixed_annual_mortgage=self.annual_mortgage,
            mortgage_end_age=self.mortgage_end_age,
            pension_at_start_age=self.annual_pension_income,
            pension_start_age=self.pension_start_age,
            pension_revaluation_rate=self.pension_revaluation_rate,
            extra_incomes=self.extra_incomes,
            extra_expenses=self.extra_expenses,
        )


@dataclass
class ScenarioResult:
    projected_value: float
    expenses_at_retirement: float
    fire_target: float
    success_probability: float
    points: List[ProjectionDataPoint]
    success_paths: list = field(default_factory=list)
    failure_paths: list = field(default_factory=list)

    @property
    def target_reached(self) -> bool:
        return self.projected_value >= self.fire_target


def run_scenario(
    scenario: FireScenario,
    sampler: Optional[Sampler] = None,
    seed: Optional[int] = None,
    collect_paths: bool = False,
) -> ScenarioResult:
    """Run accumulation, then decumulation and Monte Carlo from its final value."""

    accumulation = project_accumulation(scenario.accumulation_params())
    final_value = accumulation.final_value

    decumulation = project_decumulation(scenario.decumulation_params(final_value))

    mc_params = scenario.monte_carlo_params(final_value)
    success_paths: list = []
    failure_paths: list = []
    if collect_paths:
        probability, success_paths, failure_paths = estimate_survival_probability(
            mc_params, sampler=sampler, seed=seed, collect_paths=True
        )
    else:
        probability = estimate_survival_probability(mc_params, sampler=sampler, seed=seed)

    logger.info(
        "Scenario: retire at %d with %s, target %s, success %.1f%%",
        scenario.retirement_age,
        format_currency(final_value),
        format_currency(scenario.fire_target),
        probability * 100,
    )

    return ScenarioResult(
        projected_value=final_value,
        expenses_at_retirement=scenario.expenses_at_retirement,
        fire_target=scenario.fire_target,
        success_probability=probability,
        points=accumulation.yearly_points + decumulation,
        success_paths=success_paths,
        failure_paths=failure_paths,
    )


def projection_frame(points: Sequence[ProjectionDataPoint]):
    """Return the projection points as a pandas DataFrame indexed by age."""
    import pandas as pd

    frame = pd.DataFrame(
        [
            {
                "age": p.age,
                "value": p.value,
                "general_expenses": p.general_expenses,
                "total_expenses": p.total_expenses,
                "pension_income": 0.0 if p.pension_income is None else p.pension_income,
            }
            for p in points
        ],
        columns=["age", "value", "general_expenses", "total_expenses", "pension_income"],
    )
    return frame.set_index("age")


def _events_to_json(events: Sequence[ExtraEvent]) -> list:
    return [
        {"id": e.id, "amount": e.amount, "age": e.age, "description": e.description}
        for e in events
    ]


def events_from_config(items: Sequence[dict]) -> Tuple[ExtraEvent, ...]:
    return tuple(
        ExtraEvent(
            id=int(item.get("id", i + 1)),
            amount=float(item["amount"]),
            age=int(item["age"]),
            description=str(item.get("description", "")),
        )
        for i, item in enumerate(items)
    )


def load_config(path: str = CONFIG_FILE) -> dict:
    """Load saved configuration if available."""

    if os.path.exists(path):
        with open(path) as f:
            return json.load(f)
    return {}


def save_config(scenario: FireScenario, path: str = CONFIG_FILE) -> None:
    """Persist the provided scenario inputs to disk."""

    data = {
        "general": {
            "gross_annual_return": scenario.gross_annual_return,
            "annual_inflation": scenario.annual_inflation,
            "capital_gains_tax_rate": scenario.capital_gains_tax_rate,
            "pension_revaluation_rate": scenario.pension_revaluation_rate,
            "sim_gross_mean_return": scenario.sim_gross_mean_return,
            "sim_std_dev": scenario.sim_std_dev,
            "number_of_simulations": scenario.number_of_simulations,
            "horizon_age": scenario.horizon_age,
        },
        "user": {
            "current_age": scenario.current_age,
            "current_savings": scenario.current_savings,
            "monthly_contribution": scenario.monthly_contribution,
            "years_to_retirement": scenario.years_to_retirement,
            "general_annual_expenses": scenario.general_annual_expenses,
            "monthly_mortgage_payment": scenario.monthly_mortgage_payment,
            "remaining_mortgage_years": scenario.remaining_mortgage_years,
            "pension_start_age": scenario.pension_start_age,
            "annual_pension_income": scenario.annual_pension_income,
        },
        "events": {
            "extra_incomes": _events_to_json(scenario.extra_incomes),
            "extra_expenses": _events_to_json(scenario.extra_expenses),
        },
    }
    with open(path, "w") as f:
        json.dump(data, f, indent=2)


def scenario_from_config(config: dict) -> FireScenario:
    """Rebuild a scenario from the dictionary written by :func:`save_config`."""
    events = config.get("events", {})
    return FireScenario(
        **config.get("general", {}),
        **config.get("user", {}),
        extra_incomes=events_from_config(events.get("extra_incomes", [])),
        extra_expenses=events_from_config(events.get("extra_expenses", [])),
    )
