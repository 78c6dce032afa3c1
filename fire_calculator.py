import logging
import tkinter as tk
from tkinter import ttk, messagebox, filedialog

import numpy as np

from fire_core import (
    FireScenario,
    parse_percent,
    parse_rate,
    parse_dollars,
    parse_extra_events,
    format_extra_events,
    format_currency,
    format_axis_currency,
    run_scenario,
    projection_frame,
    events_from_config,
    load_config,
    save_config,
    FIRE_MULTIPLIER,
    DEFAULT_HORIZON_AGE,
    DEFAULT_NUMBER_OF_SIMULATIONS,
)


class ToolTip:
    """Simple hover tooltip for a widget."""

    def __init__(self, widget, text: str):
        self.widget = widget
        self.text = text
        self.tipwindow = None
        widget.bind("<Enter>", self._show)
        widget.bind("<Leave>", self._hide)

    def _show(self, _event=None):
        if self.tipwindow or not self.text:
            return
        x = self.widget.winfo_rootx() + 20
        y = self.widget.winfo_rooty() + self.widget.winfo_height() + 10
        self.tipwindow = tw = tk.Toplevel(self.widget)
        tw.wm_overrideredirect(True)
        tw.wm_geometry(f"+{x}+{y}")
        tk.Label(
            tw,
            text=self.text,
            justify=tk.LEFT,
            background="#ffffe0",
            relief=tk.SOLID,
            borderwidth=1,
            font=("tahoma", "8", "normal"),
        ).pack(ipadx=1)

    def _hide(self, _event=None):
        tw = self.tipwindow
        self.tipwindow = None
        if tw is not None:
            tw.destroy()


def plot_projection(points, fire_target: float, retirement_age: int):
    """Plot the deterministic projection with expenses and pension on a second axis."""
    import matplotlib
    matplotlib.use("TkAgg")
    import matplotlib.pyplot as plt
    from matplotlib.ticker import FuncFormatter

    df = projection_frame(points)
    if df.empty:
        return

    fig, ax = plt.subplots(figsize=(9, 4.5))
    ax.plot(df.index, df["value"], color="#0ea5e9", linewidth=2.5, label="Projected value")
    ax.axhline(
        fire_target,
        color="#f59e0b",
        linestyle="--",
        linewidth=1.5,
        label=f"FIRE target ({FIRE_MULTIPLIER}x)",
    )
    ax.axvline(retirement_age, color="grey", linewidth=0.8, linestyle=":")
    ax.set_xlabel("Age")
    ax.set_ylabel("Portfolio value")
    ax.yaxis.set_major_formatter(FuncFormatter(lambda tick, _pos: format_axis_currency(tick)))

    ax2 = ax.twinx()
    ax2.plot(
        df.index,
        df["total_expenses"],
        color="#d946ef",
        linestyle=":",
        linewidth=1,
        label="Simulated annual expenses",
    )
    ax2.plot(df.index, df["pension_income"], color="#10b981", linewidth=1.5, label="Pension income")
    ax2.set_ylabel("Annual cash flows")
    ax2.yaxis.set_major_formatter(FuncFormatter(lambda tick, _pos: format_axis_currency(tick)))

    handles, labels = ax.get_legend_handles_labels()
    handles2, labels2 = ax2.get_legend_handles_labels()
    ax.legend(handles + handles2, labels + labels2, loc="upper left")
    ax.set_title("Portfolio projection")
    fig.tight_layout()
    plt.show()


def plot_paths(success_paths, failure_paths, retirement_age: int):
    """Plot Monte Carlo portfolio paths for successful and failed trials."""
    import matplotlib
    matplotlib.use("TkAgg")
    import matplotlib.pyplot as plt
    from matplotlib.ticker import FuncFormatter

    if not success_paths and not failure_paths:
        return

    fig, ax = plt.subplots(figsize=(8, 4))
    for paths, color, label in (
        (success_paths, "green", "Success"),
        (failure_paths, "red", "Failure"),
    ):
        xs, ys = [], []
        for path in paths:
            for year_idx, val in enumerate(path):
                if val > 0:
                    xs.append(retirement_age + year_idx)
                    ys.append(val)
        if xs:
            ax.scatter(xs, ys, s=1, c=color, linewidths=1, label=label)

    # mean funds by year across all paths
    mean_by_year = {}
    for path in (success_paths or []) + (failure_paths or []):
        for year_idx, val in enumerate(path):
            if val > 0:
                mean_by_year.setdefault(year_idx, []).append(val)
    mean_x = sorted(mean_by_year)
    if mean_x:
        ax.plot(
            [retirement_age + i for i in mean_x],
            [np.mean(mean_by_year[i]) for i in mean_x],
            color="black",
            linewidth=1,
            label="Mean",
        )

    ax.set_yscale("log")
    ax.set_xlabel("Age")
    ax.set_ylabel("Portfolio value")
    ax.yaxis.set_major_formatter(FuncFormatter(lambda tick, _pos: format_axis_currency(tick)))
    ax.set_title("Simulation paths")
    ax.legend()
    plt.show()


# Default parameter values
DEFAULT_GENERAL = {
    "gross_annual_return": 0.07,
    "annual_inflation": 0.02,
    "capital_gains_tax_rate": 0.26,
    "pension_revaluation_rate": 0.015,
    "sim_gross_mean_return": 0.08,
    "sim_std_dev": 0.12,
    "number_of_simulations": DEFAULT_NUMBER_OF_SIMULATIONS,
    "horizon_age": DEFAULT_HORIZON_AGE,
}

DEFAULT_USER = {
    "current_age": 44,
    "current_savings": 250_000,
    "monthly_contribution": 1_000,
    "years_to_retirement": 15,
    "general_annual_expenses": 20_200,
    "monthly_mortgage_payment": 550,
    "remaining_mortgage_years": 15,
    "pension_start_age": 67,
    "annual_pension_income": 12_000,
}

DEFAULT_EVENTS = {
    "extra_incomes": [
        {"id": 1, "amount": 0, "age": 60, "description": "Pension fund payout 1"},
        {"id": 2, "amount": 0, "age": 65, "description": "Pension fund payout 2"},
        {"id": 3, "amount": 0, "age": 75, "description": "Inheritance"},
    ],
    "extra_expenses": [
        {"id": 1, "amount": 0, "age": 50, "description": "Home renovation"},
        {"id": 2, "amount": 0, "age": 60, "description": "Children's university"},
        {"id": 3, "amount": 0, "age": 70, "description": "Extraordinary medical expense"},
    ],
}

# Signed rates (returns and inflation may be negative)
RATE_FIELDS = {
    "gross_annual_return",
    "annual_inflation",
    "pension_revaluation_rate",
    "sim_gross_mean_return",
}

PERCENT_FIELDS = RATE_FIELDS | {"capital_gains_tax_rate", "sim_std_dev"}

DOLLAR_FIELDS = {
    "current_savings",
    "monthly_contribution",
    "general_annual_expenses",
    "monthly_mortgage_payment",
    "annual_pension_income",
}

LABEL_OVERRIDES = {
    "gross_annual_return": "Gross Annual Return",
    "capital_gains_tax_rate": "Capital Gains Tax",
    "sim_gross_mean_return": "Simulated Gross Mean Return",
    "sim_std_dev": "Simulated Return Std Dev",
    "horizon_age": "Simulate Until Age",
    "annual_pension_income": "Annual Pension (at start age)",
}

ENTRY_HELP = {
    "gross_annual_return": "Expected yearly return before capital gains tax, used for the deterministic projection.",
    "annual_inflation": "Expected average annual inflation rate.",
    "capital_gains_tax_rate": "Flat tax rate applied to returns; projections use the net return.",
    "pension_revaluation_rate": "Yearly growth of the pension once it is paid, independent of inflation.",
    "sim_gross_mean_return": "Average yearly return before tax for the Monte Carlo trials.",
    "sim_std_dev": "Volatility of yearly returns in the Monte Carlo trials.",
    "number_of_simulations": "How many Monte Carlo runs to perform.",
    "horizon_age": "Age at which the retirement simulation ends.",
    "current_age": "Current age.",
    "current_savings": "Current invested portfolio.",
    "monthly_contribution": "Monthly saving; raised every year with inflation.",
    "years_to_retirement": "Number of saving years before retirement.",
    "general_annual_expenses": "Today's yearly spending, subject to inflation (food, utilities, ...).",
    "monthly_mortgage_payment": "Fixed monthly mortgage payment, not inflated.",
    "remaining_mortgage_years": "Number of years remaining on the mortgage.",
    "pension_start_age": "Age at which the pension starts.",
    "annual_pension_income": "Estimated pension for its first year. Not a value in today's money.",
    "extra_incomes": "One-time inflows, one per line: age, amount, description.",
    "extra_expenses": "One-time outflows, one per line: age, amount, description.",
}

INT_FIELDS = {
    "number_of_simulations",
    "horizon_age",
    "current_age",
    "years_to_retirement",
    "remaining_mortgage_years",
    "pension_start_age",
}


def _format_entry(key: str, val) -> str:
    if key in PERCENT_FIELDS:
        return f"{val * 100:.2f}%"
    if key in DOLLAR_FIELDS:
        return format_currency(val)
    return str(val)


def _parse_entry(key: str, text: str):
    if key in RATE_FIELDS:
        return parse_rate(text)
    if key in PERCENT_FIELDS:
        return parse_percent(text)
    if key in DOLLAR_FIELDS:
        return parse_dollars(text)
    try:
        return int(text.strip())
    except ValueError as exc:
        label = LABEL_OVERRIDES.get(key, key.replace("_", " ").title())
        raise ValueError(f"{label} must be a whole number") from exc


def _load_inputs() -> FireScenario:
    """Parse GUI inputs and return a FireScenario."""
    values = {}
    for key, ent in gen_entries.items():
        values[key] = _parse_entry(key, ent.get())
    for key, ent in user_entries.items():
        values[key] = _parse_entry(key, ent.get())

    if values["number_of_simulations"] <= 0:
        raise ValueError("Number of simulations must be positive")
    if values["current_age"] < 0 or values["pension_start_age"] < 0:
        raise ValueError("Ages must be non-negative")
    if values["years_to_retirement"] < 0:
        raise ValueError("Years to retirement cannot be negative")
    if values["horizon_age"] <= values["current_age"]:
        raise ValueError("Simulation age must be greater than the current age")

    return FireScenario(
        **values,
        extra_incomes=parse_extra_events(event_texts["extra_incomes"].get("1.0", tk.END)),
        extra_expenses=parse_extra_events(event_texts["extra_expenses"].get("1.0", tk.END)),
    )


def _build_explanation(cfg: FireScenario) -> str:
    """Return a detailed explanation of inputs and calculations."""
    explanation = [
        "Accumulation phase:",
        f"- {cfg.years_to_retirement} years from age {cfg.current_age} to {cfg.retirement_age}.",
        (
            f"- Net return {cfg.net_annual_return * 100:.2f}% = gross "
            f"{cfg.gross_annual_return * 100:.2f}% x (1 - {cfg.capital_gains_tax_rate * 100:.0f}% tax), "
            "compounded monthly as return / 12."
        ),
        (
            f"- Monthly contribution of {format_currency(cfg.monthly_contribution)} added at "
            f"each month end, raised by {cfg.annual_inflation * 100:.2f}% every year."
        ),
        "",
        "Retirement phase:",
        f"- {cfg.decumulation_years} years from age {cfg.retirement_age} to {cfg.horizon_age}.",
        (
            f"- Yearly expenses at retirement: {format_currency(cfg.inflated_general_expenses)} "
            "general, inflated every year"
            + (
                f", plus a fixed {format_currency(cfg.annual_mortgage)} mortgage until age "
                f"{cfg.mortgage_end_age}."
                if cfg.annual_mortgage > 0 and cfg.mortgage_end_age > cfg.retirement_age
                else "."
            )
        ),
        (
            f"- Pension of {format_currency(cfg.annual_pension_income)} from age "
            f"{cfg.pension_start_age}, revalued by {cfg.pension_revaluation_rate * 100:.2f}% a year, "
            "reduces the withdrawal (never below zero)."
        ),
        "- Extra incomes and expenses are applied once, at the listed age, without inflation.",
        "",
        "Monte Carlo:",
        (
            f"- {cfg.number_of_simulations:,} trials with yearly returns drawn from a normal "
            f"distribution: mean {cfg.sim_net_mean_return * 100:.2f}% (net of tax), "
            f"std dev {cfg.sim_std_dev * 100:.2f}%."
        ),
        "- A trial succeeds when the portfolio never runs out before the final age.",
        "",
        (
            f"FIRE target ({FIRE_MULTIPLIER}x net yearly expenses at retirement): "
            f"{format_currency(cfg.fire_target)}"
        ),
    ]
    return "\n".join(explanation)


def run_sim():
    """Run the projection and the Monte Carlo simulation using the current GUI inputs."""
    global last_result
    try:
        cfg = _load_inputs()
    except ValueError as exc:
        messagebox.showerror("Input error", str(exc))
        return

    results_var.set("Working...")
    root.update_idletasks()

    result = run_scenario(cfg, collect_paths=True)
    last_result = result

    results = [
        f"Expenses in first retirement year: {format_currency(result.expenses_at_retirement)}",
        f"FIRE target ({FIRE_MULTIPLIER}x): {format_currency(result.fire_target)}",
        f"Projected value at {cfg.retirement_age} (net): {format_currency(result.projected_value)}",
    ]
    if result.target_reached:
        results.append("Target reached!")
    else:
        results.append(
            f"Missing {format_currency(result.fire_target - result.projected_value)} to the target."
        )
    results.append(f"Success probability (Monte Carlo): {result.success_probability * 100:.1f}%")
    if result.success_probability < 0.95:
        results.append("Probability could be improved.")
    results_var.set("\n".join(results))

    save_config(cfg)
    plot_projection(result.points, result.fire_target, cfg.retirement_age)
    plot_paths(result.success_paths, result.failure_paths, cfg.retirement_age)


def explain_calculations():
    """Show a detailed explanation of the current configuration."""
    try:
        cfg = _load_inputs()
    except ValueError as exc:
        messagebox.showerror("Input error", str(exc))
        return
    messagebox.showinfo("Simulation Details", _build_explanation(cfg))


def export_table():
    """Save the last projection as a CSV table."""
    if last_result is None:
        messagebox.showinfo("Export", "Run the simulation first.")
        return
    path = filedialog.asksaveasfilename(
        defaultextension=".csv", filetypes=[("CSV files", "*.csv")]
    )
    if not path:
        return
    projection_frame(last_result.points).to_csv(path)


def load_defaults():
    for key, default in DEFAULT_GENERAL.items():
        ent = gen_entries[key]
        ent.delete(0, tk.END)
        ent.insert(0, _format_entry(key, default))
    for key, default in DEFAULT_USER.items():
        ent = user_entries[key]
        ent.delete(0, tk.END)
        ent.insert(0, _format_entry(key, default))
    for key, default in DEFAULT_EVENTS.items():
        txt = event_texts[key]
        txt.delete("1.0", tk.END)
        txt.insert("1.0", format_extra_events(events_from_config(default)))


def _entry_rows(frame, defaults: dict, saved: dict, label_width: int) -> dict:
    entries = {}
    for key, default in defaults.items():
        row = ttk.Frame(frame)
        row.pack(fill="x", pady=2)
        ttk.Label(
            row,
            text=LABEL_OVERRIDES.get(key, key.replace("_", " ").title()),
            width=label_width,
            anchor="w",
        ).pack(side="left")
        ent = ttk.Entry(row)
        ent.insert(0, _format_entry(key, saved.get(key, default)))
        ent.pack(side="left", fill="x", expand=True)
        entries[key] = ent
        ToolTip(ent, ENTRY_HELP.get(key, ""))
    return entries


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    root = tk.Tk()
    root.title("FIRE Calculator")
    root.geometry("520x980")

    last_result = None

    config = load_config()
    gen_cfg = config.get("general", {})
    user_cfg = config.get("user", {})
    events_cfg = config.get("events", DEFAULT_EVENTS)

    label_width = max(
        len(LABEL_OVERRIDES.get(k, k.replace("_", " ").title()))
        for k in list(DEFAULT_GENERAL) + list(DEFAULT_USER)
    )

    user_frame = ttk.LabelFrame(root, text="Your Financial Data")
    user_frame.pack(fill="x", padx=10, pady=5)
    user_entries = _entry_rows(user_frame, DEFAULT_USER, user_cfg, label_width)

    general_frame = ttk.LabelFrame(root, text="Financial Assumptions")
    general_frame.pack(fill="x", padx=10, pady=5)
    gen_entries = _entry_rows(general_frame, DEFAULT_GENERAL, gen_cfg, label_width)

    events_frame = ttk.LabelFrame(root, text="One-time Cash Events (age, amount, description)")
    events_frame.pack(fill="x", padx=10, pady=5)
    event_texts = {}
    for key, title in (("extra_incomes", "Extra Incomes"), ("extra_expenses", "Extra Expenses")):
        ttk.Label(events_frame, text=title).pack(anchor="w")
        txt = tk.Text(events_frame, height=4, width=50)
        saved_events = events_from_config(events_cfg.get(key, DEFAULT_EVENTS[key]))
        txt.insert("1.0", format_extra_events(saved_events))
        txt.pack(fill="x", pady=2)
        event_texts[key] = txt
        ToolTip(txt, ENTRY_HELP.get(key, ""))

    run_frame = ttk.Frame(root)
    run_frame.pack(fill="x", padx=10, pady=5)
    ttk.Button(run_frame, text="Calculate Projection", command=run_sim).pack()
    ttk.Button(run_frame, text="Explain Calculations", command=explain_calculations).pack()
    ttk.Button(run_frame, text="Export Table", command=export_table).pack()
    ttk.Button(run_frame, text="Load Defaults", command=load_defaults).pack()

    results_frame = ttk.LabelFrame(root, text="Results")
    results_frame.pack(fill="both", expand=True, padx=10, pady=5)
    results_var = tk.StringVar()
    ttk.Label(results_frame, textvariable=results_var, wraplength=460, justify="left").pack(anchor="w")

    root.mainloop()
