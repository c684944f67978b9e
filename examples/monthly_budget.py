# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""
monthly_budget.py

Demonstrates one month of budget tracking:
  1. Create a budget from declared income (50/30/20 template).
  2. Log expenses; each one updates the budget and may raise an alert.
  3. Edit and delete a transaction.
  4. Reconcile from the ledger and print the progress report.
  5. Save towards a goal and print its plan.

Run with:  python examples/monthly_budget.py
(with finance-planner installed)
"""

import asyncio
from datetime import datetime

from finance_planner import FinancePlanner, MemoryAlertSink, categorize

OWNER = "alice"
MONTH, YEAR = 3, 2026


async def main() -> None:
    alerts = MemoryAlertSink()
    planner = FinancePlanner(alert_sink=alerts)

    # ─── Setup ────────────────────────────────────────────────────────────────

    await planner.create_smart_budget(OWNER, monthly_income=40_000, month=MONTH, year=YEAR)
    await planner.add_transaction(OWNER, 40_000, "income", "income", date=datetime(YEAR, MONTH, 1))

    # ─── Log a month of spending ──────────────────────────────────────────────

    expenses = [
        ("Groceries at the market", 2_800),
        ("Uber ride to office", 450),
        ("Netflix subscription", 649),
        ("Electricity bill", 2_100),
        ("Dinner at restaurant", 1_900),
        ("Pharmacy", 300),
    ]
    created = []
    for day, (description, amount) in enumerate(expenses, start=2):
        category = categorize(description)
        transaction = await planner.add_transaction(
            OWNER,
            amount,
            category.value,
            "expense",
            date=datetime(YEAR, MONTH, day),
            description=description,
        )
        created.append(transaction)
        print(f"  {description:<28} {category.value:<14} ₹{amount:>8,}")

    # ─── Corrections ──────────────────────────────────────────────────────────

    await planner.update_transaction(OWNER, created[1].id, amount=520)
    await planner.delete_transaction(OWNER, created[5].id)

    # ─── Reconcile and report ─────────────────────────────────────────────────

    await planner.reconcile(OWNER, MONTH, YEAR)
    progress = await planner.budget_progress(OWNER, MONTH, YEAR)
    assert progress is not None

    print("\n── Budget progress ──────────────────────────────────────────")
    for row in progress.categories:
        print(
            f"  {row.icon} {row.category.value:<14} planned ₹{row.planned:>8}  "
            f"spent ₹{row.spent:>8}  {row.utilization:>3}%  {row.status}"
        )
    summary = progress.summary
    print(f"\n  Total planned : ₹{summary.total_planned}")
    print(f"  Total spent   : ₹{summary.total_spent}")
    print(f"  Savings       : ₹{summary.savings}")
    print("─────────────────────────────────────────────────────────────")

    print(f"\n{len(alerts.alerts)} alerts raised:")
    for alert in alerts.alerts:
        print(f"  {alert.kind}: {alert.payload}")

    for message in await planner.insights(OWNER, MONTH, YEAR):
        print(f"  • {message}")

    # ─── Savings goal ─────────────────────────────────────────────────────────

    goal = await planner.create_goal(OWNER, "New laptop", 90_000, datetime(2027, 12, 31), "gadgets")
    goal = await planner.add_to_goal(OWNER, goal.id, summary.savings)
    plan = await planner.goal_plan(OWNER, goal.id, monthly_income=40_000)
    print(f"\n  Goal '{goal.name}': {goal.progress}% saved, {goal.status.value}")
    print(f"  Save ₹{plan.monthly_savings_needed} a month ({plan.feasibility} feasibility)")
    for suggestion in plan.suggestions:
        print(f"  • {suggestion}")


if __name__ == "__main__":
    asyncio.run(main())
