"""CLI client for the Loanflow API: posts a loan request and prints a terminal report.

Usage:
    python loan-report/loan_report.py --user USER_ID schedule LOAN_ID --principal 100000 --rate 6 --term 360 --start 2025-01-01
    python loan-report/loan_report.py --user USER_ID refinance LOAN_ID --new-rate 4.5 --closing-costs 3000
"""

import argparse
import asyncio
import sys
from decimal import Decimal

import httpx


# ── Helpers ──────────────────────────────────────────────────────────────────

def _dollar(v) -> str:
    return f"${float(v):,.2f}"


def _header(title: str) -> None:
    print(f"\n{'=' * 64}")
    print(f"  {title}")
    print(f"{'=' * 64}")


# ── Report sections ──────────────────────────────────────────────────────────

def print_schedule(data: dict) -> None:
    rows = data.get("schedule", [])
    _header(f"Amortization Schedule ({data.get('totalEntries', len(rows))} payments)")
    print(f"  {'#':>4}  {'Date':>10}  {'Payment':>12}  {'Principal':>12}  {'Interest':>12}  {'Balance':>14}")
    print(f"  {'-' * 4}  {'-' * 10}  {'-' * 12}  {'-' * 12}  {'-' * 12}  {'-' * 14}")
    for row in rows:
        print(
            f"  {row['payment_number']:>4}  {row['payment_date']:>10}  "
            f"{_dollar(row['payment_amount']):>12}  {_dollar(row['principal_amount']):>12}  "
            f"{_dollar(row['interest_amount']):>12}  {_dollar(row['remaining_balance']):>14}"
        )


def print_refinance(data: dict) -> None:
    a = data["analysis"]
    _header("Refinance Analysis")
    print(f"  Current Rate:       {a['current_rate']}%")
    print(f"  New Rate:           {a['new_rate']}%")
    print(f"  Monthly Savings:    {_dollar(a['monthly_savings'])}")
    print(f"  Lifetime Savings:   {_dollar(a['lifetime_savings'])}")
    print(f"  Break-even:         {a['break_even_months']} months")
    print(f"  Recommended:        {'yes' if a['is_recommended'] else 'no'}")


# ── Main ─────────────────────────────────────────────────────────────────────

def build_request(args: argparse.Namespace) -> tuple[str, dict, dict]:
    """Return (path, json payload, headers) for the chosen sub-command."""
    headers = {"X-User-Id": args.user} if args.user else {}
    if args.command == "schedule":
        payload = {
            "loanId": args.loan_id,
            "principal": str(args.principal),
            "annualRate": str(args.rate),
            "termMonths": args.term,
            "startDate": args.start,
        }
        if args.payment is not None:
            payload["monthlyPayment"] = str(args.payment)
        return "/api/v1/schedules", payload, headers

    payload = {
        "loanId": args.loan_id,
        "newRate": str(args.new_rate),
        "closingCosts": str(args.closing_costs),
    }
    return "/api/v1/refinance/analyze", payload, headers


async def main() -> None:
    parser = argparse.ArgumentParser(description="Run loan calculations via the Loanflow API")
    parser.add_argument(
        "--api-url",
        default="http://localhost:8000",
        help="API base URL (default: http://localhost:8000)",
    )
    parser.add_argument("--user", help="Caller id forwarded as X-User-Id")
    sub = parser.add_subparsers(dest="command", required=True)

    sched = sub.add_parser("schedule", help="Regenerate and print a loan's schedule")
    sched.add_argument("loan_id")
    sched.add_argument("--principal", type=Decimal, required=True)
    sched.add_argument("--rate", type=Decimal, required=True, help="Annual rate in percent")
    sched.add_argument("--term", type=int, required=True, help="Term in months")
    sched.add_argument("--start", required=True, help="Start date (YYYY-MM-DD)")
    sched.add_argument("--payment", type=Decimal, help="Monthly payment override")

    refi = sub.add_parser("refinance", help="Analyze refinancing a loan")
    refi.add_argument("loan_id")
    refi.add_argument("--new-rate", type=Decimal, required=True)
    refi.add_argument("--closing-costs", type=Decimal, default=Decimal("0"))

    args = parser.parse_args()
    path, payload, headers = build_request(args)

    async with httpx.AsyncClient(base_url=args.api_url, timeout=30) as client:
        try:
            resp = await client.post(path, json=payload, headers=headers)
        except httpx.ConnectError:
            print(f"Error: Could not connect to API at {args.api_url}", file=sys.stderr)
            print("Is the server running? Start with: uvicorn loanflow.api.app:app --reload", file=sys.stderr)
            sys.exit(1)
        except httpx.TimeoutException:
            print("Error: Request timed out", file=sys.stderr)
            sys.exit(1)

        if resp.status_code != 200:
            print(f"Error: API returned {resp.status_code}", file=sys.stderr)
            try:
                detail = resp.json().get("detail", resp.text)
            except ValueError:
                detail = resp.text
            print(f"  {detail}", file=sys.stderr)
            sys.exit(1)

        data = resp.json()

    if args.command == "schedule":
        print_schedule(data)
    else:
        print_refinance(data)
    print()


if __name__ == "__main__":
    asyncio.run(main())
