import sys, os, json
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from planner import run_cash_flow_plan, run_goal_plan


def main():
    if len(sys.argv) < 2:
        print("usage: debug_plan.py <client.json> [goals]")
        sys.exit(1)

    with open(sys.argv[1], "r", encoding="utf-8") as f:
        payload = json.load(f)

    cash = run_cash_flow_plan(payload)
    print("metrics:", json.dumps(cash["metrics"]))
    print("health:", cash["healthScore"]["score"], cash["healthScore"]["rating"])
    print("emergency_fund:", json.dumps(cash["emergencyFund"]))
    for d in cash["debtManagement"]["prioritizedDebts"]:
        print("debt:", d["priorityRank"], d["debtType"], d["interestRate"], d["priority"])
    for w in cash["warnings"]:
        print("warning:", w["field"], "-", w["message"])

    if len(sys.argv) > 2 and sys.argv[2] == "goals":
        goals = run_goal_plan(payload)
        opt = goals["optimization"]
        print("\ngoals_required:", opt["totalRequired"], "surplus:", opt["monthlySurplus"],
              "deficit:", opt["deficit"])
        for p in opt["phases"]:
            print("phase:", p["name"], p["timeframe"], p["goals"])
        for c in goals["conflicts"]:
            print("conflict:", c["year"], c["severity"], c["goals"])


if __name__ == "__main__":
    main()
