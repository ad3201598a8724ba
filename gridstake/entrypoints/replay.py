"""Scenario replay entrypoint.

Replays a JSON scenario of calls against a fresh ForecastMarket and prints
one result per step plus the final state digest. Useful for reproducing a
sequence of ledger calls and comparing digests across versions.

Scenario format::

    {
      "start_height": 1000,
      "steps": [
        {"height": 1000, "caller": "alice", "op": "stake", "args": {"amount": 2000000}},
        {"caller": "alice", "op": "submit_forecast",
         "args": {"region_id": 1, "predicted_mw": 5000, "confidence": 90, "target_timestamp": 1440}}
      ]
    }

Usage:
    python -m gridstake.entrypoints.replay scenario.json --out report.json
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any

import bittensor as bt
from dotenv import load_dotenv

from gridstake.config.params import load_market_params
from gridstake.market import ForecastMarket
from gridstake.shared.logging import log_event, setup_events_logger

# op name -> whether the market method takes the caller as first argument
REPLAY_OPS: dict[str, bool] = {
    "set_oracle": True,
    "set_verifier": True,
    "stake": True,
    "unstake": True,
    "lock_stake_on_slash": True,
    "submit_forecast": True,
    "submit_actual": True,
    "verify_forecast": True,
    "get_forecast_score": False,
    "is_forecast_verifiable": False,
    "initialize_token": True,
    "transfer": True,
    "approve": True,
    "transfer_from": True,
    "mint": True,
    "burn": True,
    "set_mint_admin": True,
    "set_token_uri": True,
    "set_mint_cooldown": True,
    "toggle_mint": True,
    "toggle_burn": True,
    "toggle_transfer": True,
    "distribute_rewards": True,
}


def load_scenario(path: str | Path) -> dict[str, Any]:
    """Read and shape-check a scenario file.

    Raises:
        ValueError: malformed scenario (unknown op, missing caller, bad JSON).
    """
    try:
        data = json.loads(Path(path).read_text())
    except json.JSONDecodeError as e:
        raise ValueError(f"scenario is not valid JSON: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("steps"), list):
        raise ValueError("scenario must be an object with a 'steps' list")

    for i, step in enumerate(data["steps"]):
        if not isinstance(step, dict):
            raise ValueError(f"step {i}: must be an object")
        op = step.get("op")
        if op not in REPLAY_OPS:
            raise ValueError(f"step {i}: unknown op {op!r}")
        if REPLAY_OPS[op] and not step.get("caller"):
            raise ValueError(f"step {i}: op {op!r} requires a caller")
        if not isinstance(step.get("args", {}), dict):
            raise ValueError(f"step {i}: args must be an object")
    return data


def replay(
    scenario: dict[str, Any],
    market: ForecastMarket | None = None,
    events_logger: logging.Logger | None = None,
) -> dict[str, Any]:
    """Apply every step in order and collect the results."""
    market = market or ForecastMarket(
        params=load_market_params(),
        start_height=int(scenario.get("start_height", 0)),
    )

    results: list[dict[str, Any]] = []
    for i, step in enumerate(scenario["steps"]):
        if "height" in step:
            market.clock.advance_to(int(step["height"]))

        op = step["op"]
        method = getattr(market, op)
        args = step.get("args", {})
        result = method(step["caller"], **args) if REPLAY_OPS[op] else method(**args)

        entry = {
            "step": i,
            "height": market.clock.height,
            "caller": step.get("caller"),
            "op": op,
            **result.as_dict(),
        }
        results.append(entry)
        if events_logger is not None:
            log_event(events_logger, entry)

    return {
        "steps": results,
        "final_height": market.clock.height,
        "state_digest": market.state_digest(),
    }


def main(argv: list[str] | None = None) -> int:
    if os.environ.get("GRIDSTAKE_TEST_MODE", "").lower() not in ("true", "1"):
        load_dotenv()

    parser = argparse.ArgumentParser(description="Replay a gridstake call scenario")
    bt.logging.add_args(parser)
    parser.add_argument("scenario", type=str, help="Path to the scenario JSON file")
    parser.add_argument("--out", type=str, default=None, help="Write the report here instead of stdout")
    parser.add_argument(
        "--events_dir",
        type=str,
        default=os.environ.get("GRIDSTAKE_REPLAY__EVENTS_DIR"),
        help="Directory for a rotating events.log of every step",
    )
    args = parser.parse_args(argv)

    try:
        scenario = load_scenario(args.scenario)
    except (OSError, ValueError) as e:
        bt.logging.error({"replay": {"event": "scenario_error", "path": args.scenario, "error": str(e)}})
        return 1

    events_logger = setup_events_logger(args.events_dir) if args.events_dir else None

    bt.logging.info({"replay": {"event": "starting", "path": args.scenario, "steps": len(scenario["steps"])}})
    try:
        report = replay(scenario, events_logger=events_logger)
    except (TypeError, ValueError) as e:
        bt.logging.error({"replay": {"event": "step_error", "error": str(e)}})
        return 1

    text = json.dumps(report, indent=2, sort_keys=True)
    if args.out:
        Path(args.out).write_text(text + "\n")
    else:
        sys.stdout.write(text + "\n")

    failed = sum(1 for s in report["steps"] if not s["ok"])
    bt.logging.info({"replay": {
        "event": "done", "steps": len(report["steps"]), "failed": failed, "digest": report["state_digest"],
    }})
    return 0


if __name__ == "__main__":
    sys.exit(main())
