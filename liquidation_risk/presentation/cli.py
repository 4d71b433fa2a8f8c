"""CLI entry point rendering liquidation risk for a saved account snapshot."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from ..logging_setup import configure_logging
from ..risk_engine.config import Settings
from ..risk_engine.core import RiskEngine
from ..risk_engine.risk_rules import risk_level
from .risk_panel import evaluate_panel, render_risk_panel

logger = logging.getLogger(__name__)

__all__ = [
    "load_snapshot",
    "main",
    "split_payload",
]


def load_snapshot(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


def split_payload(payload: Any) -> Tuple[Any, Optional[Mapping[str, Any]]]:
    """Separate ``{"account_balance", "current_prices"}`` envelopes from bare snapshots."""

    if isinstance(payload, Mapping) and "account_balance" in payload:
        prices = payload.get("current_prices")
        return payload.get("account_balance"), prices if isinstance(prices, Mapping) else None
    return payload, None


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Compute liquidation risk for an account snapshot")
    parser.add_argument(
        "snapshot",
        type=Path,
        help="Path to a JSON account snapshot ({exchange, assets, equities}) or an "
        "envelope with 'account_balance' and 'current_prices'.",
    )
    parser.add_argument(
        "--prices",
        type=Path,
        default=None,
        help="Optional JSON file mapping symbols to current prices. Overrides prices in the snapshot.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        dest="as_json",
        help="Print the raw metrics payload instead of the rendered panel.",
    )
    parser.add_argument(
        "--debug",
        type=int,
        default=None,
        help="Logging verbosity: 0 warnings, 1 info, 2 debug, 3 trace. Defaults to RISK_LOG_LEVEL.",
    )
    parser.add_argument("--log-file", default=None, help="Also write logs to this file.")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    settings = Settings.from_environment()
    configure_logging(
        args.debug if args.debug is not None else settings.log_level,
        log_file=args.log_file,
        stream_target=sys.stderr,
    )

    try:
        return _run_cli(args, settings)
    except FileNotFoundError as exc:
        parser.error(f"Snapshot file not found: {exc.filename}")
    except json.JSONDecodeError as exc:
        parser.error(f"Snapshot file is not valid JSON: {exc}")
    except ValueError as exc:
        parser.error(str(exc))
    return 1


def _run_cli(args: argparse.Namespace, settings: Settings) -> int:
    account_balance, prices = split_payload(load_snapshot(Path(args.snapshot)))
    if args.prices is not None:
        loaded = load_snapshot(Path(args.prices))
        if not isinstance(loaded, Mapping):
            raise ValueError("Prices file must contain a JSON object")
        prices = loaded

    engine = RiskEngine(settings.risk)
    metrics, panel = evaluate_panel(account_balance, prices, engine=engine)
    logger.info("Rendered liquidation risk for %s", args.snapshot)
    if args.as_json:
        payload: Dict[str, Any] = metrics.to_payload()
        payload["riskLevel"] = risk_level(metrics.risk_score).value
        print(json.dumps(payload, indent=2, sort_keys=True))
    else:
        print(render_risk_panel(panel))
    return 0


if __name__ == "__main__":  # pragma: no cover - manual invocation hook
    sys.exit(main())
