"""HTTP surface exposing liquidation risk metrics to the trading UI."""

from __future__ import annotations

import argparse
import logging
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from .logging_setup import configure_logging
from .presentation.risk_panel import evaluate_panel
from .risk_engine.config import Settings
from .risk_engine.core import RiskEngine
from .risk_engine.risk_rules import risk_level

logger = logging.getLogger(__name__)


async def _read_request(request: Request) -> Tuple[Any, Optional[Mapping[str, Any]]]:
    try:
        body = await request.json()
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Request body must be valid JSON."
        ) from exc
    if not isinstance(body, Mapping):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Request body must be a JSON object."
        )
    prices = body.get("current_prices")
    if prices is not None and not isinstance(prices, Mapping):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="'current_prices' must be a JSON object."
        )
    # Malformed snapshots are not rejected; the engine answers with its safe default.
    return body.get("account_balance"), prices


def create_app(settings: Optional[Settings] = None, *, engine: Optional[RiskEngine] = None) -> FastAPI:
    settings = settings or Settings.from_environment()
    app = FastAPI(title="Liquidation Risk")
    app.state.settings = settings
    app.state.engine = engine or RiskEngine(settings.risk)

    def get_engine(request: Request) -> RiskEngine:
        return request.app.state.engine

    @app.get("/healthz", response_class=JSONResponse)
    async def healthz() -> JSONResponse:
        return JSONResponse({"status": "ok"})

    @app.post("/api/liquidation-risk", response_class=JSONResponse)
    async def api_liquidation_risk(
        request: Request, engine: RiskEngine = Depends(get_engine)
    ) -> JSONResponse:
        account_balance, prices = await _read_request(request)
        metrics, panel = evaluate_panel(account_balance, prices, engine=engine)
        payload: Dict[str, Any] = metrics.to_payload()
        payload["riskLevel"] = risk_level(metrics.risk_score).value
        payload["panelVisible"] = panel.visible
        return JSONResponse(payload)

    @app.post("/api/liquidation-risk/panel", response_class=JSONResponse)
    async def api_liquidation_risk_panel(
        request: Request, engine: RiskEngine = Depends(get_engine)
    ) -> JSONResponse:
        account_balance, prices = await _read_request(request)
        _, panel = evaluate_panel(account_balance, prices, engine=engine)
        return JSONResponse(panel.to_payload())

    @app.get("/api/liquidation-risk/metrics", response_class=JSONResponse)
    async def api_liquidation_risk_metrics(engine: RiskEngine = Depends(get_engine)) -> JSONResponse:
        return JSONResponse(engine.registry.to_payload())

    return app


def main(argv: Optional[Sequence[str]] = None) -> int:  # pragma: no cover - starts a server
    settings = Settings.from_environment()
    parser = argparse.ArgumentParser(description="Serve the liquidation risk API")
    parser.add_argument("--host", default=settings.web_host, help="Interface to bind.")
    parser.add_argument("--port", type=int, default=settings.web_port, help="Port to listen on.")
    parser.add_argument("--debug", type=int, default=settings.log_level, help="Logging verbosity (0-3).")
    args = parser.parse_args(list(argv) if argv is not None else None)

    import uvicorn

    configure_logging(args.debug)
    logger.info("Starting liquidation risk API on %s:%s", args.host, args.port)
    uvicorn.run(create_app(settings), host=args.host, port=args.port, log_level="info")
    return 0
