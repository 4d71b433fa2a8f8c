"""Presentation helpers for the liquidation risk panel and CLI."""

from .risk_panel import RiskPanel, build_risk_panel, evaluate_panel, render_risk_panel

__all__ = ["RiskPanel", "build_risk_panel", "evaluate_panel", "render_risk_panel"]
