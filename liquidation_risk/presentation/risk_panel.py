"""View model and text rendering for the liquidation risk panel."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from ..models import PerPositionMetrics, PositionAsset, RiskMetrics
from ..risk_engine.classifier import is_cross_margin
from ..risk_engine.config import RiskEngineConfig
from ..risk_engine.core import RiskEngine, coerce_snapshot
from ..risk_engine.entry_price import estimate_entry_price
from ..risk_engine.margin_ratio import margin_mode_description, margin_ratio_band
from ..risk_engine.risk_rules import RiskLevel, is_at_risk, risk_level, risk_score_band
from .formatting import (
    format_compact_usd,
    format_currency,
    format_entry_price,
    format_margin_ratio,
    format_score,
)

__all__ = [
    "PanelStat",
    "PositionRow",
    "RiskPanel",
    "build_risk_panel",
    "evaluate_panel",
    "render_risk_panel",
]

SEGMENT_COUNT = 20
# Leverage shown for cross margin accounts without positions.
DEFAULT_MAX_LEVERAGE = "10x"

_CATEGORY_LABELS = {
    RiskLevel.SAFE: "Safe (>66%)",
    RiskLevel.WARNING: "Warning (33-66%)",
    RiskLevel.DANGER: "Danger (<33%)",
}


@dataclass
class PanelStat:
    label: str
    value: str
    band: Optional[str] = None


@dataclass
class PositionRow:
    symbol: str
    notional: str
    leverage: str
    margin_ratio: str
    margin_ratio_band: str
    entry_price: str
    buffer: str
    margin_mode: Optional[str] = None


@dataclass
class RiskPanel:
    visible: bool
    headline: str = ""
    level: str = RiskLevel.SAFE.value
    category: str = ""
    score_band: str = ""
    at_risk: bool = False
    segments_filled: int = 0
    segment_count: int = SEGMENT_COUNT
    show_progress: bool = False
    stats: List[PanelStat] = field(default_factory=list)
    positions: List[PositionRow] = field(default_factory=list)

    def to_payload(self) -> Dict[str, Any]:
        return asdict(self)


def _round_display(value: float) -> str:
    text = f"{value:,.2f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def _position_row(position: PerPositionMetrics, asset: Optional[PositionAsset] = None) -> PositionRow:
    if asset is None:
        entry_price = position.avg_entry_price
        margin_mode = None
    else:
        entry_price = estimate_entry_price(asset, position.current_price)
        margin_mode = margin_mode_description(asset.margin_mode)
    return PositionRow(
        symbol=position.symbol,
        notional=format_currency(position.notional),
        leverage=f"{_round_display(position.leverage)}x",
        margin_ratio=format_margin_ratio(position.margin_ratio_pct),
        margin_ratio_band=margin_ratio_band(position.margin_ratio_pct).value,
        entry_price=format_entry_price(entry_price),
        buffer=format_currency(position.buffer),
        margin_mode=margin_mode,
    )


def build_risk_panel(
    metrics: RiskMetrics,
    is_cross_margin: bool,
    positions: Optional[Sequence[PositionAsset]] = None,
) -> RiskPanel:
    """Describe how a risk panel should present ``metrics``.

    Conventional accounts without perpetual exposure get a hidden panel.
    Cross margin accounts without positions show their balance instead of a
    risk score.

    ``positions`` are the snapshot positions behind ``metrics.per_position``;
    when given, rows fall back to the mark price for entries that cannot be
    derived and show each position's margin mode.
    """

    if not is_cross_margin and not metrics.has_perp_exposure:
        return RiskPanel(visible=False)

    score = metrics.risk_score
    level = risk_level(score)
    has_positions = bool(metrics.per_position)
    idle_cross_account = is_cross_margin and not has_positions

    if idle_cross_account:
        headline = f"No Open Positions ({_round_display(metrics.account_balance_usd)} USD)"
        level = RiskLevel.SAFE
    elif level is RiskLevel.SAFE:
        headline = f"Safe ({format_score(score)})"
    else:
        headline = f"At Risk ({format_score(score)})"

    if idle_cross_account:
        stats = [
            PanelStat("Liquidation Buffer", format_compact_usd(metrics.liquidation_buffer)),
            PanelStat("Account Balance", format_compact_usd(metrics.account_balance_usd)),
            PanelStat("Available for Trading", "100%"),
            PanelStat("Max Leverage", DEFAULT_MAX_LEVERAGE),
        ]
    else:
        first_ratio = metrics.per_position[0].margin_ratio_pct if has_positions else None
        stats = [
            PanelStat("Liquidation Buffer", format_compact_usd(metrics.liquidation_buffer)),
            PanelStat("Maintenance Margin", format_compact_usd(metrics.maintenance_margin_usd)),
            PanelStat(
                "Margin Ratio",
                format_margin_ratio(first_ratio) if has_positions else "N/A",
                margin_ratio_band(first_ratio).value if has_positions else None,
            ),
            PanelStat("Average Leverage", f"{_round_display(metrics.average_leverage)}x"),
        ]
        if metrics.average_entry_price:
            stats.append(PanelStat("Average Entry Price", format_entry_price(metrics.average_entry_price)))

    if positions is not None and len(positions) == len(metrics.per_position):
        rows = [_position_row(metrics_row, asset) for metrics_row, asset in zip(metrics.per_position, positions)]
    else:
        rows = [_position_row(metrics_row) for metrics_row in metrics.per_position]

    return RiskPanel(
        visible=True,
        headline=headline,
        level=level.value,
        category=_CATEGORY_LABELS[risk_level(score)],
        score_band=risk_score_band(score).value,
        at_risk=has_positions and is_at_risk(score),
        segments_filled=int(math.floor(score / 100 * SEGMENT_COUNT)),
        show_progress=has_positions,
        stats=stats,
        positions=rows,
    )


def render_risk_panel(panel: RiskPanel, *, title: str = "Liquidation Risk") -> str:
    lines: List[str] = []
    lines.append("=" * 80)
    lines.append(title)
    lines.append("=" * 80)
    if not panel.visible:
        lines.append("No perpetual exposure; liquidation risk not applicable.")
        return "\n".join(lines)

    lines.append(panel.headline)
    if panel.show_progress:
        bar = "#" * panel.segments_filled + "." * (panel.segment_count - panel.segments_filled)
        lines.append(f"  [{bar}] {panel.category}")
    lines.append("")
    for stat in panel.stats:
        line = f"  {stat.label}: {stat.value}"
        if stat.band:
            line += f" ({stat.band})"
        lines.append(line)

    if panel.positions:
        lines.append("")
        lines.append("  Positions:")
        for row in panel.positions:
            mode = f" [{row.margin_mode}]" if row.margin_mode else ""
            lines.append(
                f"    - {row.symbol}{mode}: notional {row.notional}, leverage {row.leverage}, "
                f"margin ratio {row.margin_ratio} ({row.margin_ratio_band}), "
                f"entry {row.entry_price}, buffer {row.buffer}"
            )
    return "\n".join(lines)


def evaluate_panel(
    account_balance: Any,
    current_prices: Optional[Mapping[str, Any]] = None,
    *,
    engine: Optional[RiskEngine] = None,
    config: Optional[RiskEngineConfig] = None,
) -> Tuple[RiskMetrics, RiskPanel]:
    """Compute metrics for a raw snapshot and build its panel."""

    engine = engine or RiskEngine(config)
    metrics = engine.evaluate(account_balance, current_prices)
    snapshot = coerce_snapshot(account_balance)
    stablecoins = engine.config.classifier_stablecoins
    cross_margin = snapshot is not None and is_cross_margin(snapshot, stablecoins)
    positions = snapshot.positions() if snapshot is not None else None
    return metrics, build_risk_panel(metrics, cross_margin, positions)
