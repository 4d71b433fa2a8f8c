import pytest

from liquidation_risk.risk_engine.core import RiskEngine
from liquidation_risk.risk_engine.metrics import HistogramSummary, MetricRegistry, Timer


def test_histogram_keeps_running_summary():
    registry = MetricRegistry()

    for value in (0.5, 2.0, 1.5):
        registry.observe("latency", value, labels={"route": "risk"})

    summary = registry.histogram("latency", labels={"route": "risk"})
    assert summary.count == 3
    assert summary.sum == pytest.approx(4.0)
    assert summary.max == pytest.approx(2.0)
    assert registry.histogram("unknown") == HistogramSummary()


def test_repeated_evaluations_do_not_grow_metric_storage():
    engine = RiskEngine()

    for _ in range(5000):
        engine.evaluate({"exchange": "binance", "assets": []})

    assert len(engine.registry.histograms) == 1
    (summary,) = engine.registry.histograms.values()
    assert isinstance(summary, HistogramSummary)
    assert summary.count == 5000
    assert engine.registry.counter("liquidation_risk.cache", labels={"result": "miss"}) == 5000


def test_timer_and_payload_rendering():
    registry = MetricRegistry()
    registry.inc("liquidation_risk.cache", labels={"result": "hit"})
    with Timer(registry, "liquidation_risk.compute_seconds"):
        pass

    payload = registry.to_payload()

    assert payload["counters"] == {'liquidation_risk.cache{result="hit"}': 1.0}
    histogram = payload["histograms"]["liquidation_risk.compute_seconds"]
    assert histogram["count"] == 1
    assert histogram["sum"] >= 0
    assert histogram["max"] == pytest.approx(histogram["sum"])
