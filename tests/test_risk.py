"""Tests for circuit-breaker state transitions."""

from __future__ import annotations

from bracket_edge.signals.risk import (
    OpenPosition,
    RiskState,
    record_settlement,
    reset_circuit_breaker,
    risk_state_from_outcomes,
    total_exposure,
)


class TestRecordSettlement:
    def test_loss_increments_streak(self):
        state = record_settlement(RiskState(), won=False)
        assert state == RiskState(consecutive_losses=1, circuit_broken=False)

    def test_trips_on_third_loss(self):
        state = RiskState()
        for _ in range(3):
            state = record_settlement(state, won=False)
        assert state.consecutive_losses == 3
        assert state.circuit_broken is True

    def test_win_resets(self):
        state = RiskState(consecutive_losses=4, circuit_broken=True)
        assert record_settlement(state, won=True) == RiskState()

    def test_input_state_unchanged(self):
        state = RiskState(consecutive_losses=1)
        record_settlement(state, won=False)
        assert state.consecutive_losses == 1

    def test_custom_threshold(self):
        state = record_settlement(RiskState(), won=False, max_consecutive_losses=1)
        assert state.circuit_broken is True


class TestRebuild:
    def test_trailing_losses_newest_first(self):
        state = risk_state_from_outcomes([False, False, True, False])
        assert state.consecutive_losses == 2
        assert state.circuit_broken is False

    def test_breaker_from_history(self):
        state = risk_state_from_outcomes([False, False, False, True])
        assert state.circuit_broken is True

    def test_empty_history(self):
        assert risk_state_from_outcomes([]) == RiskState()

    def test_manual_reset(self):
        assert reset_circuit_breaker() == RiskState()


def test_total_exposure_counts_open_only():
    positions = [
        OpenPosition("a", size=2.5),
        OpenPosition("b", size=1.0, status="lost"),
        OpenPosition("c", size=4.0),
    ]
    assert total_exposure(positions) == 6.5
