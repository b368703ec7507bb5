"""Tests for the unit risk state machine."""

from datetime import datetime, timedelta, timezone

import pytest

from freightsmith.resolution import Origin, ResolvedField, ResolvedImportUnit
from freightsmith.risk import DemurrageStatus, RiskMode, RiskStateMachine, UnitSnapshot

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def director():
    """Create a director with the default rates."""
    return RiskStateMachine(
        demurrage_daily_rate=150,
        detention_daily_rate=175,
        detention_free_days=10,
        detention_alert_days=14,
    )


class TestStandardDemurrage:
    """Test the last-free-day exposure edges."""

    def test_three_days_remaining_is_critical(self, director):
        """Test LFD three days out is critical."""
        unit = UnitSnapshot(current_status="DIS", last_free_day=NOW + timedelta(days=3))
        assessment = director.evaluate(unit, now=NOW)

        assert assessment.demurrage.status == DemurrageStatus.CRITICAL
        assert assessment.demurrage.total == 0

    def test_four_days_remaining_is_warning(self, director):
        """Test LFD four days out is a warning."""
        unit = UnitSnapshot(current_status="DIS", last_free_day=NOW + timedelta(days=4))

        assert director.evaluate(unit, now=NOW).demurrage.status == DemurrageStatus.WARNING

    def test_eight_days_remaining_is_safe(self, director):
        """Test LFD more than a week out is safe."""
        unit = UnitSnapshot(current_status="DIS", last_free_day=NOW + timedelta(days=8))

        assert director.evaluate(unit, now=NOW).demurrage.status == DemurrageStatus.SAFE

    def test_one_day_past_is_overdue(self, director):
        """Test LFD one day past is overdue by one day at the daily rate."""
        unit = UnitSnapshot(current_status="DIS", last_free_day=NOW - timedelta(days=1))
        demurrage = director.evaluate(unit, now=NOW).demurrage

        assert demurrage.status == DemurrageStatus.OVERDUE
        assert demurrage.days_overdue == 1
        assert demurrage.total == 150
        assert demurrage.daily_rate == 150

    def test_partial_days_truncate_toward_zero(self, director):
        """Test 36 hours remaining counts as one whole day."""
        demurrage = director.standard_demurrage(NOW + timedelta(hours=36), NOW)
        assert demurrage.status == DemurrageStatus.CRITICAL

        overdue = director.standard_demurrage(NOW - timedelta(hours=36), NOW)
        assert overdue.days_overdue == 1

    def test_missing_or_invalid_lfd_is_unknown(self, director):
        """Test absent and unparseable LFDs yield unknown exposure."""
        for lfd in (None, "", "TBD"):
            assessment = director.evaluate(UnitSnapshot(current_status="AVL", last_free_day=lfd), now=NOW)
            assert assessment.lfd_valid is False
            assert assessment.demurrage.status == DemurrageStatus.UNKNOWN
            assert assessment.demurrage.total == 0

    def test_string_dates_are_parsed(self, director):
        """Test ISO strings and Excel serials are accepted."""
        unit = UnitSnapshot(current_status="ARR", last_free_day="2024-06-14T12:00:00Z")
        assert director.evaluate(unit, now=NOW).demurrage.days_overdue == 1

        serial = UnitSnapshot(current_status="ARR", last_free_day=45458)  # 2024-06-15
        assert director.evaluate(serial, now=NOW).demurrage.status == DemurrageStatus.CRITICAL


class TestModes:
    """Test the rule ladder."""

    def test_complete_still_computes_demurrage(self, director):
        """Test an empty return hides but keeps an overdue demurrage block."""
        unit = UnitSnapshot(
            empty_return_date=NOW - timedelta(days=1),
            gate_out_date=NOW - timedelta(days=30),
            last_free_day=NOW - timedelta(days=5),
        )
        assessment = director.evaluate(unit, now=NOW)

        assert assessment.mode == RiskMode.COMPLETE
        assert assessment.show_risk_card is False
        assert assessment.show_actions is False
        assert assessment.progress_step == 5
        assert assessment.theme_color == "emerald"
        assert assessment.demurrage.status == DemurrageStatus.OVERDUE
        assert assessment.demurrage.total == 750

    def test_detention_override(self, director):
        """Test fifteen days since gate-out triggers detention."""
        unit = UnitSnapshot(gate_out_date=NOW - timedelta(days=15), last_free_day=None)
        assessment = director.evaluate(unit, now=NOW)

        assert assessment.mode == RiskMode.RISK_DETENTION
        assert assessment.headline == "DETENTION ALERT / OVERDUE"
        assert assessment.lfd_valid is True
        assert assessment.requires_action is True
        assert assessment.demurrage.days_overdue == 15
        assert assessment.demurrage.total == 875
        assert assessment.demurrage.daily_rate == 175
        assert assessment.demurrage.status == DemurrageStatus.OVERDUE

    def test_fourteen_days_is_still_active(self, director):
        """Test the detention threshold is strictly greater than 14 days."""
        unit = UnitSnapshot(gate_out_date=NOW - timedelta(days=14))
        assessment = director.evaluate(unit, now=NOW)

        assert assessment.mode == RiskMode.ACTIVE
        assert assessment.theme_color == "blue"
        assert assessment.progress_step == 4

    def test_delivered_status_uses_status_date_for_gate_out(self, director):
        """Test a delivered status without gate-out falls back to the status date."""
        unit = UnitSnapshot(current_status="delivered", status_last_updated=NOW - timedelta(days=20))
        assessment = director.evaluate(unit, now=NOW)

        assert assessment.mode == RiskMode.RISK_DETENTION
        assert assessment.demurrage.total == (20 - 10) * 175

    def test_delivered_status_without_dates_is_active(self, director):
        """Test gate-out falls back to now when no date is known."""
        assessment = director.evaluate(UnitSnapshot(current_status="CGO"), now=NOW)

        assert assessment.mode == RiskMode.ACTIVE

    def test_arrived_unit_is_monitored(self, director):
        """Test an arrival date puts the unit under monitoring."""
        unit = UnitSnapshot(
            port_arrival_date=NOW - timedelta(days=2),
            last_free_day=datetime(2024, 6, 20, tzinfo=timezone.utc),
        )
        assessment = director.evaluate(unit, now=NOW)

        assert assessment.mode == RiskMode.RISK_MONITOR
        assert assessment.headline == "ARRIVED / DISCHARGED"
        assert assessment.requires_action is True
        assert assessment.show_risk_card is True
        assert assessment.progress_step == 3
        assert "Jun 20" in assessment.summary

    def test_default_is_transit(self, director):
        """Test a unit with no milestones is in transit."""
        unit = UnitSnapshot(estimated_arrival="2024-07-04")
        assessment = director.evaluate(unit, now=NOW)

        assert assessment.mode == RiskMode.TRANSIT
        assert assessment.theme_color == "slate"
        assert assessment.progress_step == 2
        assert assessment.summary == "Vessel is currently underway. ETA: Jul 4."
        assert assessment.demurrage.status == DemurrageStatus.UNKNOWN

    def test_unparseable_empty_return_is_still_complete(self, director):
        """Test a recorded but unreadable empty return completes the unit."""
        unit = UnitSnapshot(empty_return_date="Returned", gate_out_date="2024-06-10")
        assessment = director.evaluate(unit, now=NOW)

        assert assessment.mode == RiskMode.COMPLETE
        assert "Unknown Date" in assessment.summary

    def test_unparseable_gate_out_still_exits_terminal(self, director):
        """Test a recorded but unreadable gate-out falls back to the status date."""
        unit = UnitSnapshot(gate_out_date="yes", status_last_updated=NOW - timedelta(days=20))
        assessment = director.evaluate(unit, now=NOW)

        assert assessment.mode == RiskMode.RISK_DETENTION
        assert assessment.demurrage.days_overdue == 20

    def test_blank_milestones_are_absent(self, director):
        """Test whitespace-only milestone cells do not advance the unit."""
        unit = UnitSnapshot(empty_return_date="  ", gate_out_date="", port_arrival_date=" ")
        assessment = director.evaluate(unit, now=NOW)

        assert assessment.mode == RiskMode.TRANSIT

    def test_evaluation_is_deterministic(self, director):
        """Test the same unit and clock give the same assessment."""
        unit = UnitSnapshot(current_status="REL", last_free_day=NOW + timedelta(days=2))

        assert director.evaluate(unit, now=NOW) == director.evaluate(unit, now=NOW)

    def test_evaluates_resolved_units(self, director):
        """Test a resolved import unit is read through its canonical fields."""
        def field(name, value):
            return ResolvedField(
                value=value, original_value=value, source_header=name, confidence=1.0,
                origin=Origin.KNOWN_FORMAT,
            )

        unit = ResolvedImportUnit(
            row_index=0,
            fields={
                "container_number": field("ContainerNumber", "MSCU1234567"),
                "event_status": field("Status", "AVL"),
                "last_free_day": field("Last Free Day", NOW - timedelta(days=2)),
            },
        )
        assessment = director.evaluate(unit, now=NOW)

        assert assessment.mode == RiskMode.RISK_MONITOR
        assert assessment.demurrage.total == 300
