"""Deterministic risk state machine for shipped units."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional, Union

from ..config import settings
from ..formats.transforms import parse_date
from ..resolution.models import ResolvedImportUnit
from .models import Demurrage, DemurrageStatus, RiskAssessment, RiskMode, UnitSnapshot

logger = logging.getLogger(__name__)

EXITED_TERMINAL_STATUSES = frozenset({"DEL", "DELIVERED", "CGO"})
AT_PORT_STATUSES = frozenset({"ARR", "DIS", "AVL", "REL", "CUS"})


def days_between(later: datetime, earlier: datetime) -> int:
    """Whole days from earlier to later, truncated toward zero."""
    return int((later - earlier).total_seconds() / 86400)


def is_recorded(value) -> bool:
    """True when a field holds any value, parseable or not."""
    if value is None:
        return False
    return not (isinstance(value, str) and not value.strip())


def format_day(value: Optional[datetime]) -> str:
    if value is None:
        return "Unknown Date"
    return f"{value.strftime('%b')} {value.day}"


@dataclass
class _Facts:
    """Parsed inputs for one evaluation."""

    unit: UnitSnapshot
    now: datetime
    status: str
    last_free_day: Optional[datetime]
    gate_out: Optional[datetime]
    empty_return: Optional[datetime]
    arrival: Optional[datetime]
    eta: Optional[datetime]
    status_updated: Optional[datetime]
    demurrage: Demurrage
    gate_out_recorded: bool = False
    empty_return_recorded: bool = False
    arrival_recorded: bool = False

    @property
    def lfd_valid(self) -> bool:
        return self.last_free_day is not None

    @property
    def exited_terminal(self) -> bool:
        return self.gate_out_recorded or self.status in EXITED_TERMINAL_STATUSES

    @property
    def at_port(self) -> bool:
        return self.arrival_recorded or self.status in AT_PORT_STATUSES

    @property
    def gate_out_reference(self) -> datetime:
        return self.gate_out or self.status_updated or self.now

    @property
    def days_since_gate_out(self) -> int:
        return days_between(self.now, self.gate_out_reference)


Rule = tuple[Callable[[_Facts], bool], Callable[[_Facts], RiskAssessment]]


class RiskStateMachine:
    """
    Classifies a unit into a lifecycle mode with its demurrage exposure.

    Rules are checked in order and the first matching predicate builds the
    assessment. Evaluation is pure: the same unit and clock always produce
    the same result.
    """

    def __init__(
        self,
        demurrage_daily_rate: Optional[float] = None,
        detention_daily_rate: Optional[float] = None,
        detention_free_days: Optional[int] = None,
        detention_alert_days: Optional[int] = None,
    ):
        self.demurrage_daily_rate = (
            settings.demurrage_daily_rate if demurrage_daily_rate is None else demurrage_daily_rate
        )
        self.detention_daily_rate = (
            settings.detention_daily_rate if detention_daily_rate is None else detention_daily_rate
        )
        self.detention_free_days = (
            settings.detention_free_days if detention_free_days is None else detention_free_days
        )
        self.detention_alert_days = (
            settings.detention_alert_days if detention_alert_days is None else detention_alert_days
        )

        self.rules: list[Rule] = [
            (lambda f: f.empty_return_recorded, self._complete),
            (
                lambda f: f.exited_terminal and f.days_since_gate_out > self.detention_alert_days,
                self._detention,
            ),
            (lambda f: f.exited_terminal, self._active),
            (lambda f: f.at_port, self._monitor),
            (lambda f: True, self._transit),
        ]

    def evaluate(
        self,
        unit: Union[UnitSnapshot, ResolvedImportUnit],
        now: Optional[datetime] = None,
    ) -> RiskAssessment:
        """Evaluate a unit at `now` (defaults to the current UTC time)."""
        if isinstance(unit, ResolvedImportUnit):
            unit = UnitSnapshot.from_resolved_unit(unit)

        now = now or datetime.now(timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)

        last_free_day = parse_date(unit.last_free_day)
        facts = _Facts(
            unit=unit,
            now=now,
            status=(unit.current_status or "").strip().upper(),
            last_free_day=last_free_day,
            gate_out=parse_date(unit.gate_out_date),
            empty_return=parse_date(unit.empty_return_date),
            arrival=parse_date(unit.port_arrival_date),
            eta=parse_date(unit.estimated_arrival),
            status_updated=parse_date(unit.status_last_updated),
            demurrage=self.standard_demurrage(last_free_day, now),
            gate_out_recorded=is_recorded(unit.gate_out_date),
            empty_return_recorded=is_recorded(unit.empty_return_date),
            arrival_recorded=is_recorded(unit.port_arrival_date),
        )

        for predicate, build in self.rules:
            if predicate(facts):
                assessment = build(facts)
                logger.debug(
                    f"Unit {unit.unit_ref or '?'} -> {assessment.mode.value} "
                    f"({assessment.demurrage.status.value})"
                )
                return assessment

        raise RuntimeError("No risk rule matched")

    def standard_demurrage(self, last_free_day: Optional[datetime], now: datetime) -> Demurrage:
        """Demurrage exposure against the last free day."""
        demurrage = Demurrage(daily_rate=self.demurrage_daily_rate)
        if last_free_day is None:
            return demurrage

        days_remaining = days_between(last_free_day, now)
        if days_remaining < 0:
            demurrage.status = DemurrageStatus.OVERDUE
            demurrage.days_overdue = abs(days_remaining)
            demurrage.total = demurrage.days_overdue * self.demurrage_daily_rate
        elif days_remaining <= 3:
            demurrage.status = DemurrageStatus.CRITICAL
        elif days_remaining <= 7:
            demurrage.status = DemurrageStatus.WARNING
        else:
            demurrage.status = DemurrageStatus.SAFE
        return demurrage

    # Builders

    def _complete(self, f: _Facts) -> RiskAssessment:
        return RiskAssessment(
            mode=RiskMode.COMPLETE,
            headline="RETURNED / COMPLETE",
            summary=(
                f"Mission Complete: Container returned empty to depot on "
                f"{format_day(f.empty_return)}. No further actions required."
            ),
            theme_color="emerald",
            show_risk_card=False,
            show_actions=False,
            requires_action=False,
            progress_step=5,
            lfd_valid=f.lfd_valid,
            demurrage=f.demurrage,
            evaluated_at=f.now,
        )

    def _detention(self, f: _Facts) -> RiskAssessment:
        days = f.days_since_gate_out
        total = max(0, (days - self.detention_free_days) * self.detention_daily_rate)
        return RiskAssessment(
            mode=RiskMode.RISK_DETENTION,
            headline="DETENTION ALERT / OVERDUE",
            summary=(
                f"Status Critical: Container gated out {days} days ago and has not been "
                f"returned. Daily detention fees are accumulating."
            ),
            theme_color="red",
            show_risk_card=True,
            show_actions=True,
            requires_action=True,
            progress_step=4,
            lfd_valid=True,
            # days_overdue reports total days out, not days past free time
            demurrage=Demurrage(
                total=total,
                days_overdue=days,
                daily_rate=self.detention_daily_rate,
                status=DemurrageStatus.OVERDUE,
            ),
            evaluated_at=f.now,
        )

    def _active(self, f: _Facts) -> RiskAssessment:
        return RiskAssessment(
            mode=RiskMode.ACTIVE,
            headline="GATE OUT / DEPARTED",
            summary=(
                f"Transit Active: Cargo departed terminal on "
                f"{format_day(f.gate_out or f.status_updated)}. Currently en route to destination."
            ),
            theme_color="blue",
            show_risk_card=False,
            show_actions=False,
            requires_action=False,
            progress_step=4,
            lfd_valid=f.lfd_valid,
            demurrage=f.demurrage,
            evaluated_at=f.now,
        )

    def _monitor(self, f: _Facts) -> RiskAssessment:
        return RiskAssessment(
            mode=RiskMode.RISK_MONITOR,
            headline="ARRIVED / DISCHARGED",
            summary=(
                f"At Port: Vessel arrived {format_day(f.arrival or f.status_updated)}. "
                f"Please monitor Last Free Day ({format_day(f.last_free_day)})."
            ),
            theme_color="amber",
            show_risk_card=True,
            show_actions=True,
            requires_action=True,
            progress_step=3,
            lfd_valid=f.lfd_valid,
            demurrage=f.demurrage,
            evaluated_at=f.now,
        )

    def _transit(self, f: _Facts) -> RiskAssessment:
        return RiskAssessment(
            mode=RiskMode.TRANSIT,
            headline="ON VESSEL / IN TRANSIT",
            summary=f"Vessel is currently underway. ETA: {format_day(f.eta)}.",
            theme_color="slate",
            show_risk_card=False,
            show_actions=False,
            requires_action=False,
            progress_step=2,
            lfd_valid=f.lfd_valid,
            demurrage=f.demurrage,
            evaluated_at=f.now,
        )
