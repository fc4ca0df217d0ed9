"""Clock engine for the Matchday live-match tracker."""

import logging
from typing import Callable, Dict, Iterable, List, Optional

from ..models import MatchClock, MatchPhase
from ..utils import DEFAULT_MATCH_DURATION_MIN, MAX_MATCH_DURATION_MIN, now_ts
from .errors import InvalidTransition

logger = logging.getLogger(__name__)

PhaseListener = Callable[[MatchPhase, MatchPhase], None]


class ClockEngine:
    """Service for match time, per-player time and the half/full-time transitions.

    The engine is driven by ``tick()``. Each tick measures the wall-clock
    delta since the previous one and applies the whole seconds it contains,
    carrying the fractional remainder forward, so a late or suspended timer
    neither loses nor gains time.
    """

    def __init__(self):
        self.clock = MatchClock()
        self._player_times: Dict[str, int] = {}
        self._active_ids: List[str] = []
        self._last_tick_ts: Optional[float] = None
        self._carry = 0.0
        self._listeners: List[PhaseListener] = []

    # ------------------------------------------------------------------
    # Phase controls
    # ------------------------------------------------------------------
    def start(
        self,
        active_player_ids: Iterable[str],
        initial_times: Dict[str, int],
        total_duration_minutes: int = DEFAULT_MATCH_DURATION_MIN,
    ) -> None:
        """Kick off a new match.

        Raises:
            InvalidTransition: If a match is already running, the duration is
                invalid, or an active player has no initial time.
        """

        if self.clock.phase != MatchPhase.IDLE:
            raise InvalidTransition(f"Cannot start a match while {self.clock.phase.value}")

        if (
            isinstance(total_duration_minutes, bool)
            or not isinstance(total_duration_minutes, int)
            or not 0 < total_duration_minutes <= MAX_MATCH_DURATION_MIN
        ):
            raise InvalidTransition(f"Invalid match duration: {total_duration_minutes!r}")

        active = list(dict.fromkeys(active_player_ids))
        missing = [pid for pid in active if pid not in initial_times]
        if missing:
            raise InvalidTransition(f"No initial time for active players: {', '.join(missing)}")
        if any(int(seconds) < 0 for seconds in initial_times.values()):
            raise InvalidTransition("Initial player times cannot be negative")

        self._player_times = {pid: int(seconds) for pid, seconds in initial_times.items()}
        self._active_ids = active
        self.clock = MatchClock(
            phase=MatchPhase.IDLE,
            elapsed_seconds=0,
            total_duration_minutes=total_duration_minutes,
        )
        self._set_phase(MatchPhase.PLAYING)
        self._last_tick_ts = now_ts()
        self._carry = 0.0
        logger.info(
            "Match started: %d min, %d active of %d players",
            total_duration_minutes, len(active), len(self._player_times),
        )

    def toggle_play_pause(self) -> MatchPhase:
        """Pause a running match or resume a paused one; no-op otherwise."""

        if self.clock.phase == MatchPhase.PLAYING:
            self.pause()
        elif self.clock.phase == MatchPhase.PAUSED:
            self.resume()
        return self.clock.phase

    def pause(self) -> bool:
        if self.clock.phase != MatchPhase.PLAYING:
            return False
        self.tick()
        # The catch-up may itself have reached half or full time
        if self.clock.phase == MatchPhase.PLAYING:
            self._set_phase(MatchPhase.PAUSED)
        return True

    def resume(self) -> bool:
        if self.clock.phase != MatchPhase.PAUSED:
            return False
        self._set_phase(MatchPhase.PLAYING)
        self._last_tick_ts = now_ts()
        self._carry = 0.0
        return True

    def finish(self) -> None:
        """End the match early (the coach ends it before full time)."""

        if self.clock.phase == MatchPhase.IDLE:
            raise InvalidTransition("Cannot finish a match that has not started")
        if self.clock.phase == MatchPhase.PLAYING:
            self.tick()
        if self.clock.phase != MatchPhase.FINISHED:
            self._set_phase(MatchPhase.FINISHED)

    def cancel(self) -> None:
        """Return to idle and forget all accrued time."""

        duration = self.clock.total_duration_minutes
        previous = self.clock.phase
        self.clock = MatchClock(total_duration_minutes=duration)
        self._player_times = {}
        self._active_ids = []
        self._last_tick_ts = None
        self._carry = 0.0
        if previous != MatchPhase.IDLE:
            logger.info("Match cancelled from %s", previous.value)
            self._notify(previous, MatchPhase.IDLE)

    # ------------------------------------------------------------------
    # Time accrual
    # ------------------------------------------------------------------
    def tick(self, now: Optional[float] = None) -> int:
        """Apply the time elapsed since the last tick.

        Returns:
            Number of whole seconds added to the match clock
        """

        if self.clock.phase != MatchPhase.PLAYING:
            return 0

        current = now_ts() if now is None else now
        if self._last_tick_ts is None or current < self._last_tick_ts:
            self._last_tick_ts = current
            return 0

        total = self._carry + (current - self._last_tick_ts)
        whole = int(total)
        self._carry = total - whole
        self._last_tick_ts = current
        if whole <= 0:
            return 0
        return self._advance(whole)

    def set_active_players(self, player_ids: Iterable[str]) -> bool:
        """Replace the set of players accruing time.

        Returns:
            True if the set changed
        """

        ids = list(dict.fromkeys(player_ids))
        if set(ids) == set(self._active_ids):
            return False
        self._active_ids = ids
        for pid in ids:
            self._player_times.setdefault(pid, 0)
        logger.debug("Active players now %s", ids)
        return True

    def add_phase_listener(self, listener: PhaseListener) -> None:
        self._listeners.append(listener)

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------
    @property
    def phase(self) -> MatchPhase:
        return self.clock.phase

    @property
    def elapsed_seconds(self) -> int:
        return self.clock.elapsed_seconds

    @property
    def player_times(self) -> Dict[str, int]:
        return dict(self._player_times)

    @property
    def active_player_ids(self) -> List[str]:
        return list(self._active_ids)

    def player_time(self, player_id: str) -> int:
        return self._player_times.get(player_id, 0)

    def remaining_seconds(self) -> int:
        return max(0, self.clock.full_time_seconds - self.clock.elapsed_seconds)

    def is_second_half(self) -> bool:
        return self.clock.is_second_half()

    def snapshot(self) -> MatchClock:
        return MatchClock(
            phase=self.clock.phase,
            elapsed_seconds=self.clock.elapsed_seconds,
            total_duration_minutes=self.clock.total_duration_minutes,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _advance(self, seconds: int) -> int:
        applied = 0
        half = self.clock.half_time_seconds
        full = self.clock.full_time_seconds

        while seconds > 0 and self.clock.phase == MatchPhase.PLAYING:
            elapsed = self.clock.elapsed_seconds
            boundary = half if elapsed < half else full
            step = min(seconds, boundary - elapsed)
            self.clock.elapsed_seconds = elapsed + step
            for pid in self._active_ids:
                self._player_times[pid] = self._player_times.get(pid, 0) + step
            applied += step
            seconds -= step

            # Edge-triggered: only a step that lands on the boundary fires it
            if self.clock.elapsed_seconds == full:
                logger.info("Full time at %ds", full)
                self._set_phase(MatchPhase.FINISHED)
            elif self.clock.elapsed_seconds == half and elapsed < half:
                logger.info("Half time at %ds", half)
                self._set_phase(MatchPhase.PAUSED)

        logger.debug("Tick applied %ds (elapsed %ds)", applied, self.clock.elapsed_seconds)
        return applied

    def _set_phase(self, phase: MatchPhase) -> None:
        previous = self.clock.phase
        self.clock.phase = phase
        if phase != MatchPhase.PLAYING:
            self._last_tick_ts = None
            self._carry = 0.0
        if previous != phase:
            self._notify(previous, phase)

    def _notify(self, previous: MatchPhase, phase: MatchPhase) -> None:
        for listener in self._listeners:
            listener(previous, phase)
