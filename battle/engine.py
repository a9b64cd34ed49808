import logging
from enum import Enum
from typing import List, Optional
from .errors import BattleStalled, RoundLimitExceeded
from .model import Event, Faction, Outcome
from .resolver import CombatResolver
from .state import BattleState

logger = logging.getLogger("battle.engine")

class BattleStatus(Enum):
    IDLE = "idle"                # between rounds
    IN_PROGRESS = "in_progress"  # a round is being resolved
    ENDED = "ended"

class Engine:
    """Pure, deterministic round scheduler."""

    def __init__(self, initial_state: BattleState, max_rounds: Optional[int] = None,
                 halt_on_loss: Optional[Faction] = None):
        self.state = initial_state
        self.max_rounds = max_rounds
        # Stop as soon as this faction loses a unit; the outcome is then partial.
        self.halt_on_loss = halt_on_loss
        self.completed_rounds = 0
        self.status = BattleStatus.IDLE
        self.halted = False
        self._resolver = CombatResolver(self.state)

    @property
    def ended(self) -> bool:
        return self.status is BattleStatus.ENDED

    def _end(self, evts: List[Event]) -> None:
        self.status = BattleStatus.ENDED
        evts.append(Event("BattleEnded", self.completed_rounds, self.outcome().to_dict()))
        logger.info("Battle ended after %d full rounds, %d hp left",
                    self.completed_rounds, self.state.registry.total_hp())

    def step(self) -> List[Event]:
        """Resolve one round. A round cut short by the battle ending is not counted."""
        if self.ended:
            return []
        evts: List[Event] = []
        order = self.state.reading_order()
        if not order:
            self._end(evts)
            return evts

        self.status = BattleStatus.IN_PROGRESS
        round_no = self.completed_rounds + 1
        progressed = False
        for unit_id in order:
            unit = self.state.registry.get(unit_id)
            if unit is None:
                continue  # died earlier this round
            report = self._resolver.take_turn(unit, round_no)
            evts += report.events
            if not report.enemies_remaining:
                self._end(evts)
                return evts
            progressed = progressed or report.moved or report.attacked
            if self.halt_on_loss and any(
                    e.kind == "Destroyed" and e.data["faction"] == self.halt_on_loss.name
                    for e in report.events):
                self.halted = True
                self._end(evts)
                return evts

        if not progressed:
            self.status = BattleStatus.ENDED
            raise BattleStalled(
                f"round {round_no} changed nothing; the factions cannot reach each other",
                self.completed_rounds)

        self.state.check_invariants()
        self.completed_rounds += 1
        self.status = BattleStatus.IDLE
        evts.append(Event("RoundCompleted", self.completed_rounds,
                          {"units": len(self.state.registry),
                           "hp": self.state.registry.total_hp()}))
        logger.debug("Round %d complete: %d units alive",
                     self.completed_rounds, len(self.state.registry))

        if self.max_rounds is not None and self.completed_rounds > self.max_rounds:
            self.status = BattleStatus.ENDED
            raise RoundLimitExceeded(f"battle still running after {self.max_rounds} rounds",
                                    self.completed_rounds)
        return evts

    def run(self) -> Outcome:
        """Step until one faction is gone and return the result."""
        while not self.ended:
            self.step()
        return self.outcome()

    def outcome(self) -> Outcome:
        registry = self.state.registry
        alive = registry.factions_alive()
        return Outcome(
            rounds=self.completed_rounds,
            remaining_hp=registry.total_hp(),
            winner=alive[0] if len(alive) == 1 else None,
            deaths={f: registry.deaths(f) for f in Faction},
        )

    def snapshot(self) -> BattleState:
        """Return current state."""
        return self.state
