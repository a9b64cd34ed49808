"""
Elf attack boost search.

Reruns the whole battle on fresh copies of the initial state with Elf attack
power raised by 0, 1, 2, ... and reports the first boost at which no elf dies.
Each run only reads its own copy, so boosts can be farmed out to worker
processes; results are still read smallest boost first. A run that hits the
round cap does not qualify and the search moves on.
"""

import logging
from concurrent.futures import Future, ProcessPoolExecutor
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .engine import Engine
from .errors import NoQualifyingBoost, RoundLimitExceeded
from .model import Faction, Outcome
from .state import BattleState

logger = logging.getLogger("battle.search")


@dataclass
class SearchResult:
    boost: int
    elf_attack_power: int
    outcome: Outcome

    def to_dict(self):
        return {
            "boost": self.boost,
            "elf_attack_power": self.elf_attack_power,
            "outcome": self.outcome.to_dict(),
        }


def simulate(initial: BattleState, boost: int = 0, max_rounds: Optional[int] = None,
             halt_on_elf_loss: bool = False) -> Outcome:
    """Run one battle on a copy of initial with elves boosted by `boost`."""
    state = initial.copy()
    state.boost(Faction.ELF, boost)
    engine = Engine(state, max_rounds=max_rounds,
                    halt_on_loss=Faction.ELF if halt_on_elf_loss else None)
    return engine.run()


def default_max_boost(initial: BattleState) -> int:
    """Boost past which every elf hit already kills, so nothing can change."""
    goblin_hp = [u.hp for u in initial.registry.living(Faction.GOBLIN)]
    elf_power = [u.attack_power for u in initial.registry.living(Faction.ELF)]
    if not goblin_hp or not elf_power:
        return 0
    return max(0, max(goblin_hp) - min(elf_power))


class OutcomeSearch:
    """Find the smallest elf boost that wins without elf casualties."""

    def __init__(self, initial: BattleState, max_boost: Optional[int] = None,
                 workers: int = 1, max_rounds: Optional[int] = None):
        if workers < 1:
            raise ValueError("workers must be positive")
        self.initial = initial
        self.max_boost = default_max_boost(initial) if max_boost is None else max_boost
        self.workers = workers
        self.max_rounds = max_rounds
        elves = initial.registry.living(Faction.ELF)
        self.base_elf_power = min(u.attack_power for u in elves) if elves else 0

    def _result(self, boost: int, outcome: Outcome) -> SearchResult:
        logger.info("Boost %d keeps every elf alive: %d rounds, score %d",
                    boost, outcome.rounds, outcome.score)
        return SearchResult(boost=boost, elf_attack_power=self.base_elf_power + boost, outcome=outcome)

    def _qualifying(self, boost: int, outcome: Optional[Outcome]) -> Optional[SearchResult]:
        if outcome is None:
            logger.debug("Boost %d runs past %d rounds", boost, self.max_rounds)
            return None
        if outcome.elf_deaths:
            logger.debug("Boost %d loses an elf", boost)
            return None
        return self._result(boost, outcome)

    def run(self) -> SearchResult:
        if self.workers == 1:
            return self._run_serial()
        return self._run_parallel()

    def _run_serial(self) -> SearchResult:
        for boost in range(self.max_boost + 1):
            try:
                outcome = simulate(self.initial, boost, self.max_rounds, halt_on_elf_loss=True)
            except RoundLimitExceeded:
                outcome = None
            result = self._qualifying(boost, outcome)
            if result is not None:
                return result
        raise NoQualifyingBoost(self.max_boost)

    def _run_parallel(self) -> SearchResult:
        pool = ProcessPoolExecutor(max_workers=self.workers)
        try:
            pending: List[Tuple[int, Future]] = [
                (boost, pool.submit(simulate, self.initial, boost, self.max_rounds, True))
                for boost in range(self.max_boost + 1)
            ]
            # Read in boost order: a finished larger boost never beats a pending smaller one.
            for boost, future in pending:
                try:
                    outcome = future.result()
                except RoundLimitExceeded:
                    outcome = None
                result = self._qualifying(boost, outcome)
                if result is not None:
                    return result
        finally:
            # Boosts above the answer that have not started yet are dropped.
            pool.shutdown(wait=True, cancel_futures=True)
        raise NoQualifyingBoost(self.max_boost)
