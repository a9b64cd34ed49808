from collections import Counter, defaultdict
from typing import Dict, Iterable, List, Optional, Tuple
from battle.model import Event

class EventLog:
    """Battle history indexed by round and by event kind.

    Offsets are positions in the full history, so a poller filtering on kind
    still advances past the events it skipped.
    """

    def __init__(self):
        self._log: List[Event] = []
        self._by_round: Dict[int, List[int]] = defaultdict(list)
        self._kinds: Counter = Counter()

    def __len__(self) -> int:
        return len(self._log)

    def record_round(self, evts: Iterable[Event]) -> Tuple[int, int]:
        """Store the events of one engine step; returns the offset range they took."""
        start = len(self._log)
        for evt in evts:
            self._by_round[evt.round].append(len(self._log))
            self._kinds[evt.kind] += 1
            self._log.append(evt)
        return start, len(self._log)

    def since(self, offset: int, limit: int = 1000,
              kinds: Optional[Iterable[str]] = None) -> Tuple[List[Event], int]:
        """Up to `limit` events at or after offset, optionally of the given kinds."""
        wanted = set(kinds) if kinds else None
        pos = max(0, offset)
        chunk: List[Event] = []
        while pos < len(self._log) and len(chunk) < limit:
            evt = self._log[pos]
            pos += 1
            if wanted is None or evt.kind in wanted:
                chunk.append(evt)
        return chunk, pos

    def for_round(self, round_no: int) -> List[Event]:
        return [self._log[i] for i in self._by_round.get(round_no, ())]

    @property
    def last_round(self) -> int:
        """Highest completed round seen so far."""
        return max((e.round for e in self.for_kind("RoundCompleted")), default=0)

    def for_kind(self, kind: str) -> List[Event]:
        return [e for e in self._log if e.kind == kind]

    def tally(self) -> Dict[str, int]:
        """Number of events of each kind, e.g. how many units were destroyed."""
        return dict(self._kinds)
