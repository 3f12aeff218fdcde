import logging
import random
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Literal, Optional

from drumfeed.errors import SnapshotGenerationError
from drumfeed.models.drum_record import DrumRecord
from drumfeed.mutation.mutator import evolve
from drumfeed.synthesis.synthesizer import synthesize_many

logger = logging.getLogger("drumfeed.store")

SnapshotMode = Literal["synthesized", "evolved"]


@dataclass(frozen=True)
class SnapshotResult:
    records: List[DrumRecord]
    mode: SnapshotMode
    generated_at: datetime
    generation: int = 0


@dataclass
class SnapshotStore:
    """
    Owns the one "current snapshot" for the life of the process.

    advance() holds a single lock across read -> synthesize/evolve ->
    write, so concurrent requests see whole snapshots only. The same
    lock serializes use of the caller's random.Random, which is not
    safe to share between threads.
    """
    _records: List[DrumRecord] = field(default_factory=list)
    _generation: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def advance(
        self,
        count: int,
        rng: random.Random,
        now: Optional[datetime] = None,
    ) -> SnapshotResult:
        if count < 0:
            raise ValueError(f"snapshot size must be non-negative, got {count}")

        with self._lock:
            current = self._records
            try:
                if current:
                    mode: SnapshotMode = "evolved"
                    data = evolve(current, count, rng, now)
                else:
                    mode = "synthesized"
                    data = synthesize_many(count, rng, now)
            except Exception as e:
                raise SnapshotGenerationError(str(e)) from e

            self._records = data
            self._generation += 1
            generation = self._generation

        logger.info(f"SNAPSHOT mode={mode} size={len(data)} generation={generation}")
        return SnapshotResult(
            records=list(data),
            mode=mode,
            generated_at=datetime.now(timezone.utc),
            generation=generation,
        )

    def reset(self) -> None:
        with self._lock:
            cleared = len(self._records)
            self._records = []
            self._generation = 0
        logger.info(f"SNAPSHOT reset cleared={cleared}")

    def size(self) -> int:
        return len(self._records)

    def records(self) -> List[DrumRecord]:
        return list(self._records)

    @property
    def generation(self) -> int:
        return self._generation
