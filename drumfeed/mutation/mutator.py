import logging
import math
import random
from dataclasses import replace
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from drumfeed.models.drum_record import DrumRecord
from drumfeed.synthesis.distributions import (
    LOCATION_EDIT_PROBABILITY,
    SCAN_HASH_EDIT_PROBABILITY,
    TAMPER_STATUS_EDIT_PROBABILITY,
    UPDATE_FRACTION_MIN,
    UPDATE_FRACTION_SPAN,
    WEIGHT_EDIT_PROBABILITY,
)
from drumfeed.synthesis.identifiers import new_scan_hash
from drumfeed.synthesis.synthesizer import (
    sample_location,
    sample_tamper_status,
    sample_weight,
    synthesize,
)

logger = logging.getLogger("drumfeed.mutation")


def perturb_record(record: DrumRecord, rng: random.Random) -> DrumRecord:
    """
    Rolls each editable field group independently and returns the
    edited record. Identity fields are carried over untouched.

    Paired fields (sealed/tampered, uploaded/uploader id) are always
    resampled together.
    """
    changes: Dict[str, Any] = {}

    if rng.random() < WEIGHT_EDIT_PROBABILITY:
        changes["weight"] = sample_weight(rng)

    if rng.random() < TAMPER_STATUS_EDIT_PROBABILITY:
        changes["is_sealed"], changes["is_tampered"] = sample_tamper_status(rng)

    if rng.random() < LOCATION_EDIT_PROBABILITY:
        changes["location_uploaded"], changes["uploader_user_id"] = sample_location(rng)

    if rng.random() < SCAN_HASH_EDIT_PROBABILITY:
        changes["facial_recognition_scan_hash"] = new_scan_hash()

    if not changes:
        return record
    return replace(record, **changes)


def perturbation_count(size: int, rng: random.Random) -> int:
    """floor(size * u) with u ~ U[0.1, 0.3): how many picks the perturb pass makes."""
    return math.floor(size * (UPDATE_FRACTION_MIN + rng.random() * UPDATE_FRACTION_SPAN))


def evolve(
    current: Sequence[DrumRecord],
    target_count: int,
    rng: random.Random,
    now: Optional[datetime] = None,
) -> List[DrumRecord]:
    """
    Derives the next snapshot from `current`.

    1. Shrink: drop uniformly random positions until size <= target.
    2. Grow: append freshly synthesized records until size == target.
    3. Perturb: edit floor(size * u) picks, u ~ U[0.1, 0.3), chosen
       by position with replacement.

    Returns a new list. Records are frozen, so edits replace list
    slots and the caller's sequence and records stay as they were.
    """
    if target_count < 0:
        raise ValueError(f"target count must be non-negative, got {target_count}")

    data = list(current)
    start_size = len(data)

    while len(data) > target_count:
        del data[rng.randrange(len(data))]
    removed = start_size - len(data)

    while len(data) < target_count:
        data.append(synthesize(rng, now))
    added = len(data) - (start_size - removed)

    update_count = perturbation_count(len(data), rng)
    for _ in range(update_count):
        index = rng.randrange(len(data))
        data[index] = perturb_record(data[index], rng)

    logger.debug(
        f"EVOLVE from={start_size} to={len(data)} "
        f"removed={removed} added={added} perturbed={update_count}"
    )
    return data
