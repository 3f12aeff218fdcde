import random
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from drumfeed.models.drum_record import DrumRecord
from drumfeed.synthesis.distributions import (
    EPOCH_START,
    LOCATION_UPLOADED_PROBABILITY,
    MAX_SEAL_DELAY,
    SEALED_PROBABILITY,
    WEIGHT_MAX_CENTS,
    WEIGHT_MIN_CENTS,
)
from drumfeed.synthesis.identifiers import (
    new_batch_code,
    new_drum_id,
    new_scan_hash,
    new_user_id,
)


# --- Field-group samplers (shared with the mutator) ---

def sample_weight(rng: random.Random) -> float:
    """Uniform over the two-decimal grid in [10.00, 49.99]."""
    return rng.randrange(WEIGHT_MIN_CENTS, WEIGHT_MAX_CENTS) / 100


def sample_tamper_status(rng: random.Random) -> Tuple[bool, bool]:
    """Returns (is_sealed, is_tampered) from a single draw."""
    sealed = rng.random() < SEALED_PROBABILITY
    return sealed, not sealed


def sample_location(rng: random.Random) -> Tuple[bool, str]:
    """
    Returns (location_uploaded, uploader_user_id).
    The uploader id is always fresh, whatever the upload flag says.
    """
    uploaded = rng.random() < LOCATION_UPLOADED_PROBABILITY
    return uploaded, new_user_id()


def sample_pour_and_seal(
    rng: random.Random,
    now: Optional[datetime] = None,
) -> Tuple[datetime, datetime]:
    now = now or datetime.now(timezone.utc)
    poured_at = EPOCH_START + rng.random() * (now - EPOCH_START)
    sealed_at = poured_at + rng.random() * MAX_SEAL_DELAY
    return poured_at, sealed_at


# --- Record synthesis ---

def synthesize(rng: random.Random, now: Optional[datetime] = None) -> DrumRecord:
    """
    Builds one DrumRecord from scratch.

    `rng` drives every distributional choice; identifiers and the
    scan hash come from the CSPRNG. `now` bounds the pour instant
    and defaults to the wall clock.
    """
    poured_at, sealed_at = sample_pour_and_seal(rng, now)
    is_sealed, is_tampered = sample_tamper_status(rng)
    uploaded, uploader_id = sample_location(rng)

    return DrumRecord(
        drum_id=new_drum_id(),
        batch_code=new_batch_code(),
        weight=sample_weight(rng),
        poured_at=poured_at,
        tamper_sealed_at=sealed_at,
        is_sealed=is_sealed,
        is_tampered=is_tampered,
        location_uploaded=uploaded,
        uploader_user_id=uploader_id,
        facial_recognition_scan_hash=new_scan_hash(),
    )


def synthesize_many(
    n: int,
    rng: random.Random,
    now: Optional[datetime] = None,
) -> List[DrumRecord]:
    if n < 0:
        raise ValueError(f"record count must be non-negative, got {n}")

    # Pin "now" once so the whole batch shares one upper bound
    now = now or datetime.now(timezone.utc)
    return [synthesize(rng, now) for _ in range(n)]
