import random
from datetime import timedelta

import pytest

from drumfeed.synthesis.distributions import EPOCH_START
from drumfeed.synthesis.synthesizer import (
    sample_location,
    sample_tamper_status,
    sample_weight,
    synthesize,
    synthesize_many,
)
from tests.fixtures.drum_records import (
    FIXED_NOW,
    FixedRandom,
    assert_valid_record,
    assert_valid_wire_record,
)


def test_synthesize_many_returns_requested_count():
    records = synthesize_many(10, random.Random(1))
    assert len(records) == 10


def test_synthesize_many_zero_is_empty():
    assert synthesize_many(0, random.Random(1)) == []


def test_synthesize_many_rejects_negative_count():
    with pytest.raises(ValueError):
        synthesize_many(-1, random.Random(1))


def test_every_record_satisfies_invariants():
    for record in synthesize_many(200, random.Random(42)):
        assert_valid_record(record)


def test_wire_shape_keeps_invariants():
    """Second truncation at the wire boundary must not reorder pour/seal."""
    for record in synthesize_many(200, random.Random(3)):
        assert_valid_wire_record(record.to_wire())


def test_wire_date_components_in_range():
    for record in synthesize_many(50, random.Random(5), now=FIXED_NOW):
        wire = record.to_wire()
        for prefix in ("pourDateTimestamp", "tamperSealTimestamp"):
            assert wire[f"{prefix}Year"] >= 2025
            assert 1 <= wire[f"{prefix}Month"] <= 12
            assert 1 <= wire[f"{prefix}Day"] <= 31
            assert 0 <= wire[f"{prefix}Hour"] <= 23
            assert 0 <= wire[f"{prefix}Minute"] <= 59
            assert 0 <= wire[f"{prefix}Second"] <= 59
            assert wire[f"{prefix}TimezoneUTCOffset"] == 9


def test_pour_between_epoch_and_now_and_seal_within_two_hours():
    for record in synthesize_many(100, random.Random(8), now=FIXED_NOW):
        assert EPOCH_START <= record.poured_at <= FIXED_NOW
        delay = record.tamper_sealed_at - record.poured_at
        assert timedelta(0) <= delay <= timedelta(hours=2)


def test_drum_ids_are_unique():
    records = synthesize_many(100, random.Random(0))
    drum_ids = [r.drum_id for r in records]
    assert len(set(drum_ids)) == len(drum_ids)


def test_identifiers_ignore_seed():
    """Same seed, same distributions, but ids come from the CSPRNG."""
    a = synthesize(random.Random(99), now=FIXED_NOW)
    b = synthesize(random.Random(99), now=FIXED_NOW)

    assert a.weight == b.weight
    assert a.poured_at == b.poured_at
    assert a.is_sealed == b.is_sealed
    assert a.drum_id != b.drum_id
    assert a.facial_recognition_scan_hash != b.facial_recognition_scan_hash


def test_weight_has_two_decimals_and_stays_below_fifty():
    rng = random.Random(11)
    for _ in range(5000):
        weight = sample_weight(rng)
        assert 10 <= weight < 50
        assert round(weight, 2) == weight


def test_tamper_status_is_one_draw():
    assert sample_tamper_status(FixedRandom(0.0)) == (True, False)
    assert sample_tamper_status(FixedRandom(0.79)) == (True, False)
    assert sample_tamper_status(FixedRandom(0.8)) == (False, True)


def test_sealed_share_is_roughly_eighty_percent():
    rng = random.Random(2024)
    sealed = sum(sample_tamper_status(rng)[0] for _ in range(5000))
    assert 0.76 < sealed / 5000 < 0.84


def test_uploader_id_is_fresh_even_when_not_uploaded():
    uploaded, first = sample_location(FixedRandom(0.99))
    _, second = sample_location(FixedRandom(0.99))

    assert uploaded is False
    assert first.startswith("user-")
    assert first != second
