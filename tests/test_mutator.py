import random

import pytest

from drumfeed.mutation import mutator
from drumfeed.mutation.mutator import evolve, perturb_record, perturbation_count
from drumfeed.synthesis.synthesizer import synthesize, synthesize_many
from tests.fixtures.drum_records import FIXED_NOW, FixedRandom, assert_valid_record


def test_evolve_grows_to_target():
    rng = random.Random(1)
    initial = synthesize_many(5, rng)
    assert len(evolve(initial, 10, rng)) == 10


def test_evolve_shrinks_to_target():
    rng = random.Random(2)
    initial = synthesize_many(10, rng)
    assert len(evolve(initial, 5, rng)) == 5


def test_evolve_to_zero_is_empty():
    rng = random.Random(3)
    assert evolve(synthesize_many(10, rng), 0, rng) == []
    assert evolve([], 0, rng) == []


def test_evolve_from_empty_synthesizes_everything():
    rng = random.Random(4)
    records = evolve([], 5, rng)

    assert len(records) == 5
    for record in records:
        assert_valid_record(record)


def test_evolve_rejects_negative_target():
    with pytest.raises(ValueError):
        evolve([], -1, random.Random(0))


def test_evolve_leaves_input_untouched():
    rng = random.Random(5)
    initial = synthesize_many(10, rng)
    before = [r.to_wire() for r in initial]

    evolve(initial, 5, rng)
    evolve(initial, 10, rng)

    assert len(initial) == 10
    assert [r.to_wire() for r in initial] == before


def test_shrink_keeps_surviving_identities():
    rng = random.Random(6)
    initial = synthesize_many(20, rng)
    original_ids = {r.drum_id for r in initial}

    shrunk = evolve(initial, 8, rng)

    assert {r.drum_id for r in shrunk} <= original_ids
    assert len({r.drum_id for r in shrunk}) == 8


def test_grow_keeps_every_existing_record():
    rng = random.Random(7)
    initial = synthesize_many(6, rng)

    grown = evolve(initial, 15, rng)

    assert [r.drum_id for r in grown[:6]] == [r.drum_id for r in initial]
    assert [r.batch_code for r in grown[:6]] == [r.batch_code for r in initial]


def test_perturbation_touches_at_most_thirty_percent():
    rng = random.Random(8)
    initial = synthesize_many(100, rng)

    evolved = evolve(initial, 100, rng)

    changed = sum(1 for old, new in zip(initial, evolved) if old != new)
    assert changed <= 30


def test_perturbation_edits_some_records():
    rng = random.Random(8)
    initial = synthesize_many(100, rng)

    evolved = evolve(initial, 100, rng)

    changed = sum(1 for old, new in zip(initial, evolved) if old != new)
    assert changed >= 1


def test_perturbation_count_is_ten_to_thirty_percent():
    counts = {perturbation_count(100, random.Random(seed)) for seed in range(500)}

    assert min(counts) >= 10
    assert max(counts) < 30
    assert len(counts) > 10
    assert perturbation_count(0, random.Random(0)) == 0


def test_evolve_makes_one_perturb_call_per_pick(monkeypatch):
    initial = synthesize_many(100, random.Random(12))
    calls = []

    def counting_perturb(record, rng):
        calls.append(record.drum_id)
        return record

    monkeypatch.setattr(mutator, "perturb_record", counting_perturb)

    # Same size: no shrink or grow, so the first draw sizes the perturb pass
    evolve(initial, 100, random.Random(13))

    assert len(calls) == perturbation_count(100, random.Random(13))
    assert 10 <= len(calls) < 30


def test_perturb_record_with_every_edit_firing():
    record = synthesize(random.Random(9), now=FIXED_NOW)

    edited = perturb_record(record, FixedRandom(0.0))

    assert edited is not record
    assert edited.drum_id == record.drum_id
    assert edited.batch_code == record.batch_code
    assert edited.poured_at == record.poured_at
    assert edited.tamper_sealed_at == record.tamper_sealed_at
    assert edited.weight == 10.0
    assert (edited.is_sealed, edited.is_tampered) == (True, False)
    assert edited.location_uploaded is True
    assert edited.uploader_user_id != record.uploader_user_id
    assert edited.facial_recognition_scan_hash != record.facial_recognition_scan_hash
    assert_valid_record(edited)


def test_perturb_record_with_no_edit_firing():
    record = synthesize(random.Random(10), now=FIXED_NOW)
    assert perturb_record(record, FixedRandom(0.99)) is record


def test_repeated_evolution_keeps_invariants():
    rng = random.Random(11)
    snapshot = evolve([], 25, rng)
    drum_ids = {r.drum_id for r in snapshot}

    for _ in range(50):
        snapshot = evolve(snapshot, 25, rng)
        assert len(snapshot) == 25
        for record in snapshot:
            assert_valid_record(record)

    # Same size every round: no shrink, no grow, so identities survive
    assert {r.drum_id for r in snapshot} == drum_ids


def test_perturb_record_between_weight_and_location_odds():
    """0.45: only the weight roll (p=0.5) fires."""
    record = synthesize(random.Random(14), now=FIXED_NOW)

    edited = perturb_record(record, FixedRandom(0.45))

    assert edited is not record
    assert (edited.is_sealed, edited.is_tampered) == (record.is_sealed, record.is_tampered)
    assert edited.location_uploaded == record.location_uploaded
    assert edited.uploader_user_id == record.uploader_user_id
    assert edited.facial_recognition_scan_hash == record.facial_recognition_scan_hash
    assert_valid_record(edited)


def test_perturb_record_between_location_and_tamper_odds():
    """0.35: weight (p=0.5) and location (p=0.4) fire, tamper (p=0.3) does not."""
    record = synthesize(random.Random(15), now=FIXED_NOW)

    edited = perturb_record(record, FixedRandom(0.35))

    assert edited.uploader_user_id != record.uploader_user_id
    assert edited.location_uploaded is True
    assert (edited.is_sealed, edited.is_tampered) == (record.is_sealed, record.is_tampered)
    assert edited.facial_recognition_scan_hash == record.facial_recognition_scan_hash
    assert_valid_record(edited)


def test_perturb_record_between_tamper_and_hash_odds():
    """0.25: tamper (p=0.3) fires too, hash (p=0.2) still does not."""
    record = synthesize(random.Random(16), now=FIXED_NOW)

    edited = perturb_record(record, FixedRandom(0.25))

    assert (edited.is_sealed, edited.is_tampered) == (True, False)
    assert edited.uploader_user_id != record.uploader_user_id
    assert edited.facial_recognition_scan_hash == record.facial_recognition_scan_hash
    assert_valid_record(edited)
