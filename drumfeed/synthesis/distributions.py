# Sampling parameters for synthesized drum records.
# Kept together so the synthesizer and the mutator draw from the same shapes.

from datetime import datetime, timedelta, timezone

# Pour instants are drawn between EPOCH_START and "now".
EPOCH_START = datetime(2025, 1, 1, tzinfo=timezone.utc)

# Tamper seal lands within this window after the pour.
MAX_SEAL_DELAY = timedelta(hours=2)

# Weight grid, in hundredths of a kilogram: [10.00, 49.99]
WEIGHT_MIN_CENTS = 1000
WEIGHT_MAX_CENTS = 5000  # exclusive
UNIT_OF_MEASUREMENT = "kg"

SEALED_PROBABILITY = 0.8
LOCATION_UPLOADED_PROBABILITY = 0.7

# Plain wire field; never applied to the date components.
WIRE_UTC_OFFSET = 9

SCAN_HASH_BYTES = 32

DRUM_ID_PREFIX = "drum-"
BATCH_CODE_PREFIX = "batch-"
USER_ID_PREFIX = "user-"

# Perturbation pass: share of the snapshot touched, then per-group edit odds.
UPDATE_FRACTION_MIN = 0.1
UPDATE_FRACTION_SPAN = 0.2
WEIGHT_EDIT_PROBABILITY = 0.5
TAMPER_STATUS_EDIT_PROBABILITY = 0.3
LOCATION_EDIT_PROBABILITY = 0.4
SCAN_HASH_EDIT_PROBABILITY = 0.2
