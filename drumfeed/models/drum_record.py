import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict

from drumfeed.errors import RecordInvariantError
from drumfeed.synthesis.distributions import (
    BATCH_CODE_PREFIX,
    DRUM_ID_PREFIX,
    MAX_SEAL_DELAY,
    UNIT_OF_MEASUREMENT,
    USER_ID_PREFIX,
    WEIGHT_MAX_CENTS,
    WEIGHT_MIN_CENTS,
    WIRE_UTC_OFFSET,
)

SCAN_HASH_PATTERN = re.compile(r"^[0-9a-f]{64}$")

_TIMESTAMP_PARTS = ("Year", "Month", "Day", "Hour", "Minute", "Second")


def _decompose(prefix: str, instant: datetime, utc_offset: int) -> Dict[str, int]:
    """
    Flattens an instant into the wire's per-component integer fields.
    Components are UTC calendar fields; the offset is carried as-is.
    """
    utc = instant.astimezone(timezone.utc)
    values = (utc.year, utc.month, utc.day, utc.hour, utc.minute, utc.second)
    fields = {f"{prefix}{part}": value for part, value in zip(_TIMESTAMP_PARTS, values)}
    fields[f"{prefix}TimezoneUTCOffset"] = utc_offset
    return fields


def _compose(prefix: str, payload: Dict[str, Any]) -> datetime:
    return datetime(
        *(int(payload[f"{prefix}{part}"]) for part in _TIMESTAMP_PARTS),
        tzinfo=timezone.utc,
    )


@dataclass(frozen=True)
class DrumRecord:
    """
    One tracked drum: identity, weight, pour/seal instants,
    tamper status, location upload state and scan hash.

    Instants are timezone-aware UTC. They are split into
    year/month/day/... fields only by to_wire().
    """
    drum_id: str
    batch_code: str
    weight: float
    poured_at: datetime
    tamper_sealed_at: datetime
    is_sealed: bool
    is_tampered: bool
    location_uploaded: bool
    uploader_user_id: str
    facial_recognition_scan_hash: str
    unit_of_measurement: str = UNIT_OF_MEASUREMENT
    utc_offset: int = WIRE_UTC_OFFSET

    def check_invariants(self) -> None:
        """Raises RecordInvariantError on the first broken invariant."""
        if self.is_sealed == self.is_tampered:
            raise RecordInvariantError(self.drum_id, "exactly one of sealed/tampered must be true")

        if not WEIGHT_MIN_CENTS / 100 <= self.weight < WEIGHT_MAX_CENTS / 100:
            raise RecordInvariantError(self.drum_id, f"weight {self.weight} out of range")
        if round(self.weight, 2) != self.weight:
            raise RecordInvariantError(self.drum_id, f"weight {self.weight} has more than two decimals")
        if self.unit_of_measurement != UNIT_OF_MEASUREMENT:
            raise RecordInvariantError(self.drum_id, f"unexpected unit {self.unit_of_measurement!r}")

        if self.tamper_sealed_at < self.poured_at:
            raise RecordInvariantError(self.drum_id, "tamper seal precedes pour")
        if self.tamper_sealed_at - self.poured_at > MAX_SEAL_DELAY:
            raise RecordInvariantError(self.drum_id, "tamper seal too long after pour")

        if not SCAN_HASH_PATTERN.match(self.facial_recognition_scan_hash):
            raise RecordInvariantError(self.drum_id, "scan hash is not 64 lowercase hex chars")

        # drum_id goes last: every message above is keyed by it
        for value, prefix in (
            (self.drum_id, DRUM_ID_PREFIX),
            (self.batch_code, BATCH_CODE_PREFIX),
            (self.uploader_user_id, USER_ID_PREFIX),
        ):
            if not value.startswith(prefix):
                raise RecordInvariantError(self.drum_id, f"{value!r} lacks prefix {prefix!r}")

    def is_valid(self) -> bool:
        try:
            self.check_invariants()
        except RecordInvariantError:
            return False
        return True

    def to_wire(self) -> Dict[str, Any]:
        """camelCase JSON shape served by the HTTP API."""
        payload: Dict[str, Any] = {
            "drumId": self.drum_id,
            "batchCode": self.batch_code,
            "weight": self.weight,
            "unitOfMeasurement": self.unit_of_measurement,
        }
        payload.update(_decompose("pourDateTimestamp", self.poured_at, self.utc_offset))
        payload.update(_decompose("tamperSealTimestamp", self.tamper_sealed_at, self.utc_offset))
        payload.update({
            "tamperStatusIsSealed": self.is_sealed,
            "tamperStatusIsTampered": self.is_tampered,
            "locationDataIsUploaded": self.location_uploaded,
            "locationDataUploaderUserId": self.uploader_user_id,
            "facialRecognitionScanHash": self.facial_recognition_scan_hash,
        })
        return payload

    @classmethod
    def from_wire(cls, payload: Dict[str, Any]) -> "DrumRecord":
        """
        Rebuilds a record from its wire shape.
        Sub-second precision is lost at the wire boundary.
        """
        return cls(
            drum_id=payload["drumId"],
            batch_code=payload["batchCode"],
            weight=payload["weight"],
            unit_of_measurement=payload["unitOfMeasurement"],
            poured_at=_compose("pourDateTimestamp", payload),
            tamper_sealed_at=_compose("tamperSealTimestamp", payload),
            utc_offset=payload["pourDateTimestampTimezoneUTCOffset"],
            is_sealed=payload["tamperStatusIsSealed"],
            is_tampered=payload["tamperStatusIsTampered"],
            location_uploaded=payload["locationDataIsUploaded"],
            uploader_user_id=payload["locationDataUploaderUserId"],
            facial_recognition_scan_hash=payload["facialRecognitionScanHash"],
        )
