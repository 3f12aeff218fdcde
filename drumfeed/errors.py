class DrumFeedError(Exception):
    """Base class for errors raised by the drum feed service."""


class RecordInvariantError(DrumFeedError):
    """A DrumRecord breaks one of its cross-field invariants."""

    def __init__(self, drum_id: str, invariant: str):
        self.drum_id = drum_id
        self.invariant = invariant
        super().__init__(f"{drum_id}: {invariant}")


class InvalidCountError(DrumFeedError):
    """Requested snapshot size is not an integer in [1, max_records]."""

    def __init__(self, raw_value: str, max_records: int):
        self.raw_value = raw_value
        self.max_records = max_records
        super().__init__(
            f"Invalid count parameter. Must be a number between 1 and {max_records}"
        )


class SnapshotGenerationError(DrumFeedError):
    """Unexpected failure while synthesizing or evolving a snapshot."""
