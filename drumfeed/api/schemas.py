from typing import Dict, List, Union

from pydantic import BaseModel


class DrumRecordModel(BaseModel):
    """Wire shape of one drum record (see DrumRecord.to_wire)."""
    drumId: str
    batchCode: str
    weight: float
    unitOfMeasurement: str
    pourDateTimestampYear: int
    pourDateTimestampMonth: int
    pourDateTimestampDay: int
    pourDateTimestampHour: int
    pourDateTimestampMinute: int
    pourDateTimestampSecond: int
    pourDateTimestampTimezoneUTCOffset: int
    tamperSealTimestampYear: int
    tamperSealTimestampMonth: int
    tamperSealTimestampDay: int
    tamperSealTimestampHour: int
    tamperSealTimestampMinute: int
    tamperSealTimestampSecond: int
    tamperSealTimestampTimezoneUTCOffset: int
    tamperStatusIsSealed: bool
    tamperStatusIsTampered: bool
    locationDataIsUploaded: bool
    locationDataUploaderUserId: str
    facialRecognitionScanHash: str


class SnapshotResponse(BaseModel):
    count: int
    timestamp: str
    data: List[DrumRecordModel]


class HealthResponse(BaseModel):
    status: str
    storedRecordsCount: int
    timestamp: str


class MessageResponse(BaseModel):
    message: str


class IndexResponse(BaseModel):
    message: str
    endpoints: Dict[str, Union[str, List[str]]]
