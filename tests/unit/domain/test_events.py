from datetime import datetime

from codeshare.domain.events import (
    DownloadCompletedEvent,
    DownloadFailedEvent,
    DownloadStartedEvent,
    FileSelectedEvent,
    MetadataFetchedEvent,
    MetadataFetchFailedEvent,
    OperationRejectedEvent,
    SessionStateChangedEvent,
    UploadFailedEvent,
    UploadProgressUpdatedEvent,
    UploadStartedEvent,
    UploadSucceededEvent,
)
from codeshare.domain.sessions import RetrievalState, UploadPhase, UploadState


def test_all_events_to_dict_cover_fields():
    now = datetime.utcnow()

    cases = [
        SessionStateChangedEvent(
            aggregate_id="s1", occurred_at=now, session_type="upload", state=UploadState()
        ),
        OperationRejectedEvent(
            aggregate_id="s1", occurred_at=now, operation="submit", error_kind="invalid_state", phase="idle"
        ),
        FileSelectedEvent(aggregate_id="s1", occurred_at=now, filename="a.txt", size=1),
        UploadStartedEvent(aggregate_id="s1", occurred_at=now, filename="a.txt", size=1),
        UploadProgressUpdatedEvent(aggregate_id="s1", occurred_at=now, percentage=40),
        UploadSucceededEvent(aggregate_id="s1", occurred_at=now, code="AB12CD34", filename="a.txt"),
        UploadFailedEvent(aggregate_id="s1", occurred_at=now, error_kind="server_error"),
        MetadataFetchedEvent(
            aggregate_id="s1", occurred_at=now, code="AB12CD34", filename="a.txt", size=1
        ),
        MetadataFetchFailedEvent(
            aggregate_id="s1", occurred_at=now, code="AB12CD34", error_kind="expired", detail="gone"
        ),
        DownloadStartedEvent(aggregate_id="s1", occurred_at=now, code="AB12CD34", filename="a.txt"),
        DownloadCompletedEvent(
            aggregate_id="s1",
            occurred_at=now,
            code="AB12CD34",
            filename="a.txt",
            saved_path="/tmp/a.txt",
            size=1,
        ),
        DownloadFailedEvent(
            aggregate_id="s1", occurred_at=now, code="AB12CD34", error_kind="link_invalid"
        ),
    ]

    for ev in cases:
        d = ev.to_dict()
        assert d["event_type"] == ev.__class__.__name__
        assert d["aggregate_id"] == "s1"
        assert d["occurred_at"] == now.isoformat()


def test_state_changed_event_serializes_snapshot():
    now = datetime.utcnow()
    upload = SessionStateChangedEvent(
        aggregate_id="s1",
        occurred_at=now,
        session_type="upload",
        state=UploadState(phase=UploadPhase.UPLOADING, progress=30),
    )
    retrieval = SessionStateChangedEvent(
        aggregate_id="s2",
        occurred_at=now,
        session_type="retrieval",
        state=RetrievalState(code="AB12CD34"),
    )

    assert upload.to_dict()["state"]["phase"] == "uploading"
    assert upload.to_dict()["state"]["progress"] == 30
    assert retrieval.to_dict()["state"]["code"] == "AB12CD34"


def test_failure_events_default_detail_to_none():
    event = UploadFailedEvent(aggregate_id="s1", occurred_at=datetime.utcnow(), error_kind="unknown")
    assert event.to_dict()["detail"] is None
