from .cache import InMemoryRecordStore, NoDataMarker, RecordStore, is_stale, utcnow

__all__ = ["InMemoryRecordStore", "NoDataMarker", "RecordStore", "is_stale", "utcnow"]
