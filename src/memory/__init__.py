"""In-memory record store, demo seed data and chat transcripts."""
from .models import EntityKind
from .record_store import RecordStore, chronological
from .seed import seed_demo_data
from .transcripts import TranscriptRegistry

__all__ = [
    "EntityKind",
    "RecordStore",
    "TranscriptRegistry",
    "chronological",
    "seed_demo_data",
]
