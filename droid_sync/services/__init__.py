"""Domain services: transcript decoding, delta extraction, sync state, hook handling."""

from __future__ import annotations

from droid_sync.services.delta import extract_new_records
from droid_sync.services.redaction import redact_text, redact_value
from droid_sync.services.sync_state import SyncStateStore
from droid_sync.services.transcript import TranscriptDecoder

__all__ = [
    'SyncStateStore',
    'TranscriptDecoder',
    'extract_new_records',
    'redact_text',
    'redact_value',
]
