"""Snapshot export and restore."""

from todo64.backup.backup_manager import BackupManager
from todo64.backup.backup_models import ExportResult, ImportSummary
from todo64.backup.codec import SnapshotRecord, decode_snapshot, encode_snapshot

__all__ = [
    "BackupManager",
    "ExportResult",
    "ImportSummary",
    "SnapshotRecord",
    "decode_snapshot",
    "encode_snapshot",
]
