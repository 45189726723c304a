"""
JSON dump and restore of the content collections.

A backup is a plain snapshot: restoring replaces each collection present in the
payload with the saved documents.
"""
import json
import logging

from ..exceptions import BackupFormatError
from ..utils import utcnow
from .document_store import DocumentStore

logger = logging.getLogger(__name__)

BACKUPS = "backups"
BACKUP_COLLECTIONS = ("posts", "categories", "topics", "settings", "comments")


def backup_filename(timestamp) -> str:
    return f"nomadnest-backup-{timestamp.strftime('%Y-%m-%d')}.json"


async def create_backup(store: DocumentStore) -> tuple[dict, dict]:
    now = utcnow()
    payload = {
        "timestamp": now.isoformat(),
        "collections": {name: await store.find(name) for name in BACKUP_COLLECTIONS},
    }
    record = await store.insert_one(BACKUPS, {
        "name": f"Backup {now.isoformat()}",
        "size": len(json.dumps(payload)),
        "collections": list(BACKUP_COLLECTIONS),
        "filename": backup_filename(now),
    })
    logger.info(f"Created backup {record['id']} ({record['size']} bytes)")
    return record, payload


async def list_backups(store: DocumentStore) -> list[dict]:
    return await store.find(BACKUPS, sort=[("createdAt", -1)])


async def delete_backup(store: DocumentStore, backup_id: str) -> None:
    await store.get_or_404(BACKUPS, backup_id, "Backup")
    await store.delete_by_id(BACKUPS, backup_id)


def validate_payload(payload) -> dict:
    """Check a restore payload and return its collections mapping."""
    if not isinstance(payload, dict):
        raise BackupFormatError("expected a JSON object")
    collections = payload.get("collections")
    if not isinstance(collections, dict):
        raise BackupFormatError("missing 'collections' object")
    for name, documents in collections.items():
        if name not in BACKUP_COLLECTIONS:
            raise BackupFormatError(f"unknown collection '{name}'")
        if not isinstance(documents, list):
            raise BackupFormatError(f"collection '{name}' must be a list")
        if not all(isinstance(doc, dict) for doc in documents):
            raise BackupFormatError(f"collection '{name}' must contain only objects")
        seen = set()
        for doc in documents:
            doc_id = doc.get("_id") or doc.get("id")
            if not doc_id:
                continue
            if str(doc_id) in seen:
                raise BackupFormatError(f"collection '{name}' has duplicate id '{doc_id}'")
            seen.add(str(doc_id))
    return collections


async def restore_backup(store: DocumentStore, payload) -> dict:
    collections = validate_payload(payload)
    restored = {}
    try:
        for name, documents in collections.items():
            restored[name] = await store.replace_collection(name, documents, commit=False)
        await store.commit()
    except Exception:
        await store.rollback()
        raise
    logger.info(f"Restored backup from {payload.get('timestamp')}: {restored}")
    return {"restored": restored}
