"""
Generic document-store client.

Documents are JSON objects grouped in named collections and addressed by a
string id. Filters and updates use the MongoDB vocabulary understood by
``query_engine``; they are evaluated in process against the stored JSON.
"""
from __future__ import annotations

import copy
import logging
import uuid
from typing import Iterable, Optional, Sequence, Tuple

from fastapi import Depends
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..exceptions import DocumentNotFoundError, DuplicateDocumentError
from ..models import Document
from ..utils import utcnow_iso
from .query_engine import apply_update, matches, sort_documents

logger = logging.getLogger(__name__)

SortSpec = Optional[Sequence[Tuple[str, int]]]


class DocumentStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _rows(self, collection: str) -> list[Document]:
        result = await self.db.execute(
            select(Document)
            .where(Document.collection == collection)
            .order_by(Document.id)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def _matching_rows(self, collection: str, query: Optional[dict]) -> list[Document]:
        return [row for row in await self._rows(collection) if matches(row.data, query)]

    async def _row_by_id(self, collection: str, doc_id: str) -> Optional[Document]:
        result = await self.db.execute(
            select(Document).where(
                Document.collection == collection,
                Document.doc_id == str(doc_id),
            ).execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    # Reads

    async def find(
        self,
        collection: str,
        query: Optional[dict] = None,
        sort: SortSpec = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> list[dict]:
        docs = [copy.deepcopy(row.data) for row in await self._matching_rows(collection, query)]
        docs = sort_documents(docs, sort)
        if skip:
            docs = docs[skip:]
        if limit is not None:
            docs = docs[:limit]
        return docs

    async def find_one(self, collection: str, query: Optional[dict] = None, sort: SortSpec = None) -> Optional[dict]:
        docs = await self.find(collection, query, sort=sort, limit=1)
        return docs[0] if docs else None

    async def get(self, collection: str, doc_id: str) -> Optional[dict]:
        if doc_id is None:
            return None
        row = await self._row_by_id(collection, doc_id)
        return copy.deepcopy(row.data) if row else None

    async def get_or_404(self, collection: str, doc_id: str, label: str = None) -> dict:
        doc = await self.get(collection, doc_id)
        if doc is None:
            raise DocumentNotFoundError(collection, doc_id, label)
        return doc

    async def count(self, collection: str, query: Optional[dict] = None) -> int:
        return len(await self._matching_rows(collection, query))

    async def list_collections(self) -> list[str]:
        result = await self.db.execute(select(Document.collection).distinct())
        return sorted(row[0] for row in result.fetchall())

    # Writes

    def _prepare(self, document: dict) -> dict:
        doc = copy.deepcopy(document)
        doc_id = doc.get("_id") or doc.get("id") or uuid.uuid4().hex
        doc_id = str(doc_id)
        now = utcnow_iso()
        doc["_id"] = doc_id
        doc["id"] = doc_id
        doc.setdefault("createdAt", now)
        doc.setdefault("updatedAt", now)
        return doc

    async def insert_one(self, collection: str, document: dict) -> dict:
        doc = self._prepare(document)
        if await self._row_by_id(collection, doc["id"]) is not None:
            raise DuplicateDocumentError(collection, doc["id"])
        self.db.add(Document(collection=collection, doc_id=doc["id"], data=doc))
        await self.db.commit()
        logger.debug(f"Inserted document {doc['id']} into {collection}")
        return copy.deepcopy(doc)

    async def insert_many(self, collection: str, documents: Iterable[dict]) -> list[dict]:
        inserted = []
        for document in documents:
            inserted.append(await self.insert_one(collection, document))
        return inserted

    async def _apply(self, row: Document, update: dict) -> dict:
        updated = apply_update(row.data, update)
        updated["updatedAt"] = utcnow_iso()
        # Reassign so the JSON column is flagged dirty
        row.data = updated
        return updated

    async def update_one(self, collection: str, query: Optional[dict], update: dict) -> Optional[dict]:
        rows = await self._matching_rows(collection, query)
        if not rows:
            return None
        updated = await self._apply(rows[0], update)
        await self.db.commit()
        return copy.deepcopy(updated)

    async def update_by_id(self, collection: str, doc_id: str, update: dict) -> Optional[dict]:
        row = await self._row_by_id(collection, doc_id)
        if row is None:
            return None
        updated = await self._apply(row, update)
        await self.db.commit()
        return copy.deepcopy(updated)

    async def update_many(self, collection: str, query: Optional[dict], update: dict) -> int:
        rows = await self._matching_rows(collection, query)
        for row in rows:
            await self._apply(row, update)
        if rows:
            await self.db.commit()
        return len(rows)

    async def delete_one(self, collection: str, query: Optional[dict]) -> bool:
        rows = await self._matching_rows(collection, query)
        if not rows:
            return False
        await self.db.delete(rows[0])
        await self.db.commit()
        return True

    async def delete_by_id(self, collection: str, doc_id: str) -> bool:
        row = await self._row_by_id(collection, doc_id)
        if row is None:
            return False
        await self.db.delete(row)
        await self.db.commit()
        return True

    async def delete_many(self, collection: str, query: Optional[dict] = None) -> int:
        rows = await self._matching_rows(collection, query)
        for row in rows:
            await self.db.delete(row)
        if rows:
            await self.db.commit()
        return len(rows)

    async def commit(self) -> None:
        await self.db.commit()

    async def rollback(self) -> None:
        await self.db.rollback()

    async def replace_collection(self, collection: str, documents: Iterable[dict], commit: bool = True) -> int:
        """
        Drop a collection's documents and insert the given ones with their ids kept.

        With commit=False the changes stay pending in the session so several
        collections can be replaced in one transaction.
        """
        await self.db.execute(delete(Document).where(Document.collection == collection))
        count = 0
        seen = set()
        for document in documents:
            doc = self._prepare(document)
            if doc["id"] in seen:
                if commit:
                    await self.db.rollback()
                raise DuplicateDocumentError(collection, doc["id"])
            seen.add(doc["id"])
            self.db.add(Document(collection=collection, doc_id=doc["id"], data=doc))
            count += 1
        if commit:
            await self.db.commit()
        logger.info(f"Replaced collection {collection} with {count} documents")
        return count


async def get_store(db: AsyncSession = Depends(get_db)) -> DocumentStore:
    """Dependency to get a document store bound to the request session"""
    return DocumentStore(db)
