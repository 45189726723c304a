from sqlalchemy import Column, Integer, String, DateTime, JSON, UniqueConstraint
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class Document(Base):
    """A JSON document stored in a named collection."""

    __tablename__ = "documents"
    __table_args__ = (
        UniqueConstraint("collection", "doc_id", name="uq_documents_collection_doc_id"),
    )

    id = Column(Integer, primary_key=True, index=True)
    collection = Column(String, nullable=False, index=True)
    doc_id = Column(String, nullable=False, index=True)
    # Document body, including its own "id" and "_id" keys
    data = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
