"""
Column type storing a versioned document as JSON (JSONB on PostgreSQL).
"""
from typing import Type

from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.types import TypeDecorator

from ..schemas.documents import StoredDocument


class VersionedDocument(TypeDecorator):
    """Serializes a StoredDocument at the storage boundary only."""

    impl = JSON
    cache_ok = True

    def __init__(self, document_class: Type[StoredDocument]):
        super().__init__()
        self.document_class = document_class

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(JSONB())
        return dialect.type_descriptor(JSON())

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if not isinstance(value, self.document_class):
            value = self.document_class.from_storage(value)
        return value.to_storage()

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return self.document_class.from_storage(value)
