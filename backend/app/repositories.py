"""Repository pattern for database operations.

This module provides repository classes for each main collection,
abstracting database operations and providing a clean interface for the
service layer.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from datetime import datetime, timezone
from pymongo import ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError, PyMongoError
from bson import ObjectId
from bson.errors import InvalidId

from . import db

logger = logging.getLogger(__name__)

WITHOUT_PASSWORD = {'password': 0}


def to_object_id(value: Any) -> Optional[ObjectId]:
    """Return ``value`` as an ObjectId, or None when it is not a valid id."""
    if isinstance(value, ObjectId):
        return value
    if not isinstance(value, str) or not ObjectId.is_valid(value):
        return None
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def duplicate_key_field(error: DuplicateKeyError) -> str:
    """Name the field whose unique index ``error`` violated."""
    details = error.details or {}
    key_pattern = details.get('keyPattern') or details.get('keyValue') or {}
    if key_pattern:
        return next(iter(key_pattern))
    message = str(error)
    # e.g. "E11000 duplicate key error collection: db.admins index: uq_email dup key: ..."
    if 'index:' in message:
        index_name = message.split('index:', 1)[1].split()[0]
        if index_name.startswith('uq_'):
            return index_name[len('uq_'):]
        return index_name.rsplit('_', 1)[0]
    return 'email'


class BaseRepository:
    """Base repository class with common database operations."""

    def __init__(self, collection_name: str):
        """Initialize repository with collection name.

        Args:
            collection_name: Name of the MongoDB collection
        """
        self.collection_name = collection_name

    @property
    def collection(self) -> Collection:
        database = db.get_db()
        return database[self.collection_name]

    def find_one(self, filter_dict: Dict[str, Any], projection: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
        try:
            return self.collection.find_one(filter_dict, projection)
        except PyMongoError as e:
            logger.error(f"Error finding document in {self.collection_name}: {e}")
            raise

    def find_many(self, filter_dict: Dict[str, Any], projection: Optional[Dict[str, Any]] = None, sort: Optional[List[tuple]] = None) -> List[Dict[str, Any]]:
        try:
            cursor = self.collection.find(filter_dict, projection)
            if sort:
                cursor = cursor.sort(sort)
            return list(cursor)
        except PyMongoError as e:
            logger.error(f"Error finding documents in {self.collection_name}: {e}")
            raise

    def find_by_id(self, doc_id: Any, projection: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
        oid = to_object_id(doc_id)
        if oid is None:
            return None
        return self.find_one({'_id': oid}, projection)

    def insert_one(self, document: Dict[str, Any]) -> ObjectId:
        try:
            result = self.collection.insert_one(document)
            return result.inserted_id
        except DuplicateKeyError as e:
            logger.info(f"Duplicate key inserting into {self.collection_name}: {e}")
            raise
        except PyMongoError as e:
            logger.error(f"Error inserting document in {self.collection_name}: {e}")
            raise

    def update_by_id(self, doc_id: Any, set_fields: Dict[str, Any], projection: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
        """Apply ``$set`` to one document and return it after the update."""
        oid = to_object_id(doc_id)
        if oid is None:
            return None
        try:
            return self.collection.find_one_and_update(
                {'_id': oid},
                {'$set': set_fields},
                projection=projection,
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError as e:
            logger.info(f"Duplicate key updating {self.collection_name} {doc_id}: {e}")
            raise
        except PyMongoError as e:
            logger.error(f"Error updating document in {self.collection_name}: {e}")
            raise

    def delete_by_id(self, doc_id: Any) -> Optional[Dict[str, Any]]:
        """Delete one document and return it, or None when nothing matched."""
        oid = to_object_id(doc_id)
        if oid is None:
            return None
        try:
            return self.collection.find_one_and_delete({'_id': oid})
        except PyMongoError as e:
            logger.error(f"Error deleting document in {self.collection_name}: {e}")
            raise

    def count_documents(self, filter_dict: Dict[str, Any]) -> int:
        try:
            return self.collection.count_documents(filter_dict)
        except PyMongoError as e:
            logger.error(f"Error counting documents in {self.collection_name}: {e}")
            raise


def _stamp_new(document: Dict[str, Any]) -> Dict[str, Any]:
    now = datetime.now(timezone.utc)
    document.setdefault('createdAt', now)
    document.setdefault('updatedAt', now)
    return document


class AdminsRepository(BaseRepository):
    def __init__(self) -> None:
        super().__init__(db.ADMINS_COLLECTION)

    def find_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        return self.find_one({'email': email.lower()})

    def find_public_by_id(self, admin_id: Any) -> Optional[Dict[str, Any]]:
        return self.find_by_id(admin_id, WITHOUT_PASSWORD)

    def list_all(self) -> List[Dict[str, Any]]:
        return self.find_many({}, WITHOUT_PASSWORD, sort=[('createdAt', 1)])

    def count_by_role(self, role: str) -> int:
        return self.count_documents({'role': role})

    def create_admin(self, admin_data: Dict[str, Any]) -> ObjectId:
        admin_data['email'] = admin_data['email'].lower()
        return self.insert_one(_stamp_new(admin_data))

    def update_admin(self, admin_id: Any, set_fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        if 'email' in set_fields:
            set_fields['email'] = set_fields['email'].lower()
        return self.update_by_id(admin_id, set_fields, WITHOUT_PASSWORD)


class FacultyRepository(BaseRepository):
    def __init__(self) -> None:
        super().__init__(db.FACULTY_COLLECTION)

    def list_all(self) -> List[Dict[str, Any]]:
        return self.find_many({}, sort=[('createdAt', 1)])

    def find_by_institute(self, institute: str) -> List[Dict[str, Any]]:
        return self.find_many({'institute': institute}, sort=[('name', 1)])

    def create_faculty(self, faculty_data: Dict[str, Any]) -> ObjectId:
        faculty_data['email'] = faculty_data['email'].lower()
        return self.insert_one(_stamp_new(faculty_data))

    def update_faculty(self, faculty_id: Any, set_fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        if 'email' in set_fields:
            set_fields['email'] = set_fields['email'].lower()
        return self.update_by_id(faculty_id, set_fields)


# Repository instances for easy import
admins_repo = AdminsRepository()
faculty_repo = FacultyRepository()
