"""
Database operations - Generic CRUD functions for all collections
"""
from typing import List, Dict, Optional, Any, Union
from bson import ObjectId
from pymongo import ReturnDocument
from app.config.database import db_config
from datetime import datetime

DocId = Union[str, ObjectId]


def _as_object_id(doc_id: DocId) -> ObjectId:
    return doc_id if isinstance(doc_id, ObjectId) else ObjectId(doc_id)


class DBOperations:
    """Generic database operations for MongoDB collections"""

    @staticmethod
    async def get_all(
        collection_name: str,
        filter_query: Dict = None,
        skip: int = 0,
        limit: int = 0,
        sort: List = None,
        projection: Dict = None,
    ) -> List[Dict]:
        """Get all documents from a collection with optional filtering, sorting and paging"""
        collection = db_config.get_collection(collection_name)
        filter_query = filter_query or {}
        cursor = collection.find(filter_query, projection)
        if sort:
            cursor = cursor.sort(sort)
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        documents = await cursor.to_list(length=limit or None)
        return documents

    @staticmethod
    async def get_by_id(collection_name: str, doc_id: DocId, projection: Dict = None) -> Optional[Dict]:
        """Get a single document by ID (callers validate the ID format first)"""
        collection = db_config.get_collection(collection_name)
        return await collection.find_one({"_id": _as_object_id(doc_id)}, projection)

    @staticmethod
    async def get_one(collection_name: str, filter_query: Dict, projection: Dict = None) -> Optional[Dict]:
        """Get a single document by filter query"""
        collection = db_config.get_collection(collection_name)
        document = await collection.find_one(filter_query, projection)
        return document

    @staticmethod
    async def create(collection_name: str, document: Dict) -> Dict:
        """Create a new document"""
        collection = db_config.get_collection(collection_name)
        now = datetime.utcnow()
        document["createdAt"] = now
        document["updatedAt"] = now
        result = await collection.insert_one(document)
        document["_id"] = result.inserted_id
        return document

    @staticmethod
    async def create_many(collection_name: str, documents: List[Dict]) -> List[Dict]:
        """Insert a batch of documents in one round trip, preserving order"""
        collection = db_config.get_collection(collection_name)
        now = datetime.utcnow()
        for document in documents:
            document["createdAt"] = now
            document["updatedAt"] = now
        result = await collection.insert_many(documents, ordered=True)
        for document, inserted_id in zip(documents, result.inserted_ids):
            document["_id"] = inserted_id
        return documents

    @staticmethod
    async def find_or_create(collection_name: str, filter_query: Dict, defaults: Dict) -> Dict:
        """
        Atomically return the document matching filter_query, inserting it
        from defaults when absent. Relies on a unique index over the filter
        fields; a concurrent insert surfaces as DuplicateKeyError.
        """
        collection = db_config.get_collection(collection_name)
        now = datetime.utcnow()
        on_insert = {**defaults, "createdAt": now, "updatedAt": now}
        for key in filter_query:
            on_insert.pop(key, None)
        return await collection.find_one_and_update(
            filter_query,
            {"$setOnInsert": on_insert},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )

    @staticmethod
    async def update(collection_name: str, doc_id: DocId, update_data: Dict, push: Dict = None) -> Optional[Dict]:
        """Update a document by ID, optionally appending to array fields"""
        return await DBOperations.update_one(collection_name, {"_id": _as_object_id(doc_id)}, update_data, push)

    @staticmethod
    async def update_one(collection_name: str, filter_query: Dict, update_data: Dict, push: Dict = None) -> Optional[Dict]:
        """Update the first document matching filter_query and return it"""
        collection = db_config.get_collection(collection_name)
        update_data["updatedAt"] = datetime.utcnow()
        update = {"$set": update_data}
        if push:
            update["$push"] = push
        return await collection.find_one_and_update(
            filter_query,
            update,
            return_document=ReturnDocument.AFTER,
        )

    @staticmethod
    async def delete(collection_name: str, doc_id: DocId) -> bool:
        """Delete a document by ID"""
        collection = db_config.get_collection(collection_name)
        result = await collection.delete_one({"_id": _as_object_id(doc_id)})
        return result.deleted_count > 0

    @staticmethod
    async def count(collection_name: str, filter_query: Dict = None) -> int:
        """Count documents in a collection"""
        collection = db_config.get_collection(collection_name)
        filter_query = filter_query or {}
        count = await collection.count_documents(filter_query)
        return count

    @staticmethod
    async def aggregate(collection_name: str, pipeline: List[Dict]) -> List[Dict]:
        """Execute aggregation pipeline"""
        collection = db_config.get_collection(collection_name)
        cursor = collection.aggregate(pipeline)
        results = await cursor.to_list(length=None)
        return results

db_ops = DBOperations()
