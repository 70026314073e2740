"""
MongoDB access for the contest hub.

One MongoClient per process, opened by the app lifespan (init_db) and
closed on shutdown (close_db). Routes receive the database through the
get_db dependency, which tests override with an in-memory database.

Collections:
- users          -> User documents keyed by email
- contests       -> Contest documents
- registrations  -> Registration documents
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BaseModel
from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError
from pymongo.results import DeleteResult, InsertOneResult, UpdateResult
from pymongo.server_api import ServerApi

from errors import DatabaseError, InvalidIdentifierError

logger = logging.getLogger(__name__)

USERS = "users"
CONTESTS = "contests"
REGISTRATIONS = "registrations"

client: Optional[MongoClient] = None
db: Optional[Database] = None


def init_db(uri: str, name: str) -> Database:
    """Open the shared client and ping the deployment."""
    global client, db
    client = MongoClient(
        uri,
        server_api=ServerApi("1", strict=True, deprecation_errors=True),
    )
    db = client[name]
    try:
        client.admin.command("ping")
        logger.info(f"Connected to MongoDB database '{name}'")
        ensure_indexes(db)
    except PyMongoError as e:
        # The driver reconnects lazily; requests fail individually until it does
        logger.error(f"MongoDB startup checks failed: {e}")
    return db


def ensure_indexes(database: Database) -> None:
    """Email is the users key; the unique index backs the upsert-on-login path."""
    database[USERS].create_index("email", unique=True)


def close_db() -> None:
    global client, db
    if client is not None:
        client.close()
        logger.info("MongoDB client closed")
    client = None
    db = None


def get_db() -> Database:
    """FastAPI dependency for the database handle."""
    if db is None:
        raise DatabaseError("client not initialized", "connect")
    return db


def ping(database: Database) -> bool:
    try:
        database.client.admin.command("ping")
        return True
    except PyMongoError as e:
        logger.error(f"MongoDB health check failed: {e}")
        return False


def parse_object_id(value: str) -> ObjectId:
    """Coerce a path parameter to an ObjectId."""
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise InvalidIdentifierError(value)


def create_document(database: Database, collection_name: str, data: Union[BaseModel, dict]) -> InsertOneResult:
    """Insert a document, stamping created_at/updated_at."""
    if isinstance(data, BaseModel):
        data_dict = data.model_dump()
    else:
        data_dict = data.copy()
    now = datetime.now(timezone.utc)
    data_dict["created_at"] = now
    data_dict["updated_at"] = now
    return database[collection_name].insert_one(data_dict)


# Serializers: documents and driver acknowledgements as JSON-safe dicts

def serialize_doc(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if doc is None:
        return None
    out = dict(doc)
    if "_id" in out:
        out["_id"] = str(out["_id"])
    return out


def insert_ack(result: InsertOneResult) -> Dict[str, Any]:
    return {"acknowledged": result.acknowledged, "insertedId": str(result.inserted_id)}


def update_ack(result: UpdateResult) -> Dict[str, Any]:
    upserted_id = result.upserted_id
    return {
        "acknowledged": result.acknowledged,
        "matchedCount": result.matched_count,
        "modifiedCount": result.modified_count,
        "upsertedCount": 0 if upserted_id is None else 1,
        "upsertedId": None if upserted_id is None else str(upserted_id),
    }


def delete_ack(result: DeleteResult) -> Dict[str, Any]:
    return {"acknowledged": result.acknowledged, "deletedCount": result.deleted_count}
