import logging
from datetime import datetime, timezone

import certifi
from bson.objectid import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, MongoClient
from pymongo.errors import DuplicateKeyError as MongoDuplicateKeyError, PyMongoError

from errors import DuplicateKeyError, NotFoundError, StoreError

logger = logging.getLogger(__name__)


def get_db(config):
    """Open a client for MONGO_URI and return the configured database."""
    options = {}
    if config.MONGO_URI.startswith("mongodb+srv://"):
        options.update(tls=True, tlsCAFile=certifi.where())
    client = MongoClient(config.MONGO_URI, **options)
    return client[config.MONGO_DB_NAME]


def serialize_student(doc, subjects):
    """Turn a stored document into a JSON-friendly dict."""
    student = {
        "_id": str(doc["_id"]),
        "studentName": doc.get("studentName"),
        "registerNumber": doc.get("registerNumber"),
    }
    for subject in subjects:
        student[subject] = doc.get(subject)
    for field in ("createdAt", "updatedAt"):
        value = doc.get(field)
        student[field] = value.isoformat() if isinstance(value, datetime) else value
    return student


class StudentStore:
    """Student records kept in a single MongoDB collection."""

    def __init__(self, collection):
        self.collection = collection
        try:
            self.collection.create_index([("registerNumber", ASCENDING)], unique=True)
        except PyMongoError as e:
            logger.error("Could not ensure registerNumber index: %s", e)
            raise StoreError() from e

    def list_all(self):
        try:
            return list(self.collection.find({}))
        except PyMongoError as e:
            logger.error("Error fetching students: %s", e)
            raise StoreError("Error fetching student data.") from e

    def insert(self, record):
        now = datetime.now(timezone.utc)
        doc = {**record, "createdAt": now, "updatedAt": now}
        try:
            result = self.collection.insert_one(doc)
        except MongoDuplicateKeyError:
            logger.info("Rejected duplicate register number %r", record.get("registerNumber"))
            raise DuplicateKeyError("Register number already exists.") from None
        except PyMongoError as e:
            logger.error("Error saving student %r: %s", record.get("registerNumber"), e)
            raise StoreError("Error saving student data.") from e
        doc["_id"] = result.inserted_id
        return doc

    def get(self, student_id):
        try:
            oid = ObjectId(student_id)
        except (InvalidId, TypeError):
            raise NotFoundError() from None
        try:
            doc = self.collection.find_one({"_id": oid})
        except PyMongoError as e:
            logger.error("Error fetching student %s: %s", student_id, e)
            raise StoreError("Error fetching student data.") from e
        if not doc:
            raise NotFoundError()
        return doc

    def count(self):
        try:
            return self.collection.count_documents({})
        except PyMongoError as e:
            logger.error("Error counting students: %s", e)
            raise StoreError() from e
