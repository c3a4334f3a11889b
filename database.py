"""
MongoDB access for the Portfolio backend

Documents are written through create_document, which stamps created_at and
updated_at and returns the stored document including its _id.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel
from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import ConnectionFailure

from config import Settings

logger = logging.getLogger(__name__)


def connect(settings: Settings) -> Optional[Database]:
    """Build a database handle from settings, or None when not configured.

    MongoClient connects lazily, so this never blocks on the network.
    """
    if not (settings.database_url and settings.database_name):
        logger.warning("DATABASE_URL/DATABASE_NAME not set; persistence is unavailable")
        return None
    client = MongoClient(settings.database_url, serverSelectionTimeoutMS=5000)
    return client[settings.database_name]


class MongoStore:
    """Thin document store over a pymongo Database"""

    def __init__(self, db: Optional[Database]):
        self.db = db

    def _require_db(self) -> Database:
        if self.db is None:
            raise ConnectionFailure("Database not available. Check DATABASE_URL and DATABASE_NAME")
        return self.db

    def create_document(self, collection_name: str, data: Union[BaseModel, Dict[str, Any]]) -> Dict[str, Any]:
        db = self._require_db()
        if isinstance(data, BaseModel):
            document = data.model_dump(by_alias=True)
        else:
            document = dict(data)
        now = datetime.now(timezone.utc)
        document["created_at"] = now
        document["updated_at"] = now
        result = db[collection_name].insert_one(document)
        document["_id"] = result.inserted_id
        return document

    def status(self) -> Dict[str, Any]:
        """Connectivity report used by the /test endpoint"""
        report: Dict[str, Any] = {
            "database": "❌ Not Available",
            "database_name": None,
            "connection_status": "Not Connected",
            "collections": [],
        }
        if self.db is None:
            return report
        report["database"] = "✅ Available"
        report["database_name"] = self.db.name
        try:
            collections: List[str] = self.db.list_collection_names()
        except Exception as e:  # pragma: no cover
            report["database"] = f"⚠️  Connected but Error: {str(e)[:80]}"
            return report
        report["connection_status"] = "Connected"
        report["collections"] = collections[:10]
        report["database"] = "✅ Connected & Working"
        return report
