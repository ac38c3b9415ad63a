# app/db/init_db.py
import logging
from pymongo import IndexModel, ASCENDING, DESCENDING
from pymongo.errors import OperationFailure

from .database import get_database
from . import crud

logger = logging.getLogger(__name__)

# Unique indexes are what actually guarantees natural-key uniqueness; the
# lookups done before inserts only exist to give a friendlier error message.
COLLECTION_INDEXES = {
    crud.USER_COLLECTION: [
        IndexModel([("interviewer_id", ASCENDING)], name="user_interviewer_id_unique", unique=True),
        # Email is optional, so only documents that carry one take part
        IndexModel(
            [("email", ASCENDING)],
            name="user_email_unique",
            unique=True,
            partialFilterExpression={"email": {"$type": "string"}},
        ),
        IndexModel([("role", ASCENDING), ("lga", ASCENDING)], name="user_role_lga_index"),
        IndexModel([("created_at", DESCENDING)], name="user_created_at_index"),
    ],
    crud.SCHOOL_COLLECTION: [
        IndexModel([("school_code", ASCENDING)], name="school_code_unique", unique=True),
        IndexModel([("interviewer_id", ASCENDING), ("created_at", DESCENDING)], name="school_owner_index"),
        IndexModel([("lga", ASCENDING)], name="school_lga_index"),
        IndexModel([("status", ASCENDING)], name="school_status_index"),
        IndexModel([("created_at", DESCENDING)], name="school_created_at_index"),
    ],
    crud.BEGGAR_COLLECTION: [
        IndexModel([("beggar_id", ASCENDING)], name="beggar_id_unique", unique=True),
        IndexModel([("interviewer_id", ASCENDING), ("created_at", DESCENDING)], name="beggar_owner_index"),
        IndexModel([("lga", ASCENDING)], name="beggar_lga_index"),
        IndexModel([("state_of_origin", ASCENDING)], name="beggar_state_index"),
        IndexModel([("is_begging", ASCENDING)], name="beggar_is_begging_index"),
        IndexModel([("created_at", DESCENDING)], name="beggar_created_at_index"),
    ],
    crud.DRAFT_COLLECTION: [
        # draftId is only unique per interviewer
        IndexModel(
            [("draft_id", ASCENDING), ("interviewer_id", ASCENDING)],
            name="draft_owner_unique",
            unique=True,
        ),
        IndexModel([("interviewer_id", ASCENDING), ("last_saved", DESCENDING)], name="draft_last_saved_index"),
    ],
    crud.FILE_COLLECTION: [
        IndexModel([("file_id", ASCENDING)], name="file_id_unique", unique=True),
        IndexModel([("uploaded_by", ASCENDING), ("created_at", DESCENDING)], name="file_uploader_index"),
        IndexModel([("related_to.type", ASCENDING), ("related_to.id", ASCENDING)], name="file_related_to_index"),
    ],
}

async def init_db_indexes() -> bool:
    """
    Initialize MongoDB indexes for all collections.
    Called during application startup after a successful connection.
    """
    db = get_database()
    if db is None:
        logger.error("Could not get database instance to ensure indexes.")
        return False

    ok = True
    for collection_name, indexes in COLLECTION_INDEXES.items():
        try:
            created = await db[collection_name].create_indexes(indexes)
            logger.info(f"Indexes ensured on '{collection_name}': {created}")
        except OperationFailure as e:
            # Typically an existing index with the same name but different options
            logger.error(f"Database OperationFailure while creating indexes on '{collection_name}': {e}", exc_info=True)
            ok = False
    return ok
