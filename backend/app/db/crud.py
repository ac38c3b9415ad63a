# app/db/crud.py

# --- Core Imports ---
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import ReturnDocument, DESCENDING
from pymongo.errors import DuplicateKeyError
import uuid
from typing import List, Optional, Dict, Any, Tuple
from datetime import datetime, timezone
import logging
import re

# --- Database Access ---
from .database import get_database

# --- Pydantic Models ---
from app.models.user import User, UserBase, UserInDB
from app.models.school import School, SchoolCreate, SchoolUpdate
from app.models.student import StudentRow
from app.models.beggar import Beggar, BeggarCreate, BeggarUpdate
from app.models.draft import Draft, DraftCreate
from app.models.file import FileRecord, FileRecordCreate
from app.models.enums import SchoolStatus

# --- Logging Setup ---
logger = logging.getLogger(__name__)

# --- MongoDB Collection Names ---
USER_COLLECTION = "users"
SCHOOL_COLLECTION = "schools"
BEGGAR_COLLECTION = "beggars"
DRAFT_COLLECTION = "drafts"
FILE_COLLECTION = "files"

NEWEST_FIRST = [("created_at", DESCENDING), ("_id", DESCENDING)]

# --- Errors ---

class DatabaseUnavailableError(RuntimeError):
    """Raised when the shared database handle has not been initialised."""
    pass

class DuplicateRecordError(Exception):
    """A unique index rejected a write. `fields` names the offending key(s)."""
    def __init__(self, collection: str, fields: List[str]):
        self.collection = collection
        self.fields = fields
        super().__init__(f"Duplicate key in '{collection}' on {fields}")

def _duplicate_fields(error: DuplicateKeyError) -> List[str]:
    details = error.details or {}
    key_pattern = details.get("keyPattern") or details.get("keyValue") or {}
    return list(key_pattern.keys())

# --- Helper Functions ---

def _get_collection(collection_name: str) -> AsyncIOMotorCollection:
    db = get_database()
    if db is not None: return db[collection_name]
    logger.error("Database connection is not available (db object is None). Cannot get collection.")
    raise DatabaseUnavailableError("Database connection not available")

def build_search_query(search: Optional[str], fields: List[str]) -> Dict[str, Any]:
    """Case-insensitive substring match of `search` against any of `fields`."""
    if not search or not search.strip():
        return {}
    pattern = re.escape(search.strip())
    return {"$or": [{field: {"$regex": pattern, "$options": "i"}} for field in fields]}

_AGE_RANGE_RE = re.compile(r"^\s*(\d+)?\s*-\s*(\d+)?\s*$")

def parse_age_range(age_range: Optional[str]) -> Optional[Dict[str, int]]:
    """
    Turns a "min-max" token into a Mongo range condition. Either side may be
    left open ("5-" or "-10"). Returns None when no range was given.

    Raises:
        ValueError: if the token is malformed or min > max.
    """
    if age_range is None or not age_range.strip():
        return None
    match = _AGE_RANGE_RE.match(age_range)
    if not match or (match.group(1) is None and match.group(2) is None):
        raise ValueError(f"Invalid age range '{age_range}'. Expected 'min-max'.")
    condition: Dict[str, int] = {}
    if match.group(1) is not None:
        condition["$gte"] = int(match.group(1))
    if match.group(2) is not None:
        condition["$lte"] = int(match.group(2))
    if "$gte" in condition and "$lte" in condition and condition["$gte"] > condition["$lte"]:
        raise ValueError(f"Invalid age range '{age_range}'. Minimum is greater than maximum.")
    return condition

def _skip_for(page: int, limit: int) -> int:
    return (page - 1) * limit

async def _find_page(
    collection: AsyncIOMotorCollection,
    query: Dict[str, Any],
    page: int,
    limit: int,
    sort: List[Tuple[str, int]] = NEWEST_FIRST,
) -> Tuple[List[Dict[str, Any]], int]:
    total = await collection.count_documents(query)
    cursor = collection.find(query).sort(sort).skip(_skip_for(page, limit)).limit(limit)
    docs = await cursor.to_list(length=limit)
    return docs, total

def _without_empty(filters: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in filters.items() if value is not None and value != ""}

# --- User CRUD Functions ---

async def get_user_by_id(user_id: uuid.UUID) -> Optional[User]:
    collection = _get_collection(USER_COLLECTION)
    user_doc = await collection.find_one({"_id": user_id})
    if user_doc: return User(**user_doc)
    logger.warning(f"User {user_id} not found.")
    return None

async def get_user_in_db_by_id(user_id: uuid.UUID) -> Optional[UserInDB]:
    collection = _get_collection(USER_COLLECTION)
    user_doc = await collection.find_one({"_id": user_id})
    return UserInDB(**user_doc) if user_doc else None

async def get_user_by_interviewer_id(interviewer_id: str) -> Optional[UserInDB]:
    collection = _get_collection(USER_COLLECTION)
    user_doc = await collection.find_one({"interviewer_id": interviewer_id})
    return UserInDB(**user_doc) if user_doc else None

async def get_user_by_email(email: str) -> Optional[UserInDB]:
    collection = _get_collection(USER_COLLECTION)
    user_doc = await collection.find_one({"email": email.lower()})
    return UserInDB(**user_doc) if user_doc else None

async def interviewer_id_exists(interviewer_id: str, exclude_id: Optional[uuid.UUID] = None) -> bool:
    collection = _get_collection(USER_COLLECTION)
    query: Dict[str, Any] = {"interviewer_id": interviewer_id}
    if exclude_id is not None: query["_id"] = {"$ne": exclude_id}
    return await collection.count_documents(query, limit=1) > 0

async def email_exists(email: str, exclude_id: Optional[uuid.UUID] = None) -> bool:
    collection = _get_collection(USER_COLLECTION)
    query: Dict[str, Any] = {"email": email.lower()}
    if exclude_id is not None: query["_id"] = {"$ne": exclude_id}
    return await collection.count_documents(query, limit=1) > 0

async def create_user(user_in: UserBase, password_hash: str) -> User:
    """
    Inserts a user. `user_in` may be any UserBase subclass; a plain `password`
    field on it is never stored.

    Raises:
        DuplicateRecordError: if interviewer_id or email is already taken.
    """
    collection = _get_collection(USER_COLLECTION); now = datetime.now(timezone.utc)
    user_doc = user_in.model_dump(exclude={"password"})
    if user_doc.get("email") is None:
        # Keep the partial unique index on email from seeing nulls
        user_doc.pop("email", None)
    user_doc.update({
        "_id": uuid.uuid4(),
        "password_hash": password_hash,
        "last_login": None,
        "created_at": now,
        "updated_at": now,
    })
    logger.info(f"Inserting user {user_doc['interviewer_id']} with role {user_doc['role']}")
    try:
        await collection.insert_one(user_doc)
    except DuplicateKeyError as e:
        raise DuplicateRecordError(USER_COLLECTION, _duplicate_fields(e)) from e
    return User(**user_doc)

async def get_users(
    page: int = 1,
    limit: int = 10,
    search: Optional[str] = None,
    role: Optional[str] = None,
    lga: Optional[str] = None,
    is_active: Optional[bool] = None,
) -> Tuple[List[User], int]:
    collection = _get_collection(USER_COLLECTION)
    query = _without_empty({"role": role, "lga": lga, "is_active": is_active})
    query.update(build_search_query(search, ["name", "interviewer_id", "email"]))
    logger.info(f"Listing users page={page} limit={limit} filters={query}")
    docs, total = await _find_page(collection, query, page, limit)
    return [User(**doc) for doc in docs], total

async def update_user(user_id: uuid.UUID, update_data: Dict[str, Any]) -> Optional[User]:
    """
    Applies a partial update. Callers hash any new password beforehand and
    pass it as `password_hash`.

    Raises:
        DuplicateRecordError: if the new interviewer_id or email is taken.
    """
    collection = _get_collection(USER_COLLECTION); now = datetime.now(timezone.utc)
    update_data = {k: v for k, v in update_data.items() if k not in ("_id", "id", "created_at", "password")}
    if not update_data:
        logger.warning(f"No update data for user {user_id}")
        return await get_user_by_id(user_id)
    update_data["updated_at"] = now
    logger.info(f"Updating user {user_id} fields={sorted(k for k in update_data if k != 'password_hash')}")
    try:
        updated_doc = await collection.find_one_and_update(
            {"_id": user_id}, {"$set": update_data}, return_document=ReturnDocument.AFTER
        )
    except DuplicateKeyError as e:
        raise DuplicateRecordError(USER_COLLECTION, _duplicate_fields(e)) from e
    if updated_doc: return User(**updated_doc)
    logger.warning(f"User {user_id} not found for update.")
    return None

async def set_user_password(user_id: uuid.UUID, password_hash: str) -> bool:
    collection = _get_collection(USER_COLLECTION)
    result = await collection.update_one(
        {"_id": user_id},
        {"$set": {"password_hash": password_hash, "updated_at": datetime.now(timezone.utc)}},
    )
    return result.matched_count == 1

async def record_login(user_id: uuid.UUID) -> None:
    collection = _get_collection(USER_COLLECTION); now = datetime.now(timezone.utc)
    await collection.update_one({"_id": user_id}, {"$set": {"last_login": now, "updated_at": now}})

async def delete_user(user_id: uuid.UUID) -> bool:
    collection = _get_collection(USER_COLLECTION)
    logger.info(f"Hard deleting user {user_id}")
    result = await collection.delete_one({"_id": user_id})
    return result.deleted_count == 1

async def count_users() -> int:
    return await _get_collection(USER_COLLECTION).count_documents({})

# --- School CRUD Functions ---

def _school_storage_doc(data: Dict[str, Any]) -> Dict[str, Any]:
    # Embedded students keep their identifier under `_id`, like top-level documents
    for student in data.get("students") or []:
        if "id" in student:
            student["_id"] = student.pop("id")
    return data

async def school_code_exists(school_code: str, exclude_id: Optional[uuid.UUID] = None) -> bool:
    collection = _get_collection(SCHOOL_COLLECTION)
    query: Dict[str, Any] = {"school_code": school_code}
    if exclude_id is not None: query["_id"] = {"$ne": exclude_id}
    return await collection.count_documents(query, limit=1) > 0

async def create_school(school_in: SchoolCreate, interviewer_id: str) -> School:
    """
    Raises:
        DuplicateRecordError: if the school code is already used.
    """
    collection = _get_collection(SCHOOL_COLLECTION); now = datetime.now(timezone.utc)
    school_doc = _school_storage_doc(school_in.model_dump())
    school_doc.update({
        "_id": uuid.uuid4(),
        "interviewer_id": interviewer_id,
        "status": SchoolStatus.DRAFT.value,
        "created_at": now,
        "updated_at": now,
    })
    logger.info(f"Inserting school {school_doc['school_code']} ({school_doc['_id']}) for interviewer {interviewer_id}")
    try:
        await collection.insert_one(school_doc)
    except DuplicateKeyError as e:
        raise DuplicateRecordError(SCHOOL_COLLECTION, _duplicate_fields(e)) from e
    return School(**school_doc)

async def get_school_by_id(school_id: uuid.UUID) -> Optional[School]:
    collection = _get_collection(SCHOOL_COLLECTION)
    logger.info(f"Getting school ID: {school_id}")
    school_doc = await collection.find_one({"_id": school_id})
    if school_doc: return School(**school_doc)
    logger.warning(f"School {school_id} not found.")
    return None

async def get_schools(
    page: int = 1,
    limit: int = 10,
    search: Optional[str] = None,
    lga: Optional[str] = None,
    status: Optional[str] = None,
    interviewer_id: Optional[str] = None,
) -> Tuple[List[School], int]:
    collection = _get_collection(SCHOOL_COLLECTION)
    query = _without_empty({"lga": lga, "status": status, "interviewer_id": interviewer_id})
    query.update(build_search_query(search, ["name", "address", "school_code"]))
    logger.info(f"Listing schools page={page} limit={limit} filters={query}")
    docs, total = await _find_page(collection, query, page, limit)
    return [School(**doc) for doc in docs], total

async def update_school(school_id: uuid.UUID, school_in: SchoolUpdate) -> Optional[School]:
    """
    Raises:
        DuplicateRecordError: if a changed school code collides with another school.
    """
    collection = _get_collection(SCHOOL_COLLECTION); now = datetime.now(timezone.utc)
    update_data = school_in.model_dump(exclude_unset=True)
    # Nested sections replace the stored ones whole, defaults and student ids included
    for section in ("head_teacher", "school_structure", "students"):
        if section in update_data:
            update_data[section] = school_in.model_dump(include={section})[section]
    update_data = _school_storage_doc(update_data)
    update_data.pop("_id", None); update_data.pop("id", None); update_data.pop("created_at", None)
    update_data.pop("interviewer_id", None)
    if not update_data:
        logger.warning(f"No update data for school {school_id}")
        return await get_school_by_id(school_id)
    update_data["updated_at"] = now
    logger.info(f"Updating school {school_id} fields={sorted(update_data)}")
    try:
        updated_doc = await collection.find_one_and_update(
            {"_id": school_id}, {"$set": update_data}, return_document=ReturnDocument.AFTER
        )
    except DuplicateKeyError as e:
        raise DuplicateRecordError(SCHOOL_COLLECTION, _duplicate_fields(e)) from e
    if updated_doc: return School(**updated_doc)
    logger.warning(f"School {school_id} not found for update.")
    return None

async def delete_school(school_id: uuid.UUID) -> bool:
    collection = _get_collection(SCHOOL_COLLECTION)
    logger.info(f"Hard deleting school {school_id}")
    result = await collection.delete_one({"_id": school_id})
    return result.deleted_count == 1

def build_student_pipeline(
    page: int,
    limit: int,
    search: Optional[str] = None,
    lga: Optional[str] = None,
    status: Optional[str] = None,
    school_id: Optional[uuid.UUID] = None,
    gender: Optional[str] = None,
    is_begging: Optional[bool] = None,
    age_range: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    School-level filters run before the students array is unwound, student-level
    filters after it, then the flattened rows are paginated.
    """
    school_query = _without_empty({"lga": lga, "status": status, "_id": school_id})
    school_query.update(build_search_query(search, ["name", "address", "school_code"]))

    student_query = _without_empty({"gender": gender, "is_begging": is_begging})
    age_condition = parse_age_range(age_range)
    if age_condition:
        student_query["age"] = age_condition

    return [
        {"$match": school_query},
        {"$unwind": "$students"},
        {"$replaceRoot": {"newRoot": {"$mergeObjects": [
            "$students",
            {
                "school_id": "$_id",
                "school_code": "$school_code",
                "school_name": "$name",
                "school_lga": "$lga",
                "school_status": "$status",
                "school_created_at": "$created_at",
            },
        ]}}},
        {"$match": student_query},
        {"$sort": {"school_created_at": -1, "_id": 1}},
        {"$facet": {
            "items": [{"$skip": _skip_for(page, limit)}, {"$limit": limit}],
            "total": [{"$count": "count"}],
        }},
    ]

async def get_students(page: int = 1, limit: int = 10, **filters: Any) -> Tuple[List[StudentRow], int]:
    """Cross-school student listing. Accepts the filters of build_student_pipeline."""
    collection = _get_collection(SCHOOL_COLLECTION)
    pipeline = build_student_pipeline(page, limit, **filters)
    active_filters = {key: value for key, value in filters.items() if value is not None}
    logger.info(f"Listing students page={page} limit={limit} filters={active_filters}")
    result = await collection.aggregate(pipeline).to_list(length=1)
    if not result:
        return [], 0
    facet = result[0]
    total = facet["total"][0]["count"] if facet.get("total") else 0
    return [StudentRow(**row) for row in facet.get("items", [])], total

# --- Beggar CRUD Functions ---

async def beggar_id_exists(beggar_id: str, exclude_id: Optional[uuid.UUID] = None) -> bool:
    collection = _get_collection(BEGGAR_COLLECTION)
    query: Dict[str, Any] = {"beggar_id": beggar_id}
    if exclude_id is not None: query["_id"] = {"$ne": exclude_id}
    return await collection.count_documents(query, limit=1) > 0

async def create_beggar(beggar_in: BeggarCreate, interviewer_id: str) -> Beggar:
    """
    Raises:
        DuplicateRecordError: if the beggar ID is already used.
    """
    collection = _get_collection(BEGGAR_COLLECTION); now = datetime.now(timezone.utc)
    beggar_doc = beggar_in.model_dump()
    beggar_doc.update({
        "_id": uuid.uuid4(),
        "interviewer_id": interviewer_id,
        "created_at": now,
        "updated_at": now,
    })
    logger.info(f"Inserting beggar {beggar_doc['beggar_id']} ({beggar_doc['_id']}) for interviewer {interviewer_id}")
    try:
        await collection.insert_one(beggar_doc)
    except DuplicateKeyError as e:
        raise DuplicateRecordError(BEGGAR_COLLECTION, _duplicate_fields(e)) from e
    return Beggar(**beggar_doc)

async def get_beggar_by_id(beggar_id: uuid.UUID) -> Optional[Beggar]:
    collection = _get_collection(BEGGAR_COLLECTION)
    beggar_doc = await collection.find_one({"_id": beggar_id})
    if beggar_doc: return Beggar(**beggar_doc)
    logger.warning(f"Beggar {beggar_id} not found.")
    return None

def build_beggar_query(
    search: Optional[str] = None,
    lga: Optional[str] = None,
    state_of_origin: Optional[str] = None,
    is_begging: Optional[bool] = None,
    interviewer_id: Optional[str] = None,
    sex: Optional[str] = None,
    age_range: Optional[str] = None,
) -> Dict[str, Any]:
    query = _without_empty({
        "lga": lga,
        "state_of_origin": state_of_origin,
        "is_begging": is_begging,
        "interviewer_id": interviewer_id,
        "sex": sex,
    })
    age_condition = parse_age_range(age_range)
    if age_condition:
        query["age"] = age_condition
    query.update(build_search_query(search, ["name", "beggar_id"]))
    return query

async def get_beggars(page: int = 1, limit: int = 10, **filters: Any) -> Tuple[List[Beggar], int]:
    """Paginated beggar listing. Accepts the filters of build_beggar_query."""
    collection = _get_collection(BEGGAR_COLLECTION)
    query = build_beggar_query(**filters)
    logger.info(f"Listing beggars page={page} limit={limit} filters={query}")
    docs, total = await _find_page(collection, query, page, limit)
    return [Beggar(**doc) for doc in docs], total

async def update_beggar(beggar_id: uuid.UUID, beggar_in: BeggarUpdate) -> Optional[Beggar]:
    """
    Raises:
        DuplicateRecordError: if a changed beggar ID collides with another record.
    """
    collection = _get_collection(BEGGAR_COLLECTION); now = datetime.now(timezone.utc)
    update_data = beggar_in.model_dump(exclude_unset=True)
    update_data.pop("_id", None); update_data.pop("id", None); update_data.pop("interviewer_id", None)
    if not update_data:
        logger.warning(f"No update data for beggar {beggar_id}")
        return await get_beggar_by_id(beggar_id)
    update_data["updated_at"] = now
    logger.info(f"Updating beggar {beggar_id} fields={sorted(update_data)}")
    try:
        updated_doc = await collection.find_one_and_update(
            {"_id": beggar_id}, {"$set": update_data}, return_document=ReturnDocument.AFTER
        )
    except DuplicateKeyError as e:
        raise DuplicateRecordError(BEGGAR_COLLECTION, _duplicate_fields(e)) from e
    if updated_doc: return Beggar(**updated_doc)
    logger.warning(f"Beggar {beggar_id} not found for update.")
    return None

async def delete_beggar(beggar_id: uuid.UUID) -> bool:
    collection = _get_collection(BEGGAR_COLLECTION)
    logger.info(f"Hard deleting beggar {beggar_id}")
    result = await collection.delete_one({"_id": beggar_id})
    return result.deleted_count == 1

# --- Draft CRUD Functions ---

async def get_drafts(
    interviewer_id: str,
    page: int = 1,
    limit: int = 10,
    draft_type: Optional[str] = None,
) -> Tuple[List[Draft], int]:
    collection = _get_collection(DRAFT_COLLECTION)
    query = _without_empty({"interviewer_id": interviewer_id, "type": draft_type})
    docs, total = await _find_page(
        collection, query, page, limit, sort=[("last_saved", DESCENDING), ("_id", DESCENDING)]
    )
    return [Draft(**doc) for doc in docs], total

async def get_draft_by_id(draft_id: uuid.UUID, interviewer_id: Optional[str] = None) -> Optional[Draft]:
    """Pass `interviewer_id` to restrict the lookup to that owner's drafts."""
    collection = _get_collection(DRAFT_COLLECTION)
    query: Dict[str, Any] = {"_id": draft_id}
    if interviewer_id is not None: query["interviewer_id"] = interviewer_id
    draft_doc = await collection.find_one(query)
    return Draft(**draft_doc) if draft_doc else None

async def draft_exists(draft_key: str, interviewer_id: str) -> bool:
    collection = _get_collection(DRAFT_COLLECTION)
    return await collection.count_documents({"draft_id": draft_key, "interviewer_id": interviewer_id}, limit=1) > 0

async def create_draft(draft_in: DraftCreate, interviewer_id: str) -> Draft:
    """
    Raises:
        DuplicateRecordError: if this interviewer already has a draft with that draftId.
    """
    collection = _get_collection(DRAFT_COLLECTION); now = datetime.now(timezone.utc)
    draft_doc = draft_in.model_dump()
    draft_doc.update({
        "_id": uuid.uuid4(),
        "interviewer_id": interviewer_id,
        "last_saved": now,
        "created_at": now,
        "updated_at": now,
    })
    try:
        await collection.insert_one(draft_doc)
    except DuplicateKeyError as e:
        raise DuplicateRecordError(DRAFT_COLLECTION, _duplicate_fields(e)) from e
    logger.info(f"Created draft {draft_doc['draft_id']} for interviewer {interviewer_id}")
    return Draft(**draft_doc)

async def save_draft(draft_in: DraftCreate, interviewer_id: str) -> Tuple[Draft, bool]:
    """
    Creates or overwrites the caller's draft keyed on (draftId, interviewerId).
    Only `data` and `last_saved` change on an existing draft.

    Returns:
        (draft, created) where `created` is True if a new draft was inserted.
    """
    collection = _get_collection(DRAFT_COLLECTION); now = datetime.now(timezone.utc)
    query = {"draft_id": draft_in.draft_id, "interviewer_id": interviewer_id}
    update = {
        "$set": {"data": draft_in.data, "last_saved": now, "updated_at": now},
        "$setOnInsert": {"_id": uuid.uuid4(), "type": draft_in.type, "created_at": now},
    }
    try:
        result = await collection.update_one(query, update, upsert=True)
    except DuplicateKeyError:
        # Two concurrent upserts both tried to insert; the loser now sees the winner's row
        logger.info(f"Concurrent save of draft {draft_in.draft_id} for {interviewer_id}, retrying as update.")
        result = await collection.update_one(query, update, upsert=True)
    created = result.upserted_id is not None
    draft_doc = await collection.find_one(query)
    logger.info(f"{'Created' if created else 'Updated'} draft {draft_in.draft_id} for interviewer {interviewer_id}")
    return Draft(**draft_doc), created

async def update_draft_data(draft_id: uuid.UUID, data: Any) -> Optional[Draft]:
    collection = _get_collection(DRAFT_COLLECTION); now = datetime.now(timezone.utc)
    updated_doc = await collection.find_one_and_update(
        {"_id": draft_id},
        {"$set": {"data": data, "last_saved": now, "updated_at": now}},
        return_document=ReturnDocument.AFTER,
    )
    return Draft(**updated_doc) if updated_doc else None

async def delete_draft(draft_id: uuid.UUID) -> bool:
    collection = _get_collection(DRAFT_COLLECTION)
    result = await collection.delete_one({"_id": draft_id})
    return result.deleted_count == 1

# --- File Metadata CRUD Functions ---

async def create_file_record(file_in: FileRecordCreate) -> FileRecord:
    collection = _get_collection(FILE_COLLECTION); now = datetime.now(timezone.utc)
    file_doc = file_in.model_dump()
    file_doc.update({"_id": uuid.uuid4(), "created_at": now, "updated_at": now})
    try:
        await collection.insert_one(file_doc)
    except DuplicateKeyError as e:
        raise DuplicateRecordError(FILE_COLLECTION, _duplicate_fields(e)) from e
    logger.info(f"Recorded file {file_doc['file_id']} ({file_doc['filename']}) uploaded by {file_doc['uploaded_by']}")
    return FileRecord(**file_doc)

async def get_file_by_id(file_id: uuid.UUID) -> Optional[FileRecord]:
    collection = _get_collection(FILE_COLLECTION)
    file_doc = await collection.find_one({"_id": file_id})
    return FileRecord(**file_doc) if file_doc else None

async def get_files_by_uploader(
    uploaded_by: str,
    page: int = 1,
    limit: int = 10,
    related_type: Optional[str] = None,
    related_id: Optional[str] = None,
) -> Tuple[List[FileRecord], int]:
    collection = _get_collection(FILE_COLLECTION)
    query = _without_empty({
        "uploaded_by": uploaded_by,
        "related_to.type": related_type,
        "related_to.id": related_id,
    })
    docs, total = await _find_page(collection, query, page, limit)
    return [FileRecord(**doc) for doc in docs], total

async def delete_file_record(file_id: uuid.UUID) -> bool:
    collection = _get_collection(FILE_COLLECTION)
    result = await collection.delete_one({"_id": file_id})
    return result.deleted_count == 1
