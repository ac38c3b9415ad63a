# backend/app/migrations/seed_data.py
"""
Loads a small demonstration data set: one account per role, two schools and two
beggars. Run from the backend directory:

    python -m app.migrations.seed_data [--reset]

--reset empties the users, schools and beggars collections first. Without it,
records whose unique key already exists are skipped.
"""

import argparse
import asyncio
import logging
import os
from typing import Any, Dict, List

from app.core.security import get_password_hash
from app.db import crud
from app.db.database import close_mongo_connection, connect_to_mongo
from app.db.init_db import init_db_indexes
from app.models.beggar import BeggarCreate
from app.models.enums import SchoolStatus, UserRole
from app.models.school import SchoolCreate, SchoolUpdate
from app.models.user import UserCreate

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DEFAULT_SEED_PASSWORD = "password123"

SEED_USERS: List[Dict[str, Any]] = [
    {"interviewerId": "INT001", "name": "Ahmed Musa", "email": "ahmed.musa@example.com",
     "phone": "+2348012345678", "lga": "Katsina", "role": UserRole.INTERVIEWER},
    {"interviewerId": "INT002", "name": "Fatima Hassan", "email": "fatima.hassan@example.com",
     "phone": "+2348023456789", "lga": "Daura", "role": UserRole.INTERVIEWER},
    {"interviewerId": "SUP001", "name": "Muhammad Bello", "email": "muhammad.bello@example.com",
     "phone": "+2348034567890", "lga": "Katsina", "role": UserRole.SUPERVISOR},
    {"interviewerId": "ADM001", "name": "Admin User", "email": "admin@quranicschools.com",
     "phone": "+2348045678901", "lga": "Katsina", "role": UserRole.ADMIN},
]

def _student(name: str, age: int, gender: str, lga: str, phone: str, parent: str, occupation: str,
             enrolled: str, attendance: float, performance: str) -> Dict[str, Any]:
    return {
        "name": name, "age": age, "gender": gender,
        "permanentHomeAddress": f"Family compound, {lga}", "nationality": "Nigerian",
        "state": "Katsina", "lga": lga, "townVillage": lga, "fathersContactNumber": phone,
        "isBegging": False, "parentName": parent, "parentPhone": phone, "parentOccupation": occupation,
        "enrollmentDate": enrolled, "attendanceRate": attendance,
        "academicPerformance": performance, "healthStatus": "GOOD",
    }

# Schools are always created as DRAFT; "status" is applied afterwards
SEED_SCHOOLS: List[Dict[str, Any]] = [
    {
        "owner": "INT001",
        "status": SchoolStatus.PUBLISHED,
        "payload": {
            "schoolCode": "SCH001", "name": "Al-Huda Quranic School", "address": "123 Main Street, Katsina",
            "phone": "+2348056789012", "email": "alhuda@example.com", "lga": "Katsina",
            "district": "Katsina Central", "ward": "Ward A", "village": "Katsina Village",
            "community": "Muslim Community", "yearsInSchool": 15,
            "headTeacher": {
                "name": "Mallam Ibrahim", "phone": "+2348067890123", "nationality": "Nigerian",
                "maritalStatus": "MARRIED", "numberOfWives": 2, "age": 45, "educationLevel": "QURANIC",
                "numberOfChildren": 8, "sourcesOfIncome": ["TEACHING", "FARMING"], "monthlyIncome": 50000,
            },
            "schoolStructure": {
                "hasClasses": True, "numberOfClasses": 5, "studentsPerClass": 20,
                "numberOfTeachers": 3, "numberOfPupils": 100,
                "hasIntervention": True, "interventionType": "Government Support",
                "hasToilets": True, "numberOfToilets": 3,
                "feedsPupils": True, "foodSources": ["PARENTS", "DONATIONS"],
                "sanitaryCareProvider": "Parents", "lostPupilAction": "Contact Parents",
                "studyTime": "MORNING_AND_EVENING", "studyTimes": ["06:00-12:00", "16:00-20:00"],
                "providesSleepingPlace": True, "sleepingPlaceLocation": "School Compound",
                "hasOtherStatePupils": True, "otherStatesCountries": "Kano, Kaduna",
                "hasParentAgreements": True, "agreementType": "VERBAL",
            },
            "students": [
                _student("Aisha Ibrahim", 12, "FEMALE", "Katsina", "+2348078901234", "Ibrahim Musa",
                         "Farmer", "2020-09-01", 95, "EXCELLENT"),
                _student("Hassan Ali", 10, "MALE", "Katsina", "+2348089012345", "Ali Hassan",
                         "Trader", "2021-01-15", 88, "GOOD"),
            ],
        },
    },
    {
        "owner": "INT002",
        "status": SchoolStatus.DRAFT,
        "payload": {
            "schoolCode": "SCH002", "name": "Nurul Islam Academy", "address": "456 Islamic Street, Daura",
            "phone": "+2348090123456", "lga": "Daura", "district": "Daura Central", "ward": "Ward B",
            "village": "Daura Village", "community": "Islamic Community", "yearsInSchool": 8,
            "headTeacher": {
                "name": "Mallam Yusuf", "phone": "+2348091234567", "nationality": "Nigerian",
                "maritalStatus": "MARRIED", "numberOfWives": 1, "age": 38, "educationLevel": "QURANIC",
                "numberOfChildren": 5, "sourcesOfIncome": ["TEACHING"], "monthlyIncome": 35000,
            },
            "schoolStructure": {
                "hasClasses": True, "numberOfClasses": 3, "studentsPerClass": 15,
                "numberOfTeachers": 2, "numberOfPupils": 45,
                "hasToilets": True, "numberOfToilets": 2,
                "feedsPupils": False, "foodSources": ["PARENTS"],
                "sanitaryCareProvider": "Parents", "lostPupilAction": "Contact Parents",
                "studyTime": "MORNING_ONLY", "studyTimes": ["07:00-12:00"],
                "hasParentAgreements": True, "agreementType": "WRITTEN",
            },
            "students": [
                _student("Fatima Yusuf", 9, "FEMALE", "Daura", "+2348092345678", "Yusuf Ahmed",
                         "Teacher", "2022-03-01", 92, "EXCELLENT"),
            ],
        },
    },
]

SEED_BEGGARS: List[Dict[str, Any]] = [
    {"interviewerId": "INT001", "beggarId": "BEG001", "name": "Aminu Suleiman", "age": 15, "sex": "MALE",
     "nationality": "Nigerian", "stateOfOrigin": "Katsina", "lga": "Katsina", "townVillage": "Katsina",
     "permanentHomeAddress": "123 Street, Katsina", "fathersContactNumber": "+2348093456789",
     "isBegging": True, "reasonForBegging": "Poverty"},
    {"interviewerId": "INT002", "beggarId": "BEG002", "name": "Hauwa Musa", "age": 12, "sex": "FEMALE",
     "nationality": "Nigerian", "stateOfOrigin": "Katsina", "lga": "Daura", "townVillage": "Daura",
     "permanentHomeAddress": "456 Avenue, Daura", "fathersContactNumber": "+2348094567890",
     "isBegging": True, "reasonForBegging": "Orphan"},
]

async def clear_collections() -> None:
    for collection_name in (crud.USER_COLLECTION, crud.SCHOOL_COLLECTION, crud.BEGGAR_COLLECTION):
        result = await crud._get_collection(collection_name).delete_many({})
        logger.info(f"Cleared {result.deleted_count} documents from '{collection_name}'")

async def seed_users(password: str) -> int:
    password_hash = get_password_hash(password)
    created = 0
    for entry in SEED_USERS:
        user_in = UserCreate(**entry, password=password)
        if await crud.interviewer_id_exists(user_in.interviewer_id):
            logger.info(f"User {user_in.interviewer_id} already present, skipping")
            continue
        await crud.create_user(user_in, password_hash)
        created += 1
    return created

async def seed_schools() -> int:
    created = 0
    for entry in SEED_SCHOOLS:
        school_in = SchoolCreate(**entry["payload"])
        if await crud.school_code_exists(school_in.school_code):
            logger.info(f"School {school_in.school_code} already present, skipping")
            continue
        school = await crud.create_school(school_in, interviewer_id=entry["owner"])
        if entry["status"] != SchoolStatus.DRAFT:
            await crud.update_school(school.id, SchoolUpdate(status=entry["status"]))
        created += 1
    return created

async def seed_beggars() -> int:
    created = 0
    for entry in SEED_BEGGARS:
        entry = dict(entry)
        owner = entry.pop("interviewerId")
        beggar_in = BeggarCreate(**entry)
        if await crud.beggar_id_exists(beggar_in.beggar_id):
            logger.info(f"Beggar {beggar_in.beggar_id} already present, skipping")
            continue
        await crud.create_beggar(beggar_in, interviewer_id=owner)
        created += 1
    return created

async def seed_database(reset: bool = False, password: str = DEFAULT_SEED_PASSWORD) -> Dict[str, int]:
    """Inserts the demonstration records. The database must already be connected."""
    if reset:
        await clear_collections()
    summary = {
        "users": await seed_users(password),
        "schools": await seed_schools(),
        "beggars": await seed_beggars(),
    }
    logger.info(f"Seed summary: {summary}")
    return summary

async def main(reset: bool) -> None:
    if not await connect_to_mongo():
        raise SystemExit("Could not connect to MongoDB; check MONGODB_URL.")
    try:
        await init_db_indexes()
        await seed_database(reset=reset, password=os.getenv("SEED_PASSWORD", DEFAULT_SEED_PASSWORD))
    finally:
        await close_mongo_connection()

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Load demonstration survey data.")
    parser.add_argument("--reset", action="store_true", help="empty users, schools and beggars first")
    args = parser.parse_args()
    asyncio.run(main(args.reset))
