import pymongo
from pymongo.server_api import ServerApi

from config_constants import MONGO_URI, MONGO_DB_NAME

# Connect using Server API version 1 (no round-trip until the first operation)
client = pymongo.MongoClient(MONGO_URI, server_api=ServerApi("1"))

# Select the database
db = client[MONGO_DB_NAME]

# Collections
users_collection = db["users"]
employees_collection = db["employees"]


def ping() -> bool:
    try:
        client.admin.command("ping")
        return True
    except Exception:
        return False
