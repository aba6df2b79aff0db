import os

MONGO_URI = os.environ.get("MONGO_URI", "mongodb://localhost:27017")
MONGO_DB_NAME = os.environ.get("MONGO_DB_NAME", "sawitrack")

SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-change-me")
API_BASE_PATH = "/" + os.environ.get("API_BASE_PATH", "/api").strip("/")

# Data entry happens in WIB (UTC+7); month boundaries are computed in this offset.
APP_TZ_OFFSET_MINUTES = int(os.environ.get("APP_TZ_OFFSET_MINUTES", "420"))

CORS_ORIGIN = [
    o.strip()
    for o in os.environ.get("CORS_ORIGIN", "https://palmaroots.my.id,https://www.palmaroots.my.id").split(",")
    if o.strip()
]

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
ACTIVITY_LOG_TTL_DAYS = int(os.environ.get("ACTIVITY_LOG_TTL_DAYS", "90"))
