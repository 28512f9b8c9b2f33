import os

from dotenv import load_dotenv

load_dotenv()

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "4000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

# two-party sessions only
MAX_ROOM_SIZE = 2

# frames queued per participant before new ones are dropped
OUTBOX_SIZE = int(os.getenv("OUTBOX_SIZE", "256"))
