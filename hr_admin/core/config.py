import os
import sys
from pathlib import Path

from dotenv import load_dotenv

# ======================================================
# Load .env in BOTH:
# - normal dev run (uvicorn main:app)
# - frozen EXE (run_server.exe + .env side by side)
# ======================================================
if getattr(sys, "frozen", False):
    BASE_DIR = Path(sys.executable).parent
else:
    # This file is: <project_root>/hr_admin/core/config.py
    BASE_DIR = Path(__file__).resolve().parents[2]

load_dotenv(dotenv_path=BASE_DIR / ".env")

# ---------------------
# Database
# ---------------------
DB_HOST = os.getenv("DB_HOST", "127.0.0.1")
DB_PORT = os.getenv("DB_PORT", "5432")
DB_NAME = os.getenv("DB_NAME", "hr_admin")
DB_USER = os.getenv("DB_USER", "postgres")
DB_PASS = os.getenv("DB_PASS", "")

# Fix the None / empty / "None" port issue
if not DB_PORT or str(DB_PORT).lower() == "none":
    DB_PORT = "5432"

DATABASE_URL = os.getenv("DATABASE_URL") or (
    f"postgresql+psycopg2://{DB_USER}:{DB_PASS}@{DB_HOST}:{DB_PORT}/{DB_NAME}"
)

# ---------------------
# Auth
# ---------------------
JWT_SECRET = os.getenv("JWT_SECRET", "change-me")
JWT_ALGO = os.getenv("JWT_ALGO", "HS256")
ACCESS_TOKEN_MINUTES = int(os.getenv("ACCESS_TOKEN_MINUTES", "480"))

# ---------------------
# Backups
# ---------------------
BACKUP_DIR = Path(os.getenv("BACKUP_DIR", str(BASE_DIR / "backups")))
PG_BIN_DIR = os.getenv("PG_BIN_DIR", r"C:\Program Files\PostgreSQL\18\bin")

# ---------------------
# HTTP / logging
# ---------------------
CORS_ORIGINS = [
    o.strip()
    for o in os.getenv(
        "CORS_ORIGINS",
        "http://localhost:3000,http://127.0.0.1:3000",
    ).split(",")
    if o.strip()
]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
