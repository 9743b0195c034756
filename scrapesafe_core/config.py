# config.py
import os
import urllib.parse
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


# --------------------------------------------------------
# DATABASE
# --------------------------------------------------------
DB_USER = os.environ.get("DB_USER", "scrapesafe")
DB_PASS = os.environ.get("DB_PASS", "")
DB_HOST = os.environ.get("DB_HOST")
DB_NAME = os.environ.get("DB_NAME", "scrapesafe")
DB_PORT = os.environ.get("DB_PORT", "3306")

if os.environ.get("DATABASE_URL"):
    SQLALCHEMY_DATABASE_URL = os.environ["DATABASE_URL"]
elif DB_HOST:
    encoded_pass = urllib.parse.quote_plus(DB_PASS)
    SQLALCHEMY_DATABASE_URL = f"mysql+pymysql://{DB_USER}:{encoded_pass}@{DB_HOST}:{DB_PORT}/{DB_NAME}"
else:
    SQLALCHEMY_DATABASE_URL = "sqlite:///./scrapesafe.db"

_connect_args = {"check_same_thread": False} if SQLALCHEMY_DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(SQLALCHEMY_DATABASE_URL, pool_pre_ping=True, echo=False, connect_args=_connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


# --------------------------------------------------------
# SIGNING IDENTITY
# --------------------------------------------------------
SERVER_SIGNER_ENV = "SERVER_SIGNER_PRIVATE_KEY"   # read lazily, never defaulted


# --------------------------------------------------------
# EXTERNAL COLLABORATORS
# --------------------------------------------------------
WEB3_STORAGE_TOKEN = os.environ.get("WEB3_STORAGE_TOKEN")
WEB3_STORAGE_URL = os.environ.get("WEB3_STORAGE_URL", "https://api.web3.storage/upload")
STORY_SDK_KEY = os.environ.get("STORY_SDK_KEY")
STORY_API_URL = os.environ.get("STORY_API_URL", "https://api.storyprotocol.net/api/v3/ip-assets/register")
EXTERNAL_CALL_TIMEOUT = int(os.environ.get("EXTERNAL_CALL_TIMEOUT", "30"))   # seconds


# --------------------------------------------------------
# VERIFICATION
# --------------------------------------------------------
VERIFY_HTTP_TIMEOUT = int(os.environ.get("VERIFY_HTTP_TIMEOUT", "10"))       # seconds
DNS_LIFETIME_SECONDS = float(os.environ.get("DNS_LIFETIME_SECONDS", "10"))
VERIFIER_USER_AGENT = os.environ.get("VERIFIER_USER_AGENT", "ScrapeSafe-Verifier/1.0")
TOKEN_PREFIX = "scrapesafe"


# --------------------------------------------------------
# CACHE / BACKGROUND WORK
# --------------------------------------------------------
REDIS_URL = os.environ.get("REDIS_URL")      # e.g. "redis://127.0.0.1:6379/0" or None for in-memory
LICENSE_CACHE_TTL_SECONDS = int(os.environ.get("LICENSE_CACHE_TTL_SECONDS", "60"))
CACHE_SWEEP_INTERVAL_SECONDS = int(os.environ.get("CACHE_SWEEP_INTERVAL_SECONDS", "60"))
PIN_RETRY_LIMIT = int(os.environ.get("PIN_RETRY_LIMIT", "3"))
PIN_WORKER_INTERVAL_SECONDS = int(os.environ.get("PIN_WORKER_INTERVAL_SECONDS", "5"))


# --------------------------------------------------------
# DEV ONLY
# --------------------------------------------------------
ALLOW_DEV_ENDPOINTS = _env_bool("ALLOW_DEV_ENDPOINTS", False)   # enables /api/owner/test-mint
