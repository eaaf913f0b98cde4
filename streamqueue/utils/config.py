"""
Configuration module for StreamQueue.
Handles app configuration, session storage, cache initialization and
the queue policy settings.
"""

import logging
import os
import tempfile
import redis
from flask_session import Session
from flask_caching import Cache
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)


def env_flag(name, default="false"):
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def get_redis_url():
    """Get Redis URL, relaxing certificate checks for rediss:// as Heroku requires"""
    redis_url = os.getenv("REDIS_URL")
    if redis_url and redis_url.startswith("rediss://") and "ssl_cert_reqs" not in redis_url:
        return redis_url + "?ssl_cert_reqs=none"
    return redis_url


def create_redis_client():
    """Connect to REDIS_URL, or return None when it is unset or unreachable"""
    redis_url = get_redis_url()
    if not redis_url:
        return None

    try:
        client = redis.from_url(
            redis_url,
            socket_connect_timeout=3,
            socket_timeout=3,
            retry_on_timeout=False
        )
        client.ping()
        logger.info("Connected to Redis")
        return client
    except redis.RedisError as e:
        logger.warning(f"Redis connection failed: {e}")
        return None


def load_settings(app):
    """Copy environment settings into app.config"""
    app.config["SECRET_KEY"] = os.getenv("SECRET_KEY", "dev-secret-change-me")
    app.config["LOG_LEVEL"] = os.getenv("LOG_LEVEL", "INFO").upper()
    app.config["ALLOW_DEV_LOGIN"] = env_flag("ALLOW_DEV_LOGIN")

    # Queue policy
    app.config["MAX_QUEUE_LEN"] = int(os.getenv("MAX_QUEUE_LEN", "20"))
    app.config["DUPLICATE_WINDOW_MINUTES"] = int(os.getenv("DUPLICATE_WINDOW_MINUTES", "10"))
    app.config["BURST_WINDOW_MINUTES"] = int(os.getenv("BURST_WINDOW_MINUTES", "2"))
    app.config["BURST_LIMIT"] = int(os.getenv("BURST_LIMIT", "2"))
    app.config["SUSTAINED_WINDOW_MINUTES"] = int(os.getenv("SUSTAINED_WINDOW_MINUTES", "10"))
    app.config["SUSTAINED_LIMIT"] = int(os.getenv("SUSTAINED_LIMIT", "5"))
    app.config["ADVANCE_LOCK_TIMEOUT_SECONDS"] = int(os.getenv("ADVANCE_LOCK_TIMEOUT_SECONDS", "10"))

    # Metadata lookups
    app.config["YOUTUBE_API_KEY"] = os.getenv("YOUTUBE_API_KEY", "")
    app.config["RESOLVER_TIMEOUT_SECONDS"] = float(os.getenv("RESOLVER_TIMEOUT_SECONDS", "4"))
    app.config["METADATA_CACHE_SECONDS"] = int(os.getenv("METADATA_CACHE_SECONDS", "300"))
    app.config["FALLBACK_THUMBNAIL_SMALL"] = os.getenv("FALLBACK_THUMBNAIL_SMALL", "")
    app.config["FALLBACK_THUMBNAIL_LARGE"] = os.getenv("FALLBACK_THUMBNAIL_LARGE", "")


def configure_session_storage(app, redis_client):
    """Server-side sessions: Redis in production when reachable, filesystem otherwise"""
    app.config["SESSION_PERMANENT"] = True
    app.config["SESSION_USE_SIGNER"] = True
    app.config["SESSION_KEY_PREFIX"] = "streamqueue:"
    app.config["SESSION_COOKIE_HTTPONLY"] = True
    app.config["SESSION_COOKIE_SAMESITE"] = "Lax"

    if os.getenv("FLASK_ENV") == "production" and redis_client is not None:
        app.config["SESSION_TYPE"] = "redis"
        app.config["SESSION_REDIS"] = redis_client
        app.config["SESSION_COOKIE_SECURE"] = True
        logger.info("Using Redis for session storage (production)")
        return True

    app.config["SESSION_TYPE"] = "filesystem"
    app.config["SESSION_FILE_DIR"] = os.getenv(
        "SESSION_FILE_DIR", os.path.join(tempfile.gettempdir(), "streamqueue_sessions")
    )
    logger.info("Using filesystem for session storage")
    return False


def configure_cache(app, redis_client):
    """Metadata cache: Redis when it is reachable, in-memory otherwise"""
    redis_url = get_redis_url()
    if redis_client is not None and redis_url:
        app.config["CACHE_TYPE"] = "RedisCache"
        app.config["CACHE_REDIS_URL"] = redis_url
    else:
        app.config["CACHE_TYPE"] = "SimpleCache"
    app.config["CACHE_DEFAULT_TIMEOUT"] = app.config.get("METADATA_CACHE_SECONDS", 300)
    return Cache(app)


def init_app(app):
    """Initialize Flask app with configuration; returns (cache, redis_client)"""
    load_settings(app)
    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    redis_client = create_redis_client()
    configure_session_storage(app, redis_client)
    Session(app)

    cache = configure_cache(app, redis_client)
    logger.info("Configuration and caching initialized successfully")
    return cache, redis_client
