import os
from dotenv import load_dotenv

load_dotenv()

class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Webhooks for the external workers (scrape / analyze / generate)
    PIPELINE_WEBHOOK_URL = os.getenv("PIPELINE_WEBHOOK_URL")
    SKILL_WEBHOOK_URL = os.getenv("SKILL_WEBHOOK_URL")
    WEBHOOK_TIMEOUT_SECONDS = float(os.getenv("WEBHOOK_TIMEOUT_SECONDS", "10"))

    # LLM element editor
    ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY")
    EDITOR_MODEL = os.getenv("EDITOR_MODEL", "claude-sonnet-4-5")
    EDITOR_MAX_TOKENS = int(os.getenv("EDITOR_MAX_TOKENS", "4096"))

    GENERATED_HOSTNAME_SUFFIX = os.getenv("GENERATED_HOSTNAME_SUFFIX", "sites.local")

class DevelopmentConfig(BaseConfig):
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.getenv("DEV_DATABASE_URI", "sqlite:///siteforge-dev.db")

class ProductionConfig(BaseConfig):
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URI")

class TestingConfig(BaseConfig):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    PIPELINE_WEBHOOK_URL = None
    SKILL_WEBHOOK_URL = None
    ANTHROPIC_API_KEY = None

config_by_name = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}


class ClientConfig:
    """Settings for the asyncio client core (pollers, editor, HTTP backend)."""

    API_BASE_URL = os.getenv("SITEFORGE_API_URL", "http://localhost:5000/api/v1")
    TENANT_ID = os.getenv("SITEFORGE_TENANT_ID")
    ACTOR_ID = os.getenv("SITEFORGE_ACTOR_ID")
    HTTP_TIMEOUT_SECONDS = float(os.getenv("SITEFORGE_HTTP_TIMEOUT", "30"))

    POLL_INTERVAL_SECONDS = float(os.getenv("SITEFORGE_POLL_INTERVAL", "3"))
    SKILL_POLL_MAX_ATTEMPTS = int(os.getenv("SITEFORGE_SKILL_POLL_MAX_ATTEMPTS", "100"))

    MAX_CHAT_MESSAGES_PER_ELEMENT = 50
