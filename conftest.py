import os

from dotenv import load_dotenv

# Optional overrides for local test runs (e.g. TEST_DATABASE_URL for Postgres)
env_test_path = os.path.join(os.path.dirname(__file__), ".env.test")
if os.path.exists(env_test_path):
    load_dotenv(env_test_path, override=True)

# Must be in place before libs.common.config is first imported
os.environ["ENVIRONMENT"] = "test"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("PAYSTACK_SECRET_KEY", "sk_test_bebrand")
os.environ.setdefault("PAYSTACK_API_BASE_URL", "https://paystack.test")
os.environ["BREVO_API_KEY"] = ""
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test_bebrand.db")

from libs.common.config import get_settings  # noqa: E402

get_settings.cache_clear()
