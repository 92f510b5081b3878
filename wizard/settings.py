import os
from dotenv import load_dotenv

load_dotenv()

class Settings:
    PORT: int = int(os.getenv("PORT", "3000"))

    # Canned checkout/verdict responses instead of Stripe/OpenAI (tests, demos)
    MOCK_SERVICES: bool = os.getenv("MOCK_SERVICES", "false").lower() == "true"

    FLOW_CONFIG_PATH: str = os.getenv("FLOW_CONFIG_PATH", "config/flow.json")
    STATIC_DIR: str = os.getenv("STATIC_DIR", "public")
    TEMPLATES_DIR: str = os.getenv("TEMPLATES_DIR", "templates")

    # Absolute origin used for checkout redirect URLs; falls back to request headers
    PUBLIC_BASE_URL: str = os.getenv("PUBLIC_BASE_URL", "")
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "")

    # Stripe Checkout
    STRIPE_SECRET_KEY: str = os.getenv("STRIPE_SECRET_KEY", "")
    STRIPE_API_BASE: str = os.getenv("STRIPE_API_BASE", "https://api.stripe.com/v1")
    STRIPE_API_VERSION: str = os.getenv("STRIPE_API_VERSION", "2024-06-20")
    CHECKOUT_TIMEOUT_SEC: float = float(os.getenv("CHECKOUT_TIMEOUT_SEC", "10"))

    # OpenAI chat completions; OPENAI_MODEL overrides the model named in the flow
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", "")
    OPENAI_BASE_URL: str = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
    OPENAI_TEMPERATURE: float = float(os.getenv("OPENAI_TEMPERATURE", "0.3"))
    OPENAI_REQUEST_TIMEOUT_SEC: float = float(os.getenv("OPENAI_REQUEST_TIMEOUT_SEC", "30"))

    # Redact user-entered values (form data, verdicts, prompts) from logs
    ENABLE_PII_REDACTION: bool = os.getenv("ENABLE_PII_REDACTION", "true").lower() == "true"

settings = Settings()
