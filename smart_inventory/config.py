"""
Centralized configuration management for Smart Inventory.
All environment variables and settings are loaded and validated here.
"""
from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field
from dotenv import load_dotenv

# Load .env file
load_dotenv()


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Secrets (LLM key, Sentry DSN) belong in .env, never in git.
    """

    # ═══════════════════════════════════════════
    # SERVER CONFIGURATION
    # ═══════════════════════════════════════════
    PORT: int = Field(default=5000, description="Server port")
    BASE_URL: str = Field(default="http://localhost:5000", description="Base URL for links")
    CORS_ORIGINS: str = Field(default="http://localhost:3000", description="Comma separated CORS origins")
    ENVIRONMENT: str = Field(default="development", description="development or production")

    # ═══════════════════════════════════════════
    # AUTHENTICATION
    # ═══════════════════════════════════════════
    SESSION_TOKEN_EXPIRY_HOURS: int = Field(default=24, description="Hours before a login token expires")
    LOGIN_RATE_LIMIT: str = Field(default="10/minute", description="slowapi limit for the login endpoint")
    DEMO_USERS_ENABLED: bool = Field(default=True, description="Accept the built-in demo accounts")

    # ═══════════════════════════════════════════
    # AI ASSISTANT (OpenAI-compatible endpoint)
    # ═══════════════════════════════════════════
    LLM_API_KEY: Optional[str] = Field(default=None, description="API key for the chat completion endpoint")
    LLM_BASE_URL: str = Field(default="https://api.groq.com/openai/v1", description="Chat completion base URL")
    LLM_MODEL: str = Field(default="llama-3.3-70b-versatile", description="Chat completion model")
    LLM_TEMPERATURE: float = Field(default=0.7, description="Sampling temperature")
    LLM_MAX_TOKENS: int = Field(default=1024, description="Max tokens for chat replies")
    LLM_REPORT_MAX_TOKENS: int = Field(default=1500, description="Max tokens for shopping list / insights")

    # ═══════════════════════════════════════════
    # POS INTEGRATION (simulated)
    # ═══════════════════════════════════════════
    POS_SYNC_DELAY_SECONDS: float = Field(default=1.0, description="Artificial delay of a simulated sync")

    # ═══════════════════════════════════════════
    # DATABASE
    # ═══════════════════════════════════════════
    DATABASE_URL: str = Field(default="sqlite:///./smart_inventory.db", description="Database connection URL")
    DATABASE_ECHO: bool = Field(default=False, description="Echo SQL statements")

    # ═══════════════════════════════════════════
    # MONITORING
    # ═══════════════════════════════════════════
    SENTRY_DSN: Optional[str] = Field(default=None, description="Sentry DSN, disabled when empty")
    LOG_LEVEL: str = Field(default="INFO", description="Root log level")

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env

    @property
    def cors_origins(self) -> list:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    def get_service_status(self) -> dict:
        """
        Return configuration status for all services.
        Masks secrets for security.
        """
        return {
            "server": {
                "port": self.PORT,
                "base_url": self.BASE_URL,
                "environment": self.ENVIRONMENT,
            },
            "ai": {
                "llm": "[OK] Configured" if self.LLM_API_KEY else "[X] Not configured",
                "base_url": self.LLM_BASE_URL,
                "model": self.LLM_MODEL,
            },
            "monitoring": {
                "sentry": "[OK] Configured" if self.SENTRY_DSN else "[X] Not configured",
            },
            "database": {
                "type": "SQLite" if "sqlite" in self.DATABASE_URL.lower() else "Other",
                "url": self.DATABASE_URL.split("///")[-1] if "sqlite" in self.DATABASE_URL.lower() else "***"
            }
        }

    def print_startup_summary(self):
        """Print a formatted startup configuration summary."""
        status = self.get_service_status()

        print("\n" + "=" * 60)
        print("  SMART INVENTORY API - Configuration Summary")
        print("=" * 60)

        print(f"\nSERVER")
        print(f"   Port: {status['server']['port']}")
        print(f"   Base URL: {status['server']['base_url']}")
        print(f"   Environment: {status['server']['environment']}")

        print(f"\nAI ASSISTANT")
        print(f"   LLM: {status['ai']['llm']}")
        print(f"   Model: {status['ai']['model']}")

        print(f"\nDATABASE")
        print(f"   Type: {status['database']['type']}")
        print(f"   Location: {status['database']['url']}")

        print("\n" + "=" * 60)

        if not self.LLM_API_KEY:
            print("\nWARNINGS:")
            print("   WARNING: No LLM_API_KEY configured - AI assistant endpoints will return errors")
            print()


# Global settings instance
settings = Settings()
