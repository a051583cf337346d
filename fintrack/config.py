"""
Runtime configuration read from the environment (and an optional .env file).

One Settings instance is built at process start and handed to the
application factory; nothing below reads os.environ directly.
"""

from typing import List, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models.auth import UserRole

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
ENVIRONMENTS = ("development", "testing", "staging", "production")


class Settings(BaseSettings):
    """Every tunable of the API; field names map to upper-case env vars."""
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )
    
    # App settings
    app_name: str = Field(default="fintrack-api", description="Application name")
    version: str = Field(default="1.0.0", description="Application version")
    debug: bool = Field(default=False, description="Debug mode")
    environment: str = Field(default="production", description="Environment name")
    
    # Sessions
    session_cookie_name: str = Field(default="session_token", description="Cookie carrying the session token")
    session_max_age_days: int = Field(default=30, ge=1, le=365, description="Fixed session validity window in days")
    default_user_role: UserRole = Field(
        default=UserRole.USER,
        description="Role granted to an external identity on its first login"
    )
    
    # Database
    firestore_project_id: str = Field(..., description="Firestore project ID")
    firestore_database: str = Field(default="(default)", description="Firestore database name")
    use_firestore_emulator: bool = Field(default=False, description="Use Firestore emulator")
    firestore_emulator_host: str = Field(default="localhost:8081", description="Firestore emulator host")
    google_credentials_path: Optional[str] = Field(default=None, description="Path to Google credentials JSON file")
    storage_timeout_seconds: float = Field(default=5.0, gt=0, le=60, description="Timeout for a single storage call")
    
    # API
    api_prefix: str = Field(default="/api", description="API path prefix")
    cors_origins: str = Field(default="", description="CORS allowed origins (comma-separated)")
    base_url: str = Field(default="http://localhost:8080", description="Public base URL of this API")
    frontend_url: str = Field(default="/", description="Where the browser lands after sign-in/sign-out")
    
    # GitHub OAuth
    github_client_id: Optional[str] = Field(default=None, description="GitHub OAuth client ID")
    github_client_secret: Optional[str] = Field(default=None, description="GitHub OAuth client secret")
    github_oauth_redirect_uri: Optional[str] = Field(default=None, description="GitHub OAuth redirect URI")
    github_timeout_seconds: float = Field(default=10.0, gt=0, description="Timeout for identity provider calls")
    
    # Monitoring and logging
    log_level: str = Field(default="INFO", description="Logging level")
    
    # Server settings
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8080, ge=1, le=65535, description="Server port")
    
    def get_cors_origins_list(self) -> List[str]:
        """Split the comma-separated ``cors_origins`` value."""
        if not self.cors_origins:
            return []
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]
    
    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level
    
    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        environment = v.lower()
        if environment not in ENVIRONMENTS:
            raise ValueError(f"environment must be one of {', '.join(ENVIRONMENTS)}")
        return environment
    
    @field_validator("default_user_role", mode="before")
    @classmethod
    def normalize_default_role(cls, v):
        if isinstance(v, str):
            return v.upper()
        return v
    
    @property
    def is_development(self) -> bool:
        return self.environment == "development"
    
    @property
    def is_testing(self) -> bool:
        return self.environment == "testing"
    
    @property
    def is_production(self) -> bool:
        return self.environment == "production"
    
    @property
    def session_max_age_seconds(self) -> int:
        """Session lifetime in seconds, used for both expiry and cookie Max-Age."""
        return self.session_max_age_days * 24 * 60 * 60
    
    @property
    def github_redirect_uri(self) -> str:
        """OAuth callback URL registered with GitHub."""
        if self.github_oauth_redirect_uri:
            return self.github_oauth_redirect_uri
        return f"{self.base_url.rstrip('/')}{self.api_prefix}/auth/callback/github"
    
    @property
    def docs_url(self) -> Optional[str]:
        """Interactive docs are served in debug or development mode only."""
        return "/docs" if self.debug or self.is_development else None
    
    @property
    def openapi_url(self) -> Optional[str]:
        return "/openapi.json" if self.debug or self.is_development else None


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the process-wide settings, loading them from the environment on first use."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
