from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
	# Report generation (Anthropic Messages API)
	anthropic_api_key: str | None = Field(default=None, validation_alias="ANTHROPIC_API_KEY")
	anthropic_model: str = Field(default="claude-sonnet-4-20250514", validation_alias="ANTHROPIC_MODEL")
	anthropic_base_url: str = Field(default="https://api.anthropic.com/v1/messages", validation_alias="ANTHROPIC_BASE_URL")
	anthropic_version: str = Field(default="2023-06-01", validation_alias="ANTHROPIC_VERSION")
	anthropic_max_tokens: int = Field(default=2000, validation_alias="ANTHROPIC_MAX_TOKENS")

	# OpenRouter fallback configuration (optional)
	openrouter_api_key: str | None = Field(default=None, validation_alias="OPENROUTER_API_KEY")
	openrouter_model: str = Field(default="anthropic/claude-sonnet-4", validation_alias="OPENROUTER_MODEL")
	openrouter_base_url: str = Field(default="https://openrouter.ai/api/v1/chat/completions", validation_alias="OPENROUTER_BASE_URL")
	openrouter_referer: str = Field(default="https://localhost", validation_alias="OPENROUTER_HTTP_REFERER")
	openrouter_title: str = Field(default="Storefront A/B Lab", validation_alias="OPENROUTER_TITLE")

	# Admin auth
	jwt_secret_key: str = Field(default="change-me", validation_alias="JWT_SECRET_KEY")
	jwt_algorithm: str = Field(default="HS256", validation_alias="JWT_ALGORITHM")
	access_token_expire_minutes: int = Field(default=480, validation_alias="ACCESS_TOKEN_EXPIRE_MINUTES")
	# Seed admin, created at startup when both are set
	seed_admin_username: str | None = Field(default=None, validation_alias="SEED_ADMIN_USERNAME")
	seed_admin_password: str | None = Field(default=None, validation_alias="SEED_ADMIN_PASSWORD")

	# Database
	database_url: str | None = Field(default=None, validation_alias="DATABASE_URL")

	# Scoring weights; falls back to the bundled weights.json
	weights_path: str | None = Field(default=None, validation_alias="WEIGHTS_PATH")

	# Headless-browser rendering service used for submission screenshots
	screenshot_service_url: str | None = Field(default=None, validation_alias="SCREENSHOT_SERVICE_URL")
	screenshot_timeout_seconds: float = Field(default=60.0, validation_alias="SCREENSHOT_TIMEOUT_SECONDS")
	screenshots_dir: str = Field(default="./screenshots", validation_alias="SCREENSHOTS_DIR")

	log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
