import os
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
	# Accept a direct URL (supports either DATABASE_URL or database_url env vars)
	database_url: str | None = None

	DB_DRIVER: str = "postgresql+psycopg2"
	DB_HOST: str = "localhost"
	DB_USER: str = "postgres"
	DB_PASSWORD: str = "postgres"
	DB_NAME: str = "hvacdesk"
	DB_PORT: int = 5432

	SECRET_KEY: str = "secret"
	ALGORITHM: str = "HS256"
	ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 12

	LOG_LEVEL: str = "INFO"

	# Observability / Telemetry flags
	ENABLE_REQUEST_LOGGING: bool = True
	ENABLE_OUTBOUND_LOGGING: bool = True
	LOG_SAMPLE_RATE: float = 1.0

	# Photo storage: "local" writes under UPLOAD_DIR, "minio" writes to MINIO_BUCKET
	STORAGE_BACKEND: str = "local"
	UPLOAD_DIR: str = "uploads"
	PUBLIC_UPLOADS_URL: str = "/uploads"
	MAX_UPLOAD_SIZE_MB: int = 10
	REPORT_MAX_PHOTOS: int = 6

	MINIO_ENDPOINT: str = os.getenv("MINIO_ENDPOINT", "localhost:9000")
	MINIO_ACCESS_KEY: str = os.getenv("MINIO_ACCESS_KEY", "minioadmin")
	MINIO_SECRET_KEY: str = os.getenv("MINIO_SECRET_KEY", "minioadmin")
	MINIO_BUCKET: str = os.getenv("MINIO_BUCKET", "uploads")
	MINIO_SECURE: bool = os.getenv("MINIO_SECURE", "false").lower() == "true"

	# Human-facing numbering
	JOB_NUMBER_PREFIX: str = "ZL"
	INVOICE_NUMBER_PREFIX: str = "FV"
	DEFAULT_CURRENCY: str = "PLN"

	JOB_PAGE_LIMIT_MAX: int = 200
	INVOICE_PAGE_LIMIT_MAX: int = 500
	DEFAULT_PAGE_LIMIT: int = 50

	# Prefer explicit database_url if provided; otherwise assemble from parts
	@property
	def DATABASE_URL(self) -> str:
		# 1) Value from settings (supports .env and OS env via BaseSettings)
		if self.database_url and self.database_url.strip() and self.database_url.strip() != "://:@:/":
			return self.database_url.strip()
		# 2) Raw OS env (e.g., uppercase on Windows), as a fallback
		explicit_url = os.getenv("DATABASE_URL")
		if explicit_url and explicit_url.strip() and explicit_url.strip() != "://:@:/":
			return explicit_url.strip()
		# 3) Assemble from parts
		return f"{self.DB_DRIVER}://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

	# Pydantic v2 settings config
	model_config = SettingsConfigDict(
		env_file=".env",
		extra="ignore",
		case_sensitive=False,  # accept lowercase keys on Windows and in .env
	)

settings = Settings()
