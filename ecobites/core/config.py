# ecobites/core/config.py
from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    # Storage
    use_mongo: bool = False
    mongo_uri: str = "mongodb://localhost:27017"
    mongo_db: str = "ecobites"

    # Auth
    jwt_secret: str = "dev-secret-change-me-0123456789abcdef"
    jwt_alg: str = "HS256"
    access_ttl_min: int = 7 * 24 * 60

    # HTTP
    port: int = 6001
    cors_origin: str = "http://localhost:5173"
    uploads_dir: str = "uploads"

    # Geocoding (Nominatim compatible)
    geocoder_url: str = "https://nominatim.openstreetmap.org"
    geocoder_user_agent: str = "Ecobites/1.0 (+mailto:admin@example.com)"
    geocode_timeout: float = 10.0

    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
