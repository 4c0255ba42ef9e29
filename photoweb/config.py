from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_DIR = Path(__file__).parent


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Photoweb"
    debug: bool = False
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = Field(default=8080, ge=1, le=65535)
    upload_dir: str = "uploads"
    views_dir: str = str(PACKAGE_DIR / "views")
    static_dir: str = str(PACKAGE_DIR / "public")
    chunk_size: int = Field(default=64 * 1024, ge=1)

    @property
    def upload_path(self) -> Path:
        return Path(self.upload_dir)

    @property
    def views_path(self) -> Path:
        return Path(self.views_dir)

    @property
    def static_path(self) -> Path:
        return Path(self.static_dir)


settings = Settings()
