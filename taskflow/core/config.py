# taskflow/core/config.py
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_ALLOWED_ENVS = {"dev", "prod", "test"}


class Settings(BaseSettings):
    # 기본 앱 설정
    # 스택 트레이스 노출은 ENV=dev 를 명시했을 때만
    env: str = Field("prod", alias="ENV")
    app_version: str = Field("1.0.0", alias="APP_VERSION")
    host: str = Field("0.0.0.0", alias="HOST")
    port: int = Field(3000, alias="PORT")
    cors_allow_origins: str = Field("*", alias="CORS_ALLOW_ORIGINS")
    db_auto_create: bool = Field(False, alias="DB_AUTO_CREATE")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    # 인증
    jwt_secret_key: str = Field("taskflow-secret-key", alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field("HS256", alias="JWT_ALGORITHM")
    access_token_expire_days: int = Field(7, alias="ACCESS_TOKEN_EXPIRE_DAYS")
    bcrypt_rounds: int = Field(12, alias="BCRYPT_ROUNDS")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @field_validator("env")
    @classmethod
    def _check_env(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in _ALLOWED_ENVS:
            allowed = "|".join(sorted(_ALLOWED_ENVS))
            raise ValueError(f"ENV must be one of {allowed}")
        return v

    @property
    def is_dev(self) -> bool:
        return self.env == "dev"

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_allow_origins.split(",") if o.strip()]


settings = Settings()
