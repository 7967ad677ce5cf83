"""Application settings.

Values come from `SERVICE_ORDERS_*` environment variables or a local `.env`.
Contact numbers are handed to the notification dispatcher; the lifecycle
engine itself never reads them.
"""

from functools import lru_cache

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class TechnicianSettings(BaseModel):
    name: str = Field(min_length=1)
    phone: str = Field(min_length=1)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SERVICE_ORDERS_",
        extra="ignore",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    boss_phone: str = Field(
        default="+584167435109",
        min_length=1,
        description="Destino de las notificaciones internas.",
    )
    support_phone: str = Field(
        default="+584167435109",
        min_length=1,
        description="Teléfono de soporte impreso en los mensajes al cliente.",
    )
    notification_workers: int = Field(
        default=4,
        ge=1,
        le=64,
        description="Hilos del despachador de notificaciones.",
    )
    default_order_prefix: str = Field(
        default="ORD",
        min_length=1,
        max_length=3,
        description="Prefijo del número de orden cuando no hay tipo de electrodoméstico.",
    )
    technicians: dict[str, TechnicianSettings] = Field(
        default_factory=dict,
        description="Técnicos conocidos por id, en JSON: {\"tech-1\": {\"name\": ..., \"phone\": ...}}.",
    )
    log_level: str = Field(default="INFO")


@lru_cache
def get_settings() -> Settings:
    return Settings()
