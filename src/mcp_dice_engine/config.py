from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="DICE_", env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Upper bound on dice rolled by one expression, explosions and rerolls included.
    max_dice_per_roll: int = 1000

    # Chat replies longer than this are truncated with "...".
    max_message_length: int = 2000

    log_level: str = "INFO"


settings = Settings()
