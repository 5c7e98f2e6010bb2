"""Runtime configuration for Chimera progression."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven runtime settings."""

    model_config = SettingsConfigDict(env_prefix="CHIMERA_", env_file=".env", extra="ignore")

    app_name: str = "chimera-progression"
    log_level: str = "INFO"
    state_path: str = Field(
        default="chimera_state.json",
        description="JSON file the CLI loads the player state from and saves it back to.",
    )
    player_name: str = "Chimera Player"
    rng_seed: int | None = Field(
        default=None,
        description="Seed for loot rolls; leave unset for non-deterministic chests.",
    )
    notifications_enabled: bool = True


settings = Settings()
