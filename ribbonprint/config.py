import logging

from pydantic_settings import BaseSettings

from ribbonprint.models.gfx import GfxConfig


class Settings(BaseSettings):
    """Application settings."""

    # Graphics defaults
    h_dpi: int = 72
    v_dpi: int = 72
    h_pos: int = 0
    return_to_top: bool = False

    # Printer output (serial parameters are configured outside this service)
    device_path: str = "/dev/ttyUSB0"
    max_upload_size: int = 4 * 1024 * 1024  # 4MB

    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_prefix = "RIBBONPRINT_"
        extra = "ignore"

    def gfx_config(self, **overrides) -> GfxConfig:
        """Build a rendering configuration from these settings.

        Args:
            **overrides: Field values replacing the configured defaults; None is ignored

        Returns:
            GfxConfig instance

        Raises:
            pydantic.ValidationError: If a value is not supported by the printer
        """
        values = {
            "h_dpi": self.h_dpi,
            "v_dpi": self.v_dpi,
            "h_pos": self.h_pos,
            "return_to_top": self.return_to_top,
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return GfxConfig(**values)


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get application settings.

    Returns:
        Settings instance
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def configure_logging() -> None:
    """Configure root logging from the application settings."""
    logging.basicConfig(
        level=get_settings().log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
