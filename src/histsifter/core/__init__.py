"""Core infrastructure shared by the decoder and the command line front end."""

from .config import AppConfig, load_app_config, load_config_file  # noqa: F401
from .enums import ScanMode, TimestampFormat  # noqa: F401
