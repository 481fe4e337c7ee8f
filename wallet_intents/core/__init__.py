from wallet_intents.core.config import Settings, settings
from wallet_intents.core.logging import setup_logging

__all__ = ["Settings", "settings", "setup_logging"]
