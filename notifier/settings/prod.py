import os

from notifier.settings.base import Settings


class ProdSettings(Settings):
    """Production overrides: recursion is logged, never raised."""

    def __init__(self) -> None:
        super().__init__()
        self.environment = "prod"
        self.log_level = os.environ.get("LOG_LEVEL", "WARNING").upper()
        if self.recursive_rule == "error":
            self.recursive_rule = "warn"


settings = ProdSettings()
