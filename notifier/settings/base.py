import os
from typing import Dict

from notifier.emitter.emitters import EMITTERS

RECURSIVE_RULES = ("warn", "error", "off")
DUPLICATE_POLICIES = ("return", "error")

_TRUTHY = {"1", "true", "yes", "on"}


class Settings:
    """Signal defaults read from the environment."""

    def __init__(self) -> None:
        self.environment = os.environ.get("NOTIFIER_ENV", "base")
        self.log_level = os.environ.get("LOG_LEVEL", "INFO").upper()

        self.recursive_rule = os.environ.get("NOTIFIER_RECURSIVE_RULE", "warn").lower()
        self.duplicate_policy = os.environ.get("NOTIFIER_DUPLICATE_POLICY", "return").lower()
        self.default_emitter = os.environ.get("NOTIFIER_DEFAULT_EMITTER", "serial").lower()
        self.replay = os.environ.get("NOTIFIER_REPLAY", "").strip().lower() in _TRUTHY

    def validate(self) -> Dict[str, str]:
        """Validate configuration and return any errors."""
        errors = {}

        if self.recursive_rule not in RECURSIVE_RULES:
            errors["recursive_rule"] = (
                f"NOTIFIER_RECURSIVE_RULE must be one of {', '.join(RECURSIVE_RULES)}, "
                f"got '{self.recursive_rule}'"
            )

        if self.duplicate_policy not in DUPLICATE_POLICIES:
            errors["duplicate_policy"] = (
                f"NOTIFIER_DUPLICATE_POLICY must be one of {', '.join(DUPLICATE_POLICIES)}, "
                f"got '{self.duplicate_policy}'"
            )

        if self.default_emitter not in EMITTERS:
            errors["default_emitter"] = (
                f"NOTIFIER_DEFAULT_EMITTER must be one of {', '.join(sorted(EMITTERS))}, "
                f"got '{self.default_emitter}'"
            )

        return errors


settings = Settings()
