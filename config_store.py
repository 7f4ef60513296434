# config_store.py
import hashlib
import hmac
import json
import logging
import os
from dataclasses import replace
from pathlib import Path
from typing import Any, Mapping, Optional

from pricing_config import PricingConfig, default_config

logger = logging.getLogger(__name__)

PRICING_CONFIG_PATH = os.environ.get("PRICING_CONFIG_PATH", "")
CONTROL_PANEL_PASSWORD_SHA256 = os.environ.get("CONTROL_PANEL_PASSWORD_SHA256", "")


class AuthorizationError(Exception):
    pass


class ConfigStore:
    """
    Holds the live PricingConfig snapshot for the control panel.

    Reads are not locked: a quote racing an update prices with whichever
    snapshot it picked up.
    """

    def __init__(self, initial: Optional[PricingConfig] = None, path: Optional[str] = None,
                 password_digest: Optional[str] = None):
        self._path = Path(path) if path else None
        config = initial or self._load() or default_config()
        if password_digest:
            config = replace(config, auth_secret_digest=password_digest.lower())
        self._config = config

    def _load(self) -> Optional[PricingConfig]:
        if not self._path or not self._path.exists():
            return None
        with open(self._path, "r", encoding="utf-8") as f:
            data = json.load(f)
        logger.info("Loaded pricing config from %s", self._path)
        return PricingConfig.from_dict(data)

    def _save(self) -> None:
        if not self._path:
            return
        with open(self._path, "w", encoding="utf-8") as f:
            json.dump(self._config.to_dict(), f, indent=2)

    def current(self) -> PricingConfig:
        return self._config

    def verify_password(self, password: Optional[str]) -> bool:
        if not password:
            return False
        digest = hashlib.sha256(password.encode("utf-8")).hexdigest()
        return hmac.compare_digest(digest, self._config.auth_secret_digest)

    def update(self, password: Optional[str], updates: Mapping[str, Any]) -> PricingConfig:
        if not self.verify_password(password):
            logger.warning("Rejected pricing config update: bad password")
            raise AuthorizationError("Invalid password")

        levers = dict(updates)
        if "auth_secret_digest" in levers or "passwordHash" in levers:
            raise ValueError("password digest cannot be changed from the control panel")

        self._config = self._config.updated(levers)
        logger.info("Pricing config updated: %s", ", ".join(sorted(levers)) or "(no changes)")
        self._save()
        return self._config


def build_store() -> ConfigStore:
    return ConfigStore(
        path=PRICING_CONFIG_PATH or None,
        password_digest=CONTROL_PANEL_PASSWORD_SHA256 or None,
    )
