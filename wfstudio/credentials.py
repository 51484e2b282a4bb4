"""
Local credential store.

Provider API keys live in a small JSON file on the user's machine. They are
read by the execution client at dispatch time and merged into the config of
that one request; the graph and saved workflows never hold them.
"""
import json
import logging
import os
from abc import ABC, abstractmethod
from typing import Dict, Mapping, Optional

logger = logging.getLogger(__name__)

# Provider key in the store -> key the executor reads from `config`.
PROVIDER_CONFIG_KEYS: Dict[str, str] = {
    "openai": "openai_api_key",
    "gemini": "gemini_api_key",
    "anthropic": "anthropic_api_key",
}


def secrets_to_config(secrets: Mapping[str, str]) -> Dict[str, str]:
    """Translate stored provider keys to executor config keys, skipping blanks."""
    config: Dict[str, str] = {}
    for provider, config_key in PROVIDER_CONFIG_KEYS.items():
        value = secrets.get(provider)
        if value:
            config[config_key] = value
    return config


class SecretProvider(ABC):
    """Source of provider credentials handed to the execution client."""

    @abstractmethod
    def get_secrets(self) -> Dict[str, str]:
        """Return the current provider -> secret mapping."""
        pass


class StaticSecretProvider(SecretProvider):
    def __init__(self, secrets: Optional[Mapping[str, str]] = None):
        self._secrets = dict(secrets or {})

    def get_secrets(self) -> Dict[str, str]:
        return dict(self._secrets)


class CredentialStore(SecretProvider):
    """
    Scoped key -> string store persisted as JSON.

    Only the known provider keys are accepted. With `path=None` the store
    lives in memory only.
    """

    def __init__(self, path: Optional[str] = None):
        self.path = os.path.expanduser(path) if path else None
        self._values: Dict[str, str] = {key: "" for key in PROVIDER_CONFIG_KEYS}
        if self.path and os.path.exists(self.path):
            self.load()

    def load(self) -> None:
        with open(self.path, "r", encoding="utf-8") as f:
            raw = json.load(f)
        if not isinstance(raw, dict):
            raise ValueError(f"Credential file {self.path} must hold a JSON object")
        for key, value in raw.items():
            if key in self._values:
                self._values[key] = str(value or "")
        logger.debug("Loaded credentials from %s", self.path)

    def save(self) -> None:
        if not self.path:
            return
        os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(self._values, f, indent=2)
        logger.debug("Saved credentials to %s", self.path)

    def get(self, key: str) -> str:
        self._check_key(key)
        return self._values[key]

    def set(self, key: str, value: str) -> None:
        self._check_key(key)
        self._values[key] = value

    def update(self, values: Mapping[str, str]) -> None:
        for key in values:
            self._check_key(key)
        self._values.update(values)

    def clear(self) -> None:
        self._values = {key: "" for key in PROVIDER_CONFIG_KEYS}

    def get_secrets(self) -> Dict[str, str]:
        return {k: v for k, v in self._values.items() if v}

    def _check_key(self, key: str) -> None:
        if key not in PROVIDER_CONFIG_KEYS:
            raise KeyError(f"Unknown credential scope: {key}")
