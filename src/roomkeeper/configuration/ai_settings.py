import os
from typing import Any, Dict

DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_MODEL_NAME = "mistralai/mistral-7b-instruct"
DEFAULT_FALLBACK_REPLY = "Failed to get a response from AI. Please try again later."


class AISettings:
    """Helper exposing typed accessors for the text-completion configuration.

    This class intentionally provides a minimal, explicit API (`get`,
    `as_dict`, and convenience properties) and does not implement the full
    mapping protocol.
    """

    def __init__(self, data: Dict[str, Any] | None = None) -> None:
        self.data: Dict[str, Any] = data or {}

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value for `key` or `default` if missing."""
        return self.data.get(key, default)

    def as_dict(self) -> Dict[str, Any]:
        """Return the underlying mapping (shallow copy recommended by callers)."""
        return self.data

    @property
    def enabled(self) -> bool:
        return bool(self.data.get("enabled", False))

    @property
    def base_url(self) -> str:
        return str(self.data.get("base_url") or DEFAULT_BASE_URL)

    @property
    def model_name(self) -> str:
        return str(self.data.get("model_name") or DEFAULT_MODEL_NAME)

    @property
    def api_key_env(self) -> str:
        return str(self.data.get("api_key_env") or "OPENROUTER_API_KEY")

    @property
    def api_key(self) -> str | None:
        """API key read from the environment variable named by ``api_key_env``."""
        return os.getenv(self.api_key_env) or self.data.get("api_key") or None

    @property
    def fallback_reply(self) -> str:
        return str(self.data.get("fallback_reply") or DEFAULT_FALLBACK_REPLY)

    @property
    def max_tokens(self) -> int | None:
        val = self.data.get("max_tokens")
        return int(val) if val else None
