"""Runtime configuration loaded from environment variables."""
from __future__ import annotations

from dataclasses import dataclass
import os

DEFAULT_BASE_URL = "https://api.api-ninjas.com"
DEFAULT_SYMBOLS = ("BTCUSDT", "ETHUSDT", "SOLUSDT", "DOGEUSDT", "BNBUSDT")
DEFAULT_TIMEOUT_SEC = 10.0
DEFAULT_LOG_LEVEL = "INFO"

LIST_POLICY_BEST_EFFORT = "best-effort"
LIST_POLICY_FAIL_FAST = "fail-fast"
_LIST_POLICIES = (LIST_POLICY_BEST_EFFORT, LIST_POLICY_FAIL_FAST)

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


class ConfigError(ValueError):
    """Raised when an environment variable holds an unusable value."""


@dataclass(frozen=True)
class BoardConfig:
    api_key: str | None
    base_url: str
    symbols: tuple[str, ...]
    timeout_sec: float
    list_policy: str
    strict_prices: bool
    stale_guard: bool
    log_level: str
    log_file: str | None

    @property
    def fail_fast(self) -> bool:
        return self.list_policy == LIST_POLICY_FAIL_FAST


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigError(f"{name} must be a boolean flag, got {raw!r}")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {raw!r}")
    return value


def _parse_symbols(raw: str | None) -> tuple[str, ...]:
    if raw is None or not raw.strip():
        return DEFAULT_SYMBOLS
    seen: list[str] = []
    for part in raw.split(","):
        symbol = part.strip().upper()
        if symbol and symbol not in seen:
            seen.append(symbol)
    if not seen:
        raise ConfigError(f"CRYPTOBOARD_SYMBOLS holds no symbols: {raw!r}")
    return tuple(seen)


def load_config() -> BoardConfig:
    """Load config from environment; the API key is never defaulted."""
    list_policy = (os.getenv("CRYPTOBOARD_LIST_POLICY") or LIST_POLICY_BEST_EFFORT).strip().lower()
    if list_policy not in _LIST_POLICIES:
        raise ConfigError(
            f"CRYPTOBOARD_LIST_POLICY must be one of {', '.join(_LIST_POLICIES)}, got {list_policy!r}"
        )
    return BoardConfig(
        api_key=(os.getenv("CRYPTOBOARD_API_KEY") or "").strip() or None,
        base_url=(os.getenv("CRYPTOBOARD_BASE_URL") or DEFAULT_BASE_URL).rstrip("/"),
        symbols=_parse_symbols(os.getenv("CRYPTOBOARD_SYMBOLS")),
        timeout_sec=_env_float("CRYPTOBOARD_TIMEOUT_SEC", DEFAULT_TIMEOUT_SEC),
        list_policy=list_policy,
        strict_prices=_env_flag("CRYPTOBOARD_STRICT_PRICES", False),
        stale_guard=_env_flag("CRYPTOBOARD_STALE_GUARD", True),
        log_level=(os.getenv("CRYPTOBOARD_LOG_LEVEL") or DEFAULT_LOG_LEVEL).strip().upper(),
        log_file=os.getenv("CRYPTOBOARD_LOG_FILE") or None,
    )
