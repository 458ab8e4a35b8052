"""Shared flowstate configuration utilities.

Reads the optional ~/.flowstate/configuration.json (or the file named by
FLOWSTATE_CONFIG) plus a handful of environment overrides, so the executor
and every template agent share one implementation.

Example configuration.json:

    {
      "llm": {"provider": "anthropic", "model": "claude-3-5-sonnet-20241022",
              "api_key_env_var": "ANTHROPIC_API_KEY"},
      "run": {"max_steps": 50, "poll_interval_ms": 5000, "node_timeout": null}
    }
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "anthropic/claude-3-5-sonnet-20241022"
DEFAULT_MAX_TOKENS = 1024
DEFAULT_MAX_STEPS = 100
DEFAULT_POLL_INTERVAL = 5.0  # seconds

# ---------------------------------------------------------------------------
# Low-level config file access
# ---------------------------------------------------------------------------


def get_config_path() -> Path:
    override = os.environ.get("FLOWSTATE_CONFIG")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".flowstate" / "configuration.json"


def get_flowstate_config() -> dict[str, Any]:
    """Load configuration; a missing or malformed file means "all defaults"."""
    path = get_config_path()
    if not path.exists():
        return {}
    try:
        with open(path, encoding="utf-8-sig") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Ignoring unreadable config {path}: {e}")
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Ignoring config {path}: expected a JSON object")
        return {}
    return data


def _section(name: str) -> dict[str, Any]:
    """One top-level block of the config file; anything but an object counts as empty."""
    value = get_flowstate_config().get(name, {})
    if not isinstance(value, dict):
        logger.warning(f"Ignoring config section '{name}': expected a JSON object")
        return {}
    return value


def _env_int(name: str) -> int | None:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring non-integer {name}={raw!r}")
        return None


# ---------------------------------------------------------------------------
# Derived helpers
# ---------------------------------------------------------------------------


def get_preferred_model() -> str:
    """Return the preferred model string in litellm form (e.g. 'anthropic/claude-...')."""
    llm = _section("llm")
    if llm.get("provider") and llm.get("model"):
        return f"{llm['provider']}/{llm['model']}"
    return os.environ.get("FLOWSTATE_MODEL", DEFAULT_MODEL)


def get_max_tokens() -> int:
    value = _section("llm").get("max_tokens", DEFAULT_MAX_TOKENS)
    return value if isinstance(value, int) and value > 0 else DEFAULT_MAX_TOKENS


def get_api_key() -> str | None:
    """Return the API key from the environment variable named in configuration."""
    llm = _section("llm")
    api_key_env_var = llm.get("api_key_env_var")
    if api_key_env_var:
        return os.environ.get(api_key_env_var)
    return None


def get_max_steps() -> int:
    env = _env_int("FLOWSTATE_MAX_STEPS")
    if env is not None and env > 0:
        return env
    value = _section("run").get("max_steps", DEFAULT_MAX_STEPS)
    return value if isinstance(value, int) and value > 0 else DEFAULT_MAX_STEPS


def get_poll_interval() -> float:
    """Poll interval in seconds; POLL_INTERVAL_MS wins over the config file."""
    env = _env_int("POLL_INTERVAL_MS")
    if env is not None and env > 0:
        return env / 1000
    value = _section("run").get("poll_interval_ms")
    if isinstance(value, (int, float)) and value > 0:
        return value / 1000
    return DEFAULT_POLL_INTERVAL


def get_node_timeout() -> float | None:
    value = _section("run").get("node_timeout")
    if isinstance(value, (int, float)) and value > 0:
        return float(value)
    return None


def get_demo_mode() -> bool:
    """DEMO_MODE is on unless explicitly set to 'false'."""
    return os.environ.get("DEMO_MODE", "").strip().lower() != "false"


# ---------------------------------------------------------------------------
# RuntimeConfig – LLM settings shared across templates
# ---------------------------------------------------------------------------


@dataclass
class RuntimeConfig:
    """Model settings loaded from configuration.json."""

    model: str = field(default_factory=get_preferred_model)
    temperature: float = 0.0
    max_tokens: int = field(default_factory=get_max_tokens)
    api_key: str | None = field(default_factory=get_api_key)
    api_base: str | None = None


# ---------------------------------------------------------------------------
# RunConfig – executor limits
# ---------------------------------------------------------------------------


@dataclass
class RunConfig:
    """Limits and timings for one graph invocation."""

    max_steps: int = field(default_factory=get_max_steps)
    node_timeout: float | None = field(default_factory=get_node_timeout)
    poll_interval: float = field(default_factory=get_poll_interval)
    demo_mode: bool = field(default_factory=get_demo_mode)

    def __post_init__(self) -> None:
        if self.max_steps < 1:
            raise ValueError("max_steps must be at least 1")
        if self.node_timeout is not None and self.node_timeout <= 0:
            raise ValueError("node_timeout must be positive or None")
        if self.poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
