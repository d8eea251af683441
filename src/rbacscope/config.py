"""Runtime configuration for rbacscope.

Settings are read from environment variables; command-line options take
precedence over them.

Environment Variables:
    RBACSCOPE_KUBECONFIG: Path to a kubeconfig file (default: in-cluster,
        then ~/.kube/config).
    RBACSCOPE_CONTEXT: kubeconfig context to use.
    RBACSCOPE_POLICY_FILE: Path to the YAML access policy.
    RBACSCOPE_LOG_LEVEL: Minimum log level (default: INFO).
    RBACSCOPE_LOG_JSON: Emit JSON logs when true (default: false).
    RBACSCOPE_REQUEST_TIMEOUT: Timeout in seconds for each listing call
        against the cluster API (default: 30).

Example:
    >>> from rbacscope.config import load_config
    >>> config = load_config({"RBACSCOPE_LOG_LEVEL": "debug"})
    >>> config.log_level
    'DEBUG'
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from rbacscope.errors import ConfigurationError

ENV_PREFIX = "RBACSCOPE_"
DEFAULT_REQUEST_TIMEOUT = 30.0

_TRUE_VALUES = frozenset({"true", "1", "yes", "on"})

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class RBACScopeConfig(BaseModel):
    """Resolved runtime settings.

    Attributes:
        kubeconfig: kubeconfig file, or None for in-cluster/default loading.
        context: kubeconfig context name.
        policy_file: YAML access policy file, or None for an empty policy.
        log_level: Minimum log level.
        log_json: Whether to render logs as JSON.
        request_timeout: Per-call timeout for cluster listing, in seconds.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kubeconfig: Path | None = Field(default=None, description="kubeconfig path")
    context: str | None = Field(default=None, description="kubeconfig context")
    policy_file: Path | None = Field(default=None, description="Access policy path")
    log_level: LogLevel = Field(default="INFO", description="Minimum log level")
    log_json: bool = Field(default=False, description="Render logs as JSON")
    request_timeout: float = Field(
        default=DEFAULT_REQUEST_TIMEOUT,
        gt=0,
        description="Timeout for each cluster listing call, in seconds",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value

    def merged(self, **overrides: Any) -> RBACScopeConfig:
        """Return a copy with the non-None overrides applied."""
        updates = {k: v for k, v in overrides.items() if v is not None}
        if not updates:
            return self
        return RBACScopeConfig(**{**self.model_dump(), **updates})


def load_config(environ: Mapping[str, str] | None = None) -> RBACScopeConfig:
    """Build the configuration from environment variables.

    Args:
        environ: Mapping to read from; defaults to ``os.environ``.

    Returns:
        Validated configuration.

    Raises:
        ConfigurationError: If a variable holds an invalid value.
    """
    env = os.environ if environ is None else environ

    def _get(name: str) -> str | None:
        value = env.get(f"{ENV_PREFIX}{name}", "").strip()
        return value or None

    values: dict[str, Any] = {
        "kubeconfig": _get("KUBECONFIG"),
        "context": _get("CONTEXT"),
        "policy_file": _get("POLICY_FILE"),
        "log_level": _get("LOG_LEVEL"),
        "request_timeout": _get("REQUEST_TIMEOUT"),
    }
    log_json = _get("LOG_JSON")
    if log_json is not None:
        values["log_json"] = log_json.lower() in _TRUE_VALUES

    try:
        return RBACScopeConfig(**{k: v for k, v in values.items() if v is not None})
    except ValidationError as e:
        fields = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
        raise ConfigurationError(
            "Invalid rbacscope configuration",
            {"fields": ", ".join(fields)},
        ) from e


__all__ = [
    "DEFAULT_REQUEST_TIMEOUT",
    "ENV_PREFIX",
    "RBACScopeConfig",
    "load_config",
]
