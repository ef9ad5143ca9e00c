"""
Lifecycle section of the procexit configuration.

    lifecycle:
      signals: [SIGINT, SIGTERM]
"""

from __future__ import annotations

import signal
from dataclasses import dataclass
from typing import Any

from ..exceptions import ConfigError
from .escalation import DEFAULT_SIGNALS


def _resolve_signal(value: Any) -> signal.Signals:
    """Resolve "SIGTERM", "term", 15 or a Signals member."""
    if isinstance(value, signal.Signals):
        return value
    if isinstance(value, int):
        try:
            return signal.Signals(value)
        except ValueError:
            raise ConfigError("unknown signal number", signal=value) from None
    if isinstance(value, str):
        name = value.strip().upper()
        if not name.startswith("SIG"):
            name = "SIG" + name
        try:
            return signal.Signals[name]
        except KeyError:
            raise ConfigError("unknown signal name", signal=value) from None
    raise ConfigError("invalid signal value", signal=repr(value))


@dataclass(frozen=True)
class LifecycleConfig:
    """Resolved lifecycle settings."""

    signals: tuple[signal.Signals, ...] = DEFAULT_SIGNALS

    @classmethod
    def from_config(cls, config: Any, section: str = "lifecycle") -> LifecycleConfig:
        """
        Build from a Config (or plain dict) section.

        Raises:
            ConfigError: On unknown signals or an empty signal list
        """
        data = config.to_dict() if hasattr(config, "to_dict") else dict(config)
        for part in section.split("."):
            data = data.get(part) if isinstance(data, dict) else None
            if data is None:
                data = {}
        if not isinstance(data, dict):
            raise ConfigError("config section must be a mapping", section=section)

        raw = data.get("signals", [s.name for s in DEFAULT_SIGNALS])
        if raw is None:
            raw = []
        if isinstance(raw, (str, int)):
            raw = [raw]

        signals = tuple(dict.fromkeys(_resolve_signal(v) for v in raw))
        if not signals:
            raise ConfigError("lifecycle.signals must name at least one signal")
        return cls(signals=signals)
