"""
Dictionary-like object with attribute access and dotted-path lookup.
"""

import builtins
from collections.abc import ItemsView, KeysView
from typing import Any


class DotDict:
    """
    Dictionary-like object with attribute-style access and nested structure support.

    Nested dictionaries become DotDict instances, so configuration can be read
    as ``config.lifecycle.signals`` or ``config.get("lifecycle.signals")``.
    Attributes starting with an underscore are private and never exported.
    """

    # Keys that would shadow methods and are not allowed
    _RESERVED_KEYS = frozenset({"set", "clear", "dict", "to_dict", "get", "has"})

    def __init__(self, **kwargs: Any) -> None:
        self.set(**kwargs)

    def set(self, **kwargs: Any) -> "DotDict":
        """
        Set multiple key-value pairs, with automatic nested object creation.

        Returns:
            self: For method chaining
        """
        for key, val in kwargs.items():
            self._set_item(key, val)
        return self

    def _set_item(self, key: Any, val: Any) -> None:
        if not isinstance(key, str):
            key = str(key)

        if key in self._RESERVED_KEYS:
            raise ValueError(
                f"Key '{key}' is reserved and cannot be used (would shadow method)"
            )

        if isinstance(val, dict):
            setattr(self, key, DotDict(**val))
        elif isinstance(val, list):
            setattr(self, key, [DotDict(**v) if isinstance(v, dict) else v for v in val])
        else:
            setattr(self, key, val)

    def _public_items(self) -> list[tuple[str, Any]]:
        return [(k, v) for k, v in self.__dict__.items() if not k.startswith("_")]

    def clear(self) -> None:
        """Clear all public attributes."""
        for k, _ in self._public_items():
            delattr(self, k)

    def dict(self) -> dict[str, Any]:
        """Shallow conversion; nested DotDicts become dicts."""
        return {
            k: v.dict() if isinstance(v, DotDict) else v for k, v in self._public_items()
        }

    def to_dict(self) -> builtins.dict[str, Any]:
        """Recursively convert to plain dicts, including DotDicts inside lists."""
        result: builtins.dict[str, Any] = {}
        for key, val in self._public_items():
            if isinstance(val, DotDict):
                result[key] = val.to_dict()
            elif isinstance(val, list):
                result[key] = [
                    item.to_dict() if isinstance(item, DotDict) else item for item in val
                ]
            else:
                result[key] = val
        return result

    def keys(self) -> KeysView[str]:
        return dict(self._public_items()).keys()

    def items(self) -> ItemsView[str, Any]:
        return dict(self._public_items()).items()

    def __contains__(self, key: Any) -> bool:
        return isinstance(key, str) and not key.startswith("_") and key in self.__dict__

    def __getitem__(self, key: str) -> Any:
        return getattr(self, key) if key in self else None

    def __setitem__(self, key: str, val: Any) -> None:
        self._set_item(key, val)

    def __len__(self) -> int:
        return len(self._public_items())

    def __str__(self) -> str:
        return str(self.dict())

    def has(self, path: str) -> bool:
        """Check if a dot-separated path exists (e.g., "logging.level")."""
        sentinel = object()
        return self.get(path, sentinel) is not sentinel

    def get(self, path: str, default: Any = None) -> Any:
        """
        Get value by dot-separated path.

        Follows dict.get() semantics: returns default if the path is not found.
        """
        cur: Any = self
        for item in (p for p in path.split(".") if p):
            if not isinstance(cur, DotDict) or item not in cur:
                return default
            cur = cur.__dict__[item]
        return default if cur is self else cur
