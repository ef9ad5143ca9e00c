"""
Version and build information.

setup.py writes _build_info.py into the built package; source checkouts and
editable installs have none.
"""

import importlib
import importlib.util
from importlib.metadata import PackageNotFoundError, version


def package_version() -> str:
    try:
        return version("procexit")
    except PackageNotFoundError:
        return "0.1.0-dev"


def build_info() -> dict[str, str] | None:
    """Commit hash, short hash and build time recorded at build, if any."""
    module_name = f"{__package__}._build_info"
    if importlib.util.find_spec(module_name) is None:
        return None
    module = importlib.import_module(module_name)
    commit = getattr(module, "COMMIT_HASH", None)
    if not commit:
        return None
    return {
        "commit": commit,
        "commit_short": getattr(module, "COMMIT_SHORT", commit[:7]),
        "build_time": getattr(module, "BUILD_TIME", ""),
    }


def version_str() -> str:
    info = build_info()
    text = f"procexit {package_version()}"
    if info:
        text += f" ({info['commit_short']}, built {info['build_time']})"
    return text
