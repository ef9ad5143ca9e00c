"""
procexit - graceful shutdown coordination for long-running Python services.
"""

from .config import DEFAULTS, Config
from .dot_dict import DotDict
from .exceptions import (
    ApplicationExiting,
    ConfigError,
    CoordinatorError,
    DrainUnderflowError,
    ProcExitError,
)
from .lifecycle import (
    EXIT_FAILURE,
    EXIT_SIGNAL,
    Coordinator,
    DoneHandle,
    ExplicitCode,
    ExternalSignal,
    LifecycleConfig,
    ReportedFailure,
    TriggerOutcome,
)
from .log import LogConfig, Logger, LoggerFactory
from .version import package_version

__version__ = package_version()

__all__ = [
    "__version__",
    # Coordinator
    "Coordinator",
    "DoneHandle",
    "LifecycleConfig",
    "TriggerOutcome",
    "ExplicitCode",
    "ReportedFailure",
    "ExternalSignal",
    "EXIT_FAILURE",
    "EXIT_SIGNAL",
    # Config
    "Config",
    "DEFAULTS",
    "DotDict",
    # Logging
    "LogConfig",
    "Logger",
    "LoggerFactory",
    # Exceptions
    "ProcExitError",
    "ConfigError",
    "CoordinatorError",
    "DrainUnderflowError",
    "ApplicationExiting",
]
