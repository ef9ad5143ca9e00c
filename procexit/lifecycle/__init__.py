"""
Process lifecycle and graceful shutdown.
"""

from .cancel import CancellationSignal, DoneHandle
from .config import LifecycleConfig
from .coordinator import Coordinator
from .drain import DrainBarrier
from .escalation import DEFAULT_SIGNALS, EscalationState, EscalationWatcher
from .outcome import ExplicitCode, ExternalSignal, ReportedFailure, TriggerOutcome
from .registry import TriggerRegistry
from .resolver import EXIT_FAILURE, EXIT_SIGNAL, ExitResolver, resolve_status

__all__ = [
    "CancellationSignal",
    "Coordinator",
    "DEFAULT_SIGNALS",
    "DoneHandle",
    "DrainBarrier",
    "EXIT_FAILURE",
    "EXIT_SIGNAL",
    "EscalationState",
    "EscalationWatcher",
    "ExitResolver",
    "ExplicitCode",
    "ExternalSignal",
    "LifecycleConfig",
    "ReportedFailure",
    "TriggerOutcome",
    "TriggerRegistry",
    "resolve_status",
]
