"""
Trigger outcomes: the single recorded reason a process is shutting down.
"""

import signal
from dataclasses import dataclass


@dataclass(frozen=True)
class ExplicitCode:
    """The application asked to exit with a specific status."""

    code: int


@dataclass(frozen=True)
class ReportedFailure:
    """The application reported an unrecoverable error."""

    message: str
    trace: str

    def diagnostic(self) -> str:
        """Message followed by the trace, newline-terminated."""
        text = self.message
        if self.trace:
            text += "\n" + self.trace
        return text if text.endswith("\n") else text + "\n"


@dataclass(frozen=True)
class ExternalSignal:
    """The operating environment requested termination."""

    kind: signal.Signals

    @property
    def name(self) -> str:
        return self.kind.name


TriggerOutcome = ExplicitCode | ReportedFailure | ExternalSignal
