"""
Run context shared by the components of one generator run.

Holds the diagnostic call log and the accumulated warnings so that no
component keeps process-wide mutable state.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import uuid4


@dataclass(frozen=True)
class CallRecord:
    """
    One attempt of a remote API call.

    Attributes:
        scope: API scope.
        method: Remote method name.
        mode: Body encoding, ``json`` or ``form``.
        status_code: HTTP status, 0 when no response was received.
        transport_error: Transport failure description, empty on success.
        duration_seconds: Wall time of the attempt.
    """
    scope: str
    method: str
    mode: str
    status_code: int
    transport_error: str = ""
    duration_seconds: float = 0.0

    @property
    def success(self) -> bool:
        """A response arrived and the server did not fail."""
        return not self.transport_error and self.status_code < 500


@dataclass
class RunContext:
    """
    State accumulated during one run.

    Attributes:
        run_id: Identifier of the run, used in logs.
        started_at: Run start time (UTC).
        call_log: Every API call attempt, in issue order.
        warnings: Human-readable ``"{context}: {message}"`` strings.
    """
    run_id: str = field(default_factory=lambda: uuid4().hex[:12])
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    call_log: list[CallRecord] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def record_call(self, record: CallRecord) -> None:
        """Append an attempt to the call log."""
        self.call_log.append(record)

    def add_warning(self, context: str, message: str) -> str:
        """
        Append a warning.

        Args:
            context: Where the failure happened (e.g. ``product_12_details``).
            message: Error message.

        Returns:
            The formatted warning.
        """
        warning = f"{context}: {message}"
        self.warnings.append(warning)
        return warning

    def failed_calls(self) -> list[CallRecord]:
        """Return attempts that did not succeed."""
        return [record for record in self.call_log if not record.success]
