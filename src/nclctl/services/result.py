"""ServiceResult and ServiceError, the service contract.

INVARIANT: All service-layer methods return ServiceResult.

``data`` stays a plain mapping so results serialise as-is, but the shared
pieces of the ``compile``, ``inspect`` and ``play`` payloads are described
by the TypedDicts below.
"""

from __future__ import annotations

from typing import Any, TypedDict

from pydantic import BaseModel, Field

from nclctl.domain.errors import NclError

IO_ERROR = "IO_ERROR"


class Counts(TypedDict):
    components: int
    vertices: int
    edges: int
    labels: int


class WireState(TypedDict):
    edge: str
    active: bool


class CircuitSummary(TypedDict):
    """The ``circuit`` payload of ``compile``, and of ``inspect``/``play`` on a QBF."""

    qbf: str
    prefix: str
    formula: str
    variables: list[str]
    quantifiers: list[str]
    target: str
    probes: dict[str, WireState]
    solved: bool


# "from" is a keyword, hence the functional form.
MoveRecord = TypedDict("MoveRecord", {"edge": str, "kept": bool, "from": str, "to": str})


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_exception(cls, exc: NclError | OSError, **detail: object) -> ServiceError:
        """Error payload for a core or I/O failure; *detail* values are stringified."""
        code = exc.code if isinstance(exc, NclError) else IO_ERROR
        return cls(
            code=code,
            message=str(exc),
            detail={key: str(value) for key, value in detail.items()},
        )


class ServiceResult(BaseModel):
    """Return type for all service operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: ``"compile"``, ``"inspect"`` or ``"play"``.
        data: Operation payload on success. Every op reports ``unsatisfied``.
        warnings: Entries the lenient loader skipped.
        error: Structured error if ``ok`` is False.
        meta: Telemetry span tree under ``"telemetry"`` when enabled.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

    @property
    def unsatisfied(self) -> list[str]:
        """Ids of the vertices failing their constraint after the operation."""
        return list(self.data.get("unsatisfied", []))
