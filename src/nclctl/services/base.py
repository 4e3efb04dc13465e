"""BaseService, the foundation for nclctl services.

Every service works on one :class:`Graph`, created fresh unless the caller
supplies one (tests and the ``play`` command reuse a loaded graph).
"""

from __future__ import annotations

import logging

from nclctl.domain.errors import NclError
from nclctl.infrastructure.graph.engine import Graph
from nclctl.services.result import ServiceError, ServiceResult

logger = logging.getLogger(__name__)


class BaseService:
    """Base for service-layer classes.

    Operations catch ``NclError`` (and ``OSError`` where they touch files)
    and hand it to :meth:`_failure`; anything else propagates.
    """

    def __init__(self, graph: Graph | None = None) -> None:
        self._graph = graph if graph is not None else Graph()

    @property
    def graph(self) -> Graph:
        return self._graph

    @staticmethod
    def _failure(op: str, exc: Exception, **detail: object) -> ServiceResult:
        """Error result for *exc*, which must be a core or I/O error."""
        if not isinstance(exc, NclError | OSError):
            raise exc
        logger.debug("%s failed: %s", op, exc)
        return ServiceResult(ok=False, op=op, error=ServiceError.from_exception(exc, **detail))
