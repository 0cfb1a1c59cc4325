"""
Base service for MentorHub.

Services own transactions; repositories only flush. Every public service
operation is wrapped in ``measure_operation`` for timing, slow-call logging
and Prometheus counters.
"""

from contextlib import contextmanager
from functools import wraps
import logging
import time
from typing import Any, Callable, Iterator, Optional, TypeVar, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import ServiceException
from ..monitoring.prometheus_metrics import prometheus_metrics

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


class BaseService:
    def __init__(self, db: Session):
        self.db = db
        self.logger = logging.getLogger(self.__class__.__name__)

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """
        Commit on success, roll back on any error.

        Domain exceptions raised inside the block propagate unchanged;
        database errors surface as ``ServiceException``.

        Usage:
            with self.transaction():
                self.repository.create(...)
        """
        try:
            yield self.db
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            self.logger.error(f"Transaction rolled back: {str(e)}")
            raise ServiceException(f"Database operation failed: {str(e)}") from e
        except Exception:
            self.db.rollback()
            raise

    @staticmethod
    def measure_operation(operation_name: str) -> Callable[[F], F]:
        """
        Time a service method and record the result.

        Usage:
            @BaseService.measure_operation("create_booking")
            def create_booking(self, ctx, payload):
                ...
        """

        def decorator(func: F) -> F:
            @wraps(func)
            def wrapper(self, *args, **kwargs):
                started = time.perf_counter()
                error_type: Optional[str] = None
                try:
                    return func(self, *args, **kwargs)
                except Exception as e:
                    error_type = type(e).__name__
                    raise
                finally:
                    elapsed = time.perf_counter() - started
                    if elapsed * 1000 > settings.slow_operation_threshold_ms:
                        self.logger.warning(
                            f"Slow operation: {operation_name} took {elapsed * 1000:.0f}ms"
                        )
                    self._record_operation(operation_name, elapsed, error_type)

            return cast(F, wrapper)

        return decorator

    def _record_operation(
        self, operation_name: str, elapsed: float, error_type: Optional[str]
    ) -> None:
        try:
            prometheus_metrics.record_service_operation(
                service=self.__class__.__name__,
                operation=operation_name,
                duration=elapsed,
                error_type=error_type,
            )
        except Exception as exc:
            # Metrics never fail the operation
            self.logger.warning(f"Failed to record metrics for {operation_name}: {exc}")

    def log_operation(self, operation: str, **context: Any) -> None:
        self.logger.info(f"Operation: {operation}", extra={"operation": operation, **context})
