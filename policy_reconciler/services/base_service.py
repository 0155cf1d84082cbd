"""Template for services that run one operation with uniform error handling."""

from abc import ABC, abstractmethod
from typing import Any, Optional

from policy_reconciler.core.exceptions import AppError, ValidationError
from policy_reconciler.repositories.base_repository import BaseRepository
from policy_reconciler.utils.logging import get_logger

LOGGER = get_logger(__name__)


class BaseService(ABC):
    """Base class for services with a single main operation.

    Subclasses implement run() and optionally validate(); callers go through
    execute(), which guarantees that only AppError subclasses escape.

    Attributes:
        repository: Primary repository of the service, if any
        operation: Name used in logs and wrapped error messages
    """

    operation: str = "operation"

    def __init__(self, repository: Optional[BaseRepository] = None):
        self.repository = repository
        self.logger = LOGGER

    async def execute(self, *args, **kwargs) -> Any:
        """Validate the input, then run the operation.

        Raises:
            ValidationError: If validate() rejects the input
            AppError: Domain errors propagate unchanged; anything else is wrapped
        """
        service = self.__class__.__name__

        try:
            self.validate(*args, **kwargs)
        except ValidationError as e:
            self.logger.warning(
                f"{self.operation} rejected: {str(e)}",
                extra={"service": service},
            )
            raise

        try:
            return await self.run(*args, **kwargs)
        except AppError:
            raise
        except Exception as e:
            self.logger.error(
                f"{self.operation} failed unexpectedly: {str(e)}",
                exc_info=True,
                extra={"service": service},
            )
            raise AppError(f"{self.operation} failed: {str(e)}", original_error=e)

    def validate(self, *args, **kwargs) -> None:
        """Check preconditions on the input. Does nothing unless overridden."""

    @abstractmethod
    async def run(self, *args, **kwargs) -> Any:
        """Run the operation."""
