"""
Database decorators for automatic error handling and rollback.

Service methods that own a unit of work are wrapped so a store failure
never leaves a half-applied transaction on the session.
"""

from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from payout_engine.utils.exceptions import TransactionAbortedError


T = TypeVar("T")


def with_rollback_on_error(func: Callable[..., T]) -> Callable[..., T]:
    """
    Roll back ``self.session`` on any exception raised by a service method.

    SQLAlchemy errors are re-raised as ``TransactionAbortedError``; engine
    errors (``NotFoundError``, ``InvalidAmountError``, ...) propagate as is.

    Usage:
        class RegistrationDistributor:
            @with_rollback_on_error
            async def distribute(self, participant_id: int):
                ...
                await self.session.commit()

    Args:
        func: Async method of an object exposing ``session``

    Returns:
        Wrapped method with automatic rollback on error
    """
    @wraps(func)
    async def wrapper(self: Any, *args: Any, **kwargs: Any) -> T:
        try:
            return await func(self, *args, **kwargs)
        except Exception as e:
            try:
                await self.session.rollback()
                logger.info(
                    f"Rollback performed in {func.__name__} due to error: "
                    f"{type(e).__name__}"
                )
            except Exception as rollback_error:
                logger.error(
                    f"Failed to rollback in {func.__name__}: {rollback_error}",
                    exc_info=True,
                )
            if isinstance(e, SQLAlchemyError):
                raise TransactionAbortedError(
                    f"{func.__name__} aborted: {e}"
                ) from e
            raise

    return wrapper
