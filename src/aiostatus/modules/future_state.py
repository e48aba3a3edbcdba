import asyncio
from asyncio import Future
from dataclasses import dataclass
from typing import Any, Literal, Optional


type RecordStatus = Literal["fulfilled", "none", "pending", "rejected"]


@dataclass(slots=True)
class FutureRecord:
    """
    The last known state of a future, as shared between observers.

    The record does not depend on any observer's threshold, hence the absence
    of a `within_threshold` field.
    """

    status: RecordStatus
    value: Any = None

    def settled(self):
        """
        Get whether the record describes a settled future.

        Returns
        -------
        bool
        """

        return self.status in ("fulfilled", "rejected")

    @classmethod
    def new_none(cls):
        """
        Create a new instance representing the absence of a future.

        Returns
        -------
        FutureRecord
        """

        return cls(status="none")

    @classmethod
    def new_pending(cls):
        """
        Create a new instance representing a pending future.

        Returns
        -------
        FutureRecord
        """

        return cls(status="pending")

    @classmethod
    def new_fulfilled(cls, value: Any, /):
        """
        Create a new instance representing a future that completed
        successfully.

        Parameters
        ----------
        value
            The result of the future.

        Returns
        -------
        FutureRecord
        """

        return cls(status="fulfilled", value=value)

    @classmethod
    def new_rejected(cls, reason: BaseException, /):
        """
        Create a new instance representing a future that failed.

        Parameters
        ----------
        reason
            The exception the future failed with.

        Returns
        -------
        FutureRecord
        """

        return cls(status="rejected", value=reason)

    @classmethod
    def absorb_future(cls, future: Optional[Future[Any]], /):
        """
        Create a new instance by absorbing the state of the given future.

        A cancelled future is considered rejected with a fresh
        `asyncio.CancelledError` as its reason.

        Parameters
        ----------
        future
            The future to absorb the state from, or `None`.

        Returns
        -------
        FutureRecord
        """

        if future is None:
            return cls.new_none()

        if not future.done():
            return cls.new_pending()

        if future.cancelled():
            return cls.new_rejected(asyncio.CancelledError())

        if (exception := future.exception()) is not None:
            return cls.new_rejected(exception)

        return cls.new_fulfilled(future.result())


__all__ = [
    "FutureRecord",
    "RecordStatus",
]
