"""
Settle-all fan-out.

Starts every awaitable together and waits for all of them, collecting one
outcome per input instead of aborting on the first failure.
"""
import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Iterable, List, Optional

FULFILLED = "fulfilled"
REJECTED = "rejected"


@dataclass(frozen=True)
class Settled:
    status: str
    value: Any = None
    reason: Optional[BaseException] = None

    @property
    def fulfilled(self) -> bool:
        return self.status == FULFILLED

    @property
    def rejected(self) -> bool:
        return self.status == REJECTED


async def settle_all(aws: Iterable[Awaitable[Any]]) -> List[Settled]:
    """
    Await every item and return their outcomes in input order.

    Exceptions, including a child's CancelledError, are captured per item.
    Cancelling the caller still cancels every child.
    """
    results = await asyncio.gather(*aws, return_exceptions=True)

    settled = []
    for result in results:
        if isinstance(result, BaseException):
            settled.append(Settled(status=REJECTED, reason=result))
        else:
            settled.append(Settled(status=FULFILLED, value=result))
    return settled
