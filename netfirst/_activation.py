from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional

from netfirst._core._storages._base import AsyncBaseStorage

if TYPE_CHECKING:
    from netfirst._notifications import BaseClients

logger = logging.getLogger("netfirst.activation")


@dataclass
class ActivationOutcome:
    generation: str
    deleted: List[str] = field(default_factory=list)
    claimed: bool = False


class AsyncActivationManager:
    """
    Makes one generation authoritative.

    Every other generation is deleted, then open clients are claimed so they are
    served by the new worker without a reload. Running it again for the same
    generation deletes nothing.
    """

    def __init__(self, storage: AsyncBaseStorage, clients: Optional["BaseClients"] = None) -> None:
        self.storage = storage
        self.clients = clients

    async def activate(self, generation: str) -> ActivationOutcome:
        outcome = ActivationOutcome(generation=generation)

        for name in await self.storage.list_generations():
            if name == generation:
                continue
            logger.info(f"Deleting superseded generation {name!r}")
            await self.storage.delete(name)
            outcome.deleted.append(name)

        if self.clients is not None:
            await self.clients.claim()
            outcome.claimed = True
            logger.info(f"Generation {generation!r} active, open clients claimed")
        else:
            logger.info(f"Generation {generation!r} active")
        return outcome
