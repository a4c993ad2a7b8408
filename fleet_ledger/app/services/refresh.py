"""
Ledger refresh events.

Every write to the ledger emits a refresh event so dashboards, analytics and
bills re-fetch on their next read. Events bump an in-process generation
counter, notify local listeners and are published on a Redis channel for
other workers.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional

from redis.exceptions import RedisError

from fleet_ledger.app.core import redis_client as redis_client_module
from fleet_ledger.app.core.config import settings

logger = logging.getLogger(__name__)

RefreshListener = Callable[[Dict[str, Any]], Awaitable[None]]


class RefreshNotifier:
    """Emits refresh events after ledger writes."""

    def __init__(self):
        self.generation = 0
        self._listeners: List[RefreshListener] = []

    def subscribe(self, listener: RefreshListener):
        self._listeners.append(listener)

    def unsubscribe(self, listener: RefreshListener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def emit(self, reason: str, entity_type: str, entity_id: Optional[int] = None) -> Dict[str, Any]:
        """
        Record a refresh boundary.

        Publishing is best effort: a Redis outage is logged but never fails
        the write that triggered it.
        """
        self.generation += 1
        event = {
            "generation": self.generation,
            "reason": reason,
            "entity_type": entity_type,
            "entity_id": entity_id,
            "emitted_at": datetime.now(timezone.utc).isoformat(),
        }

        for listener in list(self._listeners):
            await listener(event)

        try:
            await redis_client_module.redis_client.publish(settings.refresh_channel, json.dumps(event))
        except (RedisError, OSError) as e:
            logger.warning("Refresh event %s not published: %s", self.generation, e)

        logger.debug("Ledger refresh %s (%s %s:%s)", self.generation, reason, entity_type, entity_id)
        return event


refresh_notifier = RefreshNotifier()
