import logging
from typing import Optional

import redis
from pydantic import BaseModel

from app import config
from app.exceptions import EventPublishError
from app.messaging.redis_connection import get_redis_client

logger = logging.getLogger(__name__)


class RedisEventPublisher:
    """Publica eventos de integracao em {prefix}:events:{event_name} (Redis pub/sub)."""

    def __init__(self, redis_client: Optional[redis.Redis] = None, key_prefix: str = None):
        self._redis = redis_client
        self.key_prefix = key_prefix or config.REDIS_KEY_PREFIX

    @property
    def redis(self) -> redis.Redis:
        if self._redis is None:
            self._redis = get_redis_client()
        return self._redis

    def channel(self, event_name: str) -> str:
        return f"{self.key_prefix}:events:{event_name}"

    def publish(self, event_name: str, event: BaseModel) -> int:
        try:
            receivers = self.redis.publish(self.channel(event_name), event.model_dump_json())
        except redis.RedisError as e:
            raise EventPublishError(f"Falha ao publicar {event_name}: {e}") from e
        logger.info("Evento %s publicado para %s assinante(s)", event_name, receivers)
        return receivers
