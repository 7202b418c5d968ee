"""
Conexão Redis compartilhada (pool de conexões) usada pelo cliente
request/response e pelo publicador de eventos.
"""
import logging
from typing import Optional

import redis

from app import config

logger = logging.getLogger(__name__)


class RedisConnectionManager:
    """Singleton com pool de conexões."""

    _instance: Optional["RedisConnectionManager"] = None
    _client: Optional[redis.Redis] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def _connect(self):
        pool = redis.ConnectionPool(
            host=config.REDIS_HOST,
            port=config.REDIS_PORT,
            db=config.REDIS_DB,
            password=config.REDIS_PASSWORD,
            max_connections=config.REDIS_MAX_CONNECTIONS,
            socket_timeout=config.REDIS_SOCKET_TIMEOUT,
            socket_connect_timeout=config.REDIS_CONNECT_TIMEOUT,
            decode_responses=True
        )
        self._client = redis.Redis(connection_pool=pool)
        logger.info(
            "Redis configurado: %s:%s (db=%s)",
            config.REDIS_HOST, config.REDIS_PORT, config.REDIS_DB
        )

    @property
    def client(self) -> redis.Redis:
        if self._client is None:
            self._connect()
        return self._client

    def ping(self) -> bool:
        try:
            return self.client.ping()
        except redis.RedisError as e:
            logger.warning("Redis ping falhou: %s", e)
            return False

    def close(self):
        if self._client is not None:
            self._client.close()
            self._client = None
            logger.info("Conexão Redis encerrada")


def get_redis_client() -> redis.Redis:
    return RedisConnectionManager().client
