from .redis_connection import RedisConnectionManager, get_redis_client
from .request_client import RedisRequestClient
from .event_publisher import RedisEventPublisher

__all__ = [
    "RedisConnectionManager",
    "get_redis_client",
    "RedisRequestClient",
    "RedisEventPublisher"
]
