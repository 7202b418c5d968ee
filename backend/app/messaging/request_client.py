"""
Cliente request/response sobre Redis.

Fluxo de uma chamada:
1. Envelope JSON {message_type, correlation_id, reply_to, sent_at, payload}
   é empilhado (RPUSH) na fila {prefix}:requests:{message_type}
2. O serviço de contratos consome a fila e responde (RPUSH) em reply_to
   com {correlation_id, success, payload, error}
3. O cliente aguarda a resposta com BLPOP até o timeout da chamada
"""
import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import redis

from app import config
from app.exceptions import ContractLookupError, LookupTimeoutError, MalformedResponseError
from app.messaging.redis_connection import get_redis_client

logger = logging.getLogger(__name__)


class RedisRequestClient:

    def __init__(self, redis_client: Optional[redis.Redis] = None, key_prefix: str = None):
        self._redis = redis_client
        self.key_prefix = key_prefix or config.REDIS_KEY_PREFIX

    @property
    def redis(self) -> redis.Redis:
        if self._redis is None:
            self._redis = get_redis_client()
        return self._redis

    def request_queue_key(self, message_type: str) -> str:
        return f"{self.key_prefix}:requests:{message_type}"

    def reply_key(self, correlation_id: str) -> str:
        return f"{self.key_prefix}:replies:{correlation_id}"

    def request(self, message_type: str, payload: Dict[str, Any], timeout: float) -> Dict[str, Any]:
        """
        Envia uma requisição e bloqueia até a resposta ou o timeout.

        Raises:
            LookupTimeoutError: nenhuma resposta dentro do timeout
            MalformedResponseError: resposta que não segue o envelope
            ContractLookupError: Redis indisponível ou erro reportado pelo serviço
        """
        correlation_id = str(uuid.uuid4())
        reply_to = self.reply_key(correlation_id)
        envelope = {
            "message_type": message_type,
            "correlation_id": correlation_id,
            "reply_to": reply_to,
            "sent_at": datetime.now(timezone.utc).isoformat(),
            "payload": payload
        }

        try:
            self.redis.rpush(self.request_queue_key(message_type), json.dumps(envelope, default=str))
            reply = self.redis.blpop([reply_to], timeout=timeout)
            self.redis.delete(reply_to)
        except redis.RedisError as e:
            raise ContractLookupError(f"{message_type}: falha de comunicação com Redis ({e})") from e

        if reply is None:
            raise LookupTimeoutError(f"{message_type}: sem resposta em {timeout}s")

        _, raw = reply
        try:
            body = json.loads(raw)
        except (TypeError, ValueError) as e:
            raise MalformedResponseError(f"{message_type}: resposta não é JSON válido") from e

        if not isinstance(body, dict) or body.get("correlation_id") != correlation_id:
            raise MalformedResponseError(f"{message_type}: envelope de resposta inválido")

        if not body.get("success", True):
            raise ContractLookupError(f"{message_type}: {body.get('error') or 'erro não informado'}")

        result = body.get("payload")
        if not isinstance(result, dict):
            raise MalformedResponseError(f"{message_type}: payload ausente na resposta")

        logger.debug("%s respondido (correlation_id=%s)", message_type, correlation_id)
        return result
