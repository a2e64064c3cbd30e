# backoffice/services/lock_service.py
import uuid

import redis

from backoffice.utils.retry import redis_retry
from backoffice.utils.settings import REDIS_URL, DISPATCH_LOCK_TTL_SECONDS
from backoffice.utils.logging import get_logger

logger = get_logger(__name__)

# LUA porownaj i usun - GET + porownanie + DEL jako jedna operacja
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""


class LockService:
    """
    Lock na wysyłkę powiadomienia dla zamówienia, żeby ręczny resend
    i task Celery nie wysłały tego samego zamówienia dwa razy.
    """

    def __init__(self, url: str | None = None, client: redis.Redis | None = None):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )

    @staticmethod
    def dispatch_key(order_id: int) -> str:
        return f"order:{order_id}:dispatch"

    @redis_retry()
    def acquire_dispatch_lock(self, order_id: int, ttl: int | None = None) -> str | None:
        """Zwraca token właściciela albo None, gdy lock trzyma ktoś inny."""
        key = self.dispatch_key(order_id)
        token = uuid.uuid4().hex

        # SET order:1:dispatch <token> NX EX 60, wygasa sam jesli worker padnie
        acquired = self.redis.set(name=key, value=token, nx=True, ex=ttl or DISPATCH_LOCK_TTL_SECONDS)
        if not acquired:
            logger.info(f"Lock {key} is held by another dispatcher")
            return None

        logger.info(f"Acquired lock {key}")
        return token

    @redis_retry()
    def release_dispatch_lock(self, order_id: int, token: str) -> bool:
        key = self.dispatch_key(order_id)
        released = bool(self.redis.eval(_RELEASE_LUA, 1, key, token))
        logger.info(f"Release lock {key}: {'ok' if released else 'not owner'}")
        return released
