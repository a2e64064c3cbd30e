# backoffice/utils/retry.py
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type
from requests import RequestException
import redis

from backoffice.utils.settings import ORDER_NUMBER_ATTEMPTS


class OrderNumberCollision(Exception):
    """Numer zamówienia już istnieje (unique index)."""

    def __init__(self, order_number: str):
        super().__init__(f"Order number {order_number} already exists")
        self.order_number = order_number


def redis_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_exception_type(redis.RedisError),
    )


def http_retry():
    # tylko dla zapytan idempotentnych (GET), sendMessage nie jest ponawiany
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.3, min=0.3, max=3),
        retry=retry_if_exception_type(RequestException),
    )


def order_number_retry(attempts: int | None = None):
    # bez czekania - kolejna proba losuje nowy numer
    return retry(
        reraise=True,
        stop=stop_after_attempt(attempts or ORDER_NUMBER_ATTEMPTS),
        retry=retry_if_exception_type(OrderNumberCollision),
    )
