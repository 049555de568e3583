"""
Circuit breaker with Redis-backed state and health counters.

Guards reads against the benchmark store. States:
  - CLOSED    → reads pass through
  - OPEN      → too many consecutive failures, reads short-circuit with CircuitOpenError
  - HALF_OPEN → after reset_timeout, one probe read is allowed

Redis being unreachable never blocks a read: the breaker fails open.
"""
import logging
import time

from redis.exceptions import RedisError

logger = logging.getLogger('services.circuit_breaker')

CLOSED = 'closed'
OPEN = 'open'
HALF_OPEN = 'half_open'


class CircuitOpenError(Exception):
    """Raised when calling through an open circuit breaker."""
    def __init__(self, name, retry_after=None):
        self.name = name
        self.retry_after = retry_after
        super().__init__(f"Circuit breaker '{name}' is OPEN — store unavailable")


class CircuitBreaker:
    """
    Usage:
        breaker = CircuitBreaker('benchmark_db', redis_client)
        rows = breaker.call(load_rows, session)
    """

    PREFIX = 'cb'

    def __init__(self, name, redis_client, failure_threshold=3, reset_timeout=60):
        self.name = name
        self.redis = redis_client
        self.failure_threshold = failure_threshold
        self.reset_timeout = reset_timeout

    def _key(self, suffix):
        return f'{self.PREFIX}:{self.name}:{suffix}'

    # ── State ─────────────────────────────────────────────────────────

    @property
    def state(self):
        try:
            current = self.redis.get(self._key('state')) or CLOSED
            if current == OPEN and self._seconds_since_failure() > self.reset_timeout:
                self.redis.set(self._key('state'), HALF_OPEN)
                return HALF_OPEN
            return current
        except RedisError as e:
            logger.debug("Breaker '%s' state unavailable, failing open: %s", self.name, e)
            return CLOSED

    @property
    def failure_count(self):
        try:
            return int(self.redis.get(self._key('failures')) or 0)
        except RedisError:
            return 0

    def _seconds_since_failure(self):
        last = self.redis.get(self._key('last_failure'))
        if not last:
            return float('inf')
        return time.time() - float(last)

    # ── Calls ─────────────────────────────────────────────────────────

    def call(self, func, *args, **kwargs):
        """Run func through the breaker; failures are counted and re-raised."""
        if self.state == OPEN:
            try:
                retry_after = max(0.0, self.reset_timeout - self._seconds_since_failure())
            except RedisError:
                retry_after = None
            raise CircuitOpenError(self.name, retry_after=retry_after)

        try:
            result = func(*args, **kwargs)
        except Exception as e:
            self._on_failure(e)
            raise
        self._on_success()
        return result

    def _on_success(self):
        try:
            pipe = self.redis.pipeline()
            pipe.set(self._key('state'), CLOSED)
            pipe.set(self._key('failures'), 0)
            pipe.hincrby(self._key('health'), 'success', 1)
            pipe.hset(self._key('health'), 'last_success', str(time.time()))
            pipe.execute()
        except RedisError as e:
            logger.debug("Breaker '%s' could not record success: %s", self.name, e)

    def _on_failure(self, error):
        try:
            failures = self.redis.incr(self._key('failures'))
            pipe = self.redis.pipeline()
            pipe.set(self._key('last_failure'), str(time.time()))
            pipe.hincrby(self._key('health'), 'failure', 1)
            pipe.hset(self._key('health'), 'last_error', str(error)[:200])
            if failures >= self.failure_threshold:
                pipe.set(self._key('state'), OPEN)
            pipe.execute()
        except RedisError as e:
            logger.debug("Breaker '%s' could not record failure: %s", self.name, e)
            return

        if failures >= self.failure_threshold:
            logger.warning(
                "Circuit '%s' OPENED after %d failures (threshold=%d): %s",
                self.name, failures, self.failure_threshold, error,
            )
        else:
            logger.info("Circuit '%s' failure %d/%d: %s",
                        self.name, failures, self.failure_threshold, error)

    def reset(self):
        """Manually close the breaker."""
        try:
            pipe = self.redis.pipeline()
            pipe.set(self._key('state'), CLOSED)
            pipe.set(self._key('failures'), 0)
            pipe.delete(self._key('last_failure'))
            pipe.execute()
            logger.info("Circuit '%s' manually reset to CLOSED", self.name)
        except RedisError as e:
            logger.error("Failed to reset circuit '%s': %s", self.name, e)

    def get_health(self):
        """Health counters for /api/health."""
        try:
            data = self.redis.hgetall(self._key('health'))
        except RedisError:
            data = None
        health = {
            'name': self.name,
            'state': self.state if data is not None else 'unknown',
            'failure_count': self.failure_count,
            'failure_threshold': self.failure_threshold,
            'reset_timeout': self.reset_timeout,
            'total_success': 0,
            'total_failure': 0,
            'last_success': None,
            'last_error': '',
        }
        if data:
            health.update({
                'total_success': int(data.get('success', 0)),
                'total_failure': int(data.get('failure', 0)),
                'last_success': float(data['last_success']) if data.get('last_success') else None,
                'last_error': data.get('last_error', ''),
            })
        return health


# ── Registry ──────────────────────────────────────────────────────────────

_registry = {}


def get_breaker(name, redis_client=None, **kwargs):
    """Get or create a named breaker (one per name per process)."""
    if name not in _registry:
        if redis_client is None:
            from latency_dashboard import extensions
            redis_client = extensions.redis_client
        _registry[name] = CircuitBreaker(name, redis_client, **kwargs)
    return _registry[name]


def get_all_breakers():
    return dict(_registry)


def init_breakers(redis_client):
    """Register the breaker guarding the benchmark store."""
    from latency_dashboard.config import (
        BREAKER_NAME, BREAKER_FAILURE_THRESHOLD, BREAKER_RESET_TIMEOUT,
    )
    breaker = CircuitBreaker(
        BREAKER_NAME, redis_client,
        failure_threshold=BREAKER_FAILURE_THRESHOLD,
        reset_timeout=BREAKER_RESET_TIMEOUT,
    )
    _registry[BREAKER_NAME] = breaker
    return {BREAKER_NAME: breaker}
