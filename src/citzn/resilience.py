"""Circuit breaker, retry and TTL cache for district lookups."""
import time
import logging
import sqlite3
from datetime import datetime, timedelta
from typing import Optional, Callable, Any, Dict, Tuple, Type
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
import functools

logger = logging.getLogger(__name__)


class CircuitState(Enum):
    """Circuit breaker states."""
    CLOSED = "closed"  # Normal operation
    OPEN = "open"      # Failures exceeded, rejecting calls
    HALF_OPEN = "half_open"  # Probing whether the service recovered


@dataclass
class CircuitBreakerConfig:
    """Configuration for circuit breaker."""
    failure_threshold: int = 5
    timeout_seconds: int = 60
    success_threshold: int = 2
    # Exceptions that pass through without counting as a service failure
    ignored_exceptions: Tuple[Type[BaseException], ...] = field(default_factory=tuple)


class CircuitBreakerOpenError(Exception):
    """Raised when a call is rejected because the breaker is open."""
    pass


class CircuitBreaker:
    """Circuit breaker for calls to the geocoding service."""

    def __init__(self, name: str, config: Optional[CircuitBreakerConfig] = None):
        self.name = name
        self.config = config or CircuitBreakerConfig()
        self.state = CircuitState.CLOSED
        self.failure_count = 0
        self.success_count = 0
        self.last_failure_time: Optional[datetime] = None

    def call(self, func: Callable, *args, **kwargs) -> Any:
        """Run func under breaker protection."""
        if self.state == CircuitState.OPEN:
            if self._should_attempt_reset():
                logger.info(f"Circuit '{self.name}' half-open, probing service")
                self.state = CircuitState.HALF_OPEN
                self.success_count = 0
            else:
                raise CircuitBreakerOpenError(
                    f"Circuit breaker '{self.name}' is OPEN. "
                    f"Timeout: {self.config.timeout_seconds}s"
                )

        try:
            result = func(*args, **kwargs)
        except self.config.ignored_exceptions:
            self._on_success()
            raise
        except Exception:
            self._on_failure()
            raise
        self._on_success()
        return result

    def _on_success(self) -> None:
        if self.state == CircuitState.HALF_OPEN:
            self.success_count += 1
            if self.success_count >= self.config.success_threshold:
                self.reset()
        else:
            self.failure_count = 0

    def _on_failure(self) -> None:
        self.failure_count += 1
        self.last_failure_time = datetime.utcnow()

        if self.state == CircuitState.HALF_OPEN:
            self.state = CircuitState.OPEN
        elif self.failure_count >= self.config.failure_threshold:
            logger.warning(
                f"Circuit '{self.name}' opened after {self.failure_count} consecutive failures"
            )
            self.state = CircuitState.OPEN

    def _should_attempt_reset(self) -> bool:
        if not self.last_failure_time:
            return True
        elapsed = (datetime.utcnow() - self.last_failure_time).total_seconds()
        return elapsed >= self.config.timeout_seconds

    def reset(self) -> None:
        """Close the breaker and clear counters."""
        self.state = CircuitState.CLOSED
        self.failure_count = 0
        self.success_count = 0

    def get_status(self) -> Dict:
        return {
            "name": self.name,
            "state": self.state.value,
            "failure_count": self.failure_count,
            "last_failure": self.last_failure_time.isoformat() if self.last_failure_time else None
        }


class CacheLayer:
    """SQLite-backed TTL cache.

    Entries are grouped by ``cache_type`` (``district``, ``jurisdiction``) so
    one kind can be cleared without touching the other.
    """

    def __init__(self, db_path: str = "data/district_cache.db"):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_database()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(str(self.db_path))

    def _init_database(self) -> None:
        conn = self._connect()
        cursor = conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS cache_entries (
                cache_key TEXT PRIMARY KEY,
                cache_type TEXT NOT NULL,
                data TEXT NOT NULL,
                ttl_seconds INTEGER NOT NULL,
                created_at TEXT DEFAULT CURRENT_TIMESTAMP,
                expires_at TEXT NOT NULL
            )
        """)
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_cache_type ON cache_entries(cache_type)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_cache_expires ON cache_entries(expires_at)")

        conn.commit()
        conn.close()

    def get(self, key: str) -> Optional[str]:
        """Cached value, or None when missing or expired."""
        conn = self._connect()
        cursor = conn.cursor()
        cursor.execute("""
            SELECT data FROM cache_entries
            WHERE cache_key = ? AND expires_at > ?
        """, (key, datetime.utcnow().isoformat()))
        row = cursor.fetchone()
        conn.close()
        return row[0] if row else None

    def set(self, key: str, value: str, ttl_seconds: int = 300, cache_type: str = "general") -> None:
        expires_at = datetime.utcnow() + timedelta(seconds=ttl_seconds)

        conn = self._connect()
        cursor = conn.cursor()
        cursor.execute("""
            INSERT OR REPLACE INTO cache_entries
            (cache_key, cache_type, data, ttl_seconds, expires_at)
            VALUES (?, ?, ?, ?, ?)
        """, (key, cache_type, value, ttl_seconds, expires_at.isoformat()))
        conn.commit()
        conn.close()

    def delete(self, key: str) -> None:
        conn = self._connect()
        conn.execute("DELETE FROM cache_entries WHERE cache_key = ?", (key,))
        conn.commit()
        conn.close()

    def clear(self, cache_type: Optional[str] = None) -> int:
        """Remove all entries, or all entries of one type. Returns rows removed."""
        conn = self._connect()
        cursor = conn.cursor()
        if cache_type is None:
            cursor.execute("DELETE FROM cache_entries")
        else:
            cursor.execute("DELETE FROM cache_entries WHERE cache_type = ?", (cache_type,))
        deleted = cursor.rowcount
        conn.commit()
        conn.close()
        return deleted

    def cleanup_expired(self) -> int:
        conn = self._connect()
        cursor = conn.cursor()
        cursor.execute(
            "DELETE FROM cache_entries WHERE expires_at <= ?",
            (datetime.utcnow().isoformat(),),
        )
        deleted = cursor.rowcount
        conn.commit()
        conn.close()
        return deleted

    def get_stats(self) -> Dict:
        """Total and unexpired entry counts per cache type."""
        conn = self._connect()
        cursor = conn.cursor()
        cursor.execute("""
            SELECT
                cache_type,
                COUNT(*) as total,
                SUM(CASE WHEN expires_at > ? THEN 1 ELSE 0 END) as valid
            FROM cache_entries
            GROUP BY cache_type
        """, (datetime.utcnow().isoformat(),))

        stats = {}
        for row in cursor.fetchall():
            stats[row[0]] = {"total": row[1], "valid": row[2]}

        conn.close()
        return stats


def with_exponential_backoff(
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
):
    """Retry the wrapped call on ``retry_on`` exceptions, doubling the delay each time."""
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except retry_on as e:
                    if attempt >= max_retries:
                        raise
                    delay = min(base_delay * (2 ** attempt), max_delay)
                    logger.debug(f"{func.__name__} failed ({e}); retry {attempt + 1} in {delay:.1f}s")
                    time.sleep(delay)

        return wrapper
    return decorator


# Global circuit breakers
_circuit_breakers: Dict[str, CircuitBreaker] = {}


def get_circuit_breaker(name: str, config: Optional[CircuitBreakerConfig] = None) -> CircuitBreaker:
    """Get or create a named circuit breaker."""
    if name not in _circuit_breakers:
        _circuit_breakers[name] = CircuitBreaker(name, config)
    return _circuit_breakers[name]


__all__ = [
    "CircuitState",
    "CircuitBreakerConfig",
    "CircuitBreakerOpenError",
    "CircuitBreaker",
    "CacheLayer",
    "with_exponential_backoff",
    "get_circuit_breaker",
]
