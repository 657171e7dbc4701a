import redis as redis_sync  # Sync client
from redis.connection import ConnectionPool as SyncConnectionPool
from ..core.config import settings

# Single sync client/pool is fine (no event loop binding)
_redis_sync: redis_sync.Redis | None = None
_sync_pool: SyncConnectionPool | None = None

def get_redis_sync() -> redis_sync.Redis:
	"""Get a singleton sync Redis client (redis) with connection pooling."""
	global _redis_sync, _sync_pool
	if _redis_sync is None:
		_sync_pool = SyncConnectionPool.from_url(
			settings.redis_url,
			decode_responses=True,
			max_connections=20,
			socket_connect_timeout=5,
			socket_timeout=5,
			retry_on_timeout=True,
		)
		_redis_sync = redis_sync.Redis(connection_pool=_sync_pool)
	return _redis_sync
