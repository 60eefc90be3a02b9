import redis

# Logger
from supplier_auth.logging.utils import get_app_logger
logger = get_app_logger("supplier_auth.redis_wrapper")

# Settings
from supplier_auth.config.settings import AuthConfigs
configs = AuthConfigs()

REDIS_URL = configs.REDIS_URL


class RedisKeyProcessor:

    def blacklist_key(self) -> str:
        return "auth:blacklist"


class RedisJSONWrapper:
    def __init__(self, redis_uri=REDIS_URL, database=None, client=None):
        if client is not None:
            self.redis_client = client
            self.connected = True
            return
        if database is not None:
            redis_uri = f"{redis_uri}/{database}"
        try:
            self.redis_client = redis.from_url(redis_uri)
            self.redis_client.ping()
            self.connected = True
        except redis.exceptions.RedisError as e:
            logger.error(f"redis_connect_failed | uri={redis_uri} error={e}")
            self.redis_client = None
            self.connected = False

    def delete(self, key):
        return self.redis_client.delete(key) > 0

    # Plain sets

    def set_add(self, key: str, member: str) -> bool:
        return self.redis_client.sadd(key, member) > 0

    def set_contains(self, key: str, member: str) -> bool:
        return bool(self.redis_client.sismember(key, member))

    def set_size(self, key: str) -> int:
        return int(self.redis_client.scard(key))
