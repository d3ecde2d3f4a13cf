import json
import boto3
import os
import time
from functools import wraps
from typing import Dict, Any
import logging

logger = logging.getLogger(__name__)

class SecretsManager:
    """
    Reads database credentials and the sign-in hook key from AWS Secrets
    Manager, caching each secret for a short TTL so rotations are picked up.
    """

    def __init__(self, region_name: str = None, cache_ttl: int = 300):
        self.region_name = region_name or os.environ.get('AWS_REGION', 'us-east-1')
        self._client = None
        self._cache = {}
        self._cache_timestamps = {}
        self._cache_ttl = cache_ttl

    @property
    def client(self):
        """Lazy-loaded Secrets Manager client"""
        if self._client is None:
            session = boto3.session.Session()
            self._client = session.client(
                service_name='secretsmanager',
                region_name=self.region_name
            )
        return self._client

    def _ttl_cached(self, func):
        @wraps(func)
        def wrapper(secret_id: str) -> str:
            now = time.time()
            cached_at = self._cache_timestamps.get(secret_id)
            if cached_at is not None and now - cached_at < self._cache_ttl:
                logger.debug(f"Returning cached secret for {secret_id}")
                return self._cache[secret_id]

            logger.info(f"Fetching fresh secret for {secret_id}")
            try:
                value = func(secret_id)
            except Exception as e:
                # Serve the stale value while a rotation is in flight
                if secret_id in self._cache:
                    logger.warning(f"Fresh secret fetch failed for {secret_id}, using stale cache: {e}")
                    return self._cache[secret_id]
                raise
            self._cache[secret_id] = value
            self._cache_timestamps[secret_id] = now
            return value
        return wrapper

    def clear_cache(self):
        logger.info("Clearing secrets cache")
        self._cache.clear()
        self._cache_timestamps.clear()

    def get_secret(self, secret_id: str) -> str:
        """
        Get a secret value from Secrets Manager.

        Args:
            secret_id: The secret ID or ARN

        Returns:
            The secret value as a string
        """
        @self._ttl_cached
        def _fetch(secret_id: str) -> str:
            try:
                response = self.client.get_secret_value(SecretId=secret_id)
            except Exception as e:
                logger.error(f"Failed to get secret {secret_id}: {e}")
                raise
            if 'SecretBinary' in response:
                return response['SecretBinary']
            return response['SecretString']

        return _fetch(secret_id)

    def get_json_secret(self, secret_id: str) -> Dict[str, Any]:
        return json.loads(self.get_secret(secret_id))

    def get_db_credentials(self) -> Dict[str, str]:
        """
        PostgreSQL credentials. RDS-managed secrets carry username, password,
        host, port and dbname.
        """
        return self.get_json_secret(os.environ.get('DATABASE_SECRETS_NAME', 'invite-gate/db'))

    def get_api_key(self, service_name: str) -> str:
        return self.get_secret(f'{service_name}-api-key')
