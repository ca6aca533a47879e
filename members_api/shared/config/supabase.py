"""
Supabase client configuration for the profile document table.
Handles async Supabase initialization with proper error handling and connection management.
"""

import logging
from typing import Optional

from supabase import AsyncClient, acreate_client
from supabase.lib.client_options import AsyncClientOptions

from .settings import Settings

logger = logging.getLogger(__name__)


class SupabaseManager:
    """
    Supabase client manager with lazy async initialization.

    One manager (and therefore one client) is shared by the whole process;
    it is created by the application factory and handed to the store adapter.
    """

    def __init__(self, settings: Settings):
        self._client: Optional[AsyncClient] = None
        self.settings = settings

    async def get_client(self) -> AsyncClient:
        """Get or create the async Supabase client."""
        if self._client is None:
            self._client = await self._create_client()
        return self._client

    async def _create_client(self) -> AsyncClient:
        """Create the Supabase client with the service role key."""
        try:
            client_options = AsyncClientOptions(
                schema="public",
                headers={
                    "User-Agent": f"MembersApi/{self.settings.APP_VERSION}",
                },
                postgrest_client_timeout=self.settings.STORE_TIMEOUT_SECONDS,
                auto_refresh_token=False,
                persist_session=False,
            )

            client = await acreate_client(
                self.settings.SUPABASE_URL,
                self.settings.SUPABASE_SERVICE_ROLE_KEY,
                options=client_options,
            )

            logger.info("Supabase client initialized successfully")
            return client

        except Exception as e:
            logger.error(f"Failed to initialize Supabase client: {e}")
            raise ConnectionError(f"Supabase initialization failed: {e}") from e

    async def close(self) -> None:
        """Drop the client so the next call reconnects."""
        self._client = None
