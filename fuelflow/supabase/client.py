from supabase import Client, create_client
from fuelflow.config import get_config
from fuelflow.logging import get_logger

class SupabaseConnection:
    """Builds the Supabase client from the AppConfig singleton."""
    def __init__(self) -> None:
        """Initializes the connection handler using the singleton AppConfig."""
        self.config = get_config()
        self.logger = get_logger(__name__)

    def get_credentials(self):
        """Returns the project URL and public API key.

        Returns:
            tuple[str, str]: The Supabase URL and anon key.
        Raises:
            RuntimeError: If required configuration is missing.
        """
        missing = [
            name for name, value in (
                ("SUPABASE_URL", self.config.supabase_url),
                ("SUPABASE_ANON_KEY", self.config.supabase_anon_key),
            ) if not value
        ]
        if missing:
            self.logger.error(f"Missing Supabase configuration values: {', '.join(missing)}")
            raise RuntimeError(f"Missing Supabase configuration values: {', '.join(missing)}")
        return self.config.supabase_url, self.config.supabase_anon_key

    def get_client(self) -> Client:
        """Returns a Supabase client for the configured project.

        Returns:
            Client: The supabase-py client instance.
        """
        url, key = self.get_credentials()
        self.logger.info(f"Instantiating Supabase client for {url}")
        return create_client(url, key)

def get_supabase_connection() -> SupabaseConnection:
    """Returns a new SupabaseConnection instance using the latest config."""
    return SupabaseConnection()
