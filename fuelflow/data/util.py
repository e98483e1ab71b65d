from __future__ import annotations

from typing import Literal, Optional

from ..config import get_config
from .backends.memory_backend import MemoryTokenStore
from .backends.supabase_backend import SupabaseTokenStore
from .interface import TokenStore


def get_token_store(kind: Optional[Literal["supabase", "memory"]] = None) -> TokenStore:
    kind = kind or get_config().backend
    if kind == "supabase":
        # Fails here, at startup, when SUPABASE_URL / SUPABASE_ANON_KEY are missing
        return SupabaseTokenStore()
    if kind == "memory":
        return MemoryTokenStore()
    raise ValueError(f"Unknown token store kind: {kind}")
