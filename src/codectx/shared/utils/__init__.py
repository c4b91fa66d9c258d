from codectx.shared.utils.hasher import cache_key, content_hash
from codectx.shared.utils.token_utils import DEFAULT_CHARS_PER_TOKEN, estimate_tokens

__all__ = [
    "content_hash",
    "cache_key",
    "estimate_tokens",
    "DEFAULT_CHARS_PER_TOKEN",
]
