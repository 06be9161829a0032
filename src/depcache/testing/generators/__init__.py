"""Testing generators – Hypothesis strategies for keys, tags and URLs."""
from depcache.testing.generators.strategies import (
    key_strategy,
    redis_url_strategy,
    tag_map_strategy,
    tag_strategy,
)

__all__ = [
    "key_strategy",
    "redis_url_strategy",
    "tag_map_strategy",
    "tag_strategy",
]
