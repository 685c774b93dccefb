"""Environment and parsing helpers.

Nothing here imports from ``features`` so config modules can use it freely.
"""

from .env import get_env, get_node_env, is_production, is_truthy
from .json_parsing import coerce_str, try_parse_json, try_parse_json_list

__all__ = [
    "coerce_str",
    "get_env",
    "get_node_env",
    "is_production",
    "is_truthy",
    "try_parse_json",
    "try_parse_json_list",
]
