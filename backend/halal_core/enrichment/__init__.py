"""
Unknown-ingredient log used to grow the knowledge base.
"""
from .unknown_log import UnknownIngredientsLog, log_unknown_ingredient, get_unknown_log

__all__ = [
    "UnknownIngredientsLog",
    "log_unknown_ingredient",
    "get_unknown_log",
]
