from .normalizer import normalize_ingredient_id, normalize_school_key, search_variants, id_to_words

__all__ = [
    "normalize_ingredient_id",
    "normalize_school_key",
    "search_variants",
    "id_to_words",
]
