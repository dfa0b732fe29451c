from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Storage settings
    notes_store_path: str = "data/notes.json"
    word_vectors_path: str = "data/word_vectors.txt"

    # Semantic search settings
    semantic_search_enabled: bool = False
    semantic_search_threshold: float = 0.3
    similar_notes_threshold: float = 0.6
    similar_notes_limit: int = 3
    suggestion_threshold: float = 0.5

    # Query cache settings
    query_throttle_seconds: float = 0.5
    query_cache_max_entries: int = 50

    # Analysis settings
    max_suggested_tags: int = 5
    tag_confidence_min: float = 0.7
    tag_confidence_max: float = 0.95

    log_level: str = "INFO"  # Can be DEBUG, INFO, WARNING, ERROR, CRITICAL


settings = Settings()
