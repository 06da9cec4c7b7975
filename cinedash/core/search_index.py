"""
Search Index
Deduplicated full-text search across every category's current listing
"""
from typing import Dict, List, Tuple
import unicodedata

from ..models.movie import MovieSummary
from .category_store import CategoryStore


def fold_text(text: str) -> str:
    """Case- and diacritic-insensitive form used on both sides of a match"""
    decomposed = unicodedata.normalize("NFKD", (text or "").casefold())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def strip_punctuation(text: str) -> str:
    """Keep only letters, digits and whitespace"""
    return "".join(ch for ch in text if ch.isalnum() or ch.isspace())


class SearchIndex:
    """Answers substring queries over the store's slots; holds no state of its own"""

    def __init__(self, store: CategoryStore):
        self.store = store

    def candidates(self) -> List[MovieSummary]:
        """
        Flatten all slots in category order and collapse duplicate ids.

        A repeated id keeps the position where it was first seen but takes
        the value of its last occurrence, so later categories override
        earlier ones.
        """
        unique: Dict[str, MovieSummary] = {}
        for slot in self.store.snapshot().values():
            for movie in slot.items:
                unique[movie.id] = movie
        return list(unique.values())

    def search(self, query: str) -> Tuple[MovieSummary, ...]:
        if not query:
            return ()
        needle = fold_text(query.lower())
        return tuple(movie for movie in self.candidates() if self.matches(movie, needle))

    @staticmethod
    def matches(movie: MovieSummary, needle: str) -> bool:
        """needle must already be folded with fold_text()"""
        fields = (
            strip_punctuation(fold_text(movie.title)),
            strip_punctuation(fold_text(movie.overview)),
            strip_punctuation(fold_text(movie.original_title)),
            # Release dates are structured strings; only the case is folded.
            fold_text(movie.release_date),
        )
        return any(needle in value for value in fields)
