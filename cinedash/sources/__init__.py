from .base import MovieSource
from .tmdb import TMDbSource

__all__ = [
    "MovieSource",
    "TMDbSource",
]
