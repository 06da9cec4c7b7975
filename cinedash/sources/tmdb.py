"""
TMDb Movie Source

Fetches dashboard listings and per-movie details from The Movie Database
(API v3). Authenticates with either a v4 read access token (Bearer header)
or a v3 api_key query parameter, whichever is configured.
"""

from __future__ import annotations

import time
from typing import Any, Dict, List, Optional

import requests

from .base import MovieSource
from ..core.errors import FetchError
from ..models.category import Category, TimePeriod
from ..models.movie import CastMember, MovieDetails, MovieSummary, PersonDetail, Review


CATEGORY_PATHS = {
    Category.NOW_PLAYING: "movie/now_playing",
    Category.TOP_RATED: "movie/top_rated",
    Category.UPCOMING: "movie/upcoming",
}
TRENDING_PATH = "trending/movie/{period}"


class TMDbSource(MovieSource):
    name = "TMDb"

    def __init__(self, settings, session: Optional[requests.Session] = None):
        self.settings = settings
        self.last_error = ""
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "User-Agent": "Mozilla/5.0 (Cinedash; TMDbSource)",
                "Accept": "application/json",
            }
        )
        self._base_url = "https://api.themoviedb.org/3"
        self._image_base = "https://image.tmdb.org/t/p/w500"
        self._api_key = ""
        self._access_token = ""
        self._language = "en-US"
        self._region = ""
        self._timeout_seconds = 12.0
        self._retries = 1
        self._backoff_seconds = 0.5
        self.reload_from_settings()

    def reload_from_settings(self) -> None:
        self._base_url = str(self.settings.get("tmdb_base_url", self._base_url) or "").strip().rstrip("/")
        self._image_base = str(self.settings.get("tmdb_image_base", self._image_base) or "").strip()
        self._api_key = str(self.settings.get("tmdb_api_key", "") or "").strip()
        self._access_token = str(self.settings.get("tmdb_access_token", "") or "").strip()
        self._language = str(self.settings.get("tmdb_language", "en-US") or "").strip()
        self._region = str(self.settings.get("tmdb_region", "") or "").strip()
        self._timeout_seconds = self.settings.get_float("tmdb_request_timeout_seconds", minimum=1.0)
        self._retries = self.settings.get_int("tmdb_request_retries")
        self._backoff_seconds = self.settings.get_float("tmdb_retry_backoff_seconds")

    @property
    def image_base(self) -> str:
        return self._image_base

    def fetch(self, category: Category, time_period: Optional[TimePeriod] = None) -> List[MovieSummary]:
        if category.is_trending:
            period = TimePeriod.parse(time_period or category.default_period)
            path = TRENDING_PATH.format(period=period.value)
            params = {"language": self._language}
        else:
            path = CATEGORY_PATHS[category]
            params = {"language": self._language, "region": self._region, "page": 1}
        return self._results(path, params)

    def search_movies(self, query: str, page: int = 1) -> List[MovieSummary]:
        """Remote title search, independent of what the dashboard has fetched"""
        if not query or not str(query).strip():
            return []
        return self._results(
            "search/movie",
            {"query": str(query).strip(), "page": max(1, int(page or 1)), "include_adult": False, "language": self._language},
        )

    def movie_details(self, movie_id: str) -> MovieDetails:
        payload = self._get_json(f"movie/{self._id(movie_id)}", {"language": self._language})
        try:
            return MovieDetails.from_api(payload)
        except (AttributeError, ValueError) as exc:
            raise self._fail(f"TMDb returned an unreadable movie: {exc}")

    def cast_members(self, movie_id: str) -> List[CastMember]:
        payload = self._get_json(f"movie/{self._id(movie_id)}/credits", {"language": self._language})
        cast = payload.get("cast") or []
        members = [CastMember.from_api(row) for row in cast if isinstance(row, dict) and row.get("name")]
        return sorted(members, key=lambda member: member.order)

    def person_details(self, person_id: str) -> PersonDetail:
        payload = self._get_json(f"person/{self._id(person_id)}", {"language": self._language})
        return PersonDetail.from_api(payload)

    def reviews(self, movie_id: str, page: int = 1) -> List[Review]:
        payload = self._get_json(f"movie/{self._id(movie_id)}/reviews", {"page": max(1, int(page or 1))})
        rows = payload.get("results") or []
        return [Review.from_api(row) for row in rows if isinstance(row, dict)]

    def recommendations(self, movie_id: str) -> List[MovieSummary]:
        return self._results(f"movie/{self._id(movie_id)}/recommendations", {"language": self._language})

    def _results(self, path: str, params: Dict[str, Any]) -> List[MovieSummary]:
        payload = self._get_json(path, params)
        rows = payload.get("results")
        if not isinstance(rows, list):
            raise self._fail(f"TMDb returned no results list for {path}.")
        out: List[MovieSummary] = []
        for row in rows:
            if not isinstance(row, dict):
                continue
            try:
                out.append(MovieSummary.from_api(row))
            except ValueError:
                # Rows without an id cannot be deduplicated or opened.
                continue
        self.last_error = ""
        return out

    def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        if not self._access_token and not self._api_key:
            raise self._fail("TMDb credentials are missing (set tmdb_api_key or tmdb_access_token).")

        query = {k: v for k, v in (params or {}).items() if v not in (None, "")}
        headers = {}
        if self._access_token:
            headers["Authorization"] = f"Bearer {self._access_token}"
        else:
            query["api_key"] = self._api_key

        url = f"{self._base_url}/{path.lstrip('/')}"
        resp = self._request_with_retry(url, query, headers)
        if resp.status_code == 401:
            raise self._fail("TMDb auth failed (401). Check your API key or access token.")
        if resp.status_code == 404:
            raise self._fail(f"TMDb resource not found: {path}")
        try:
            resp.raise_for_status()
            payload = resp.json()
        except requests.HTTPError as exc:
            raise self._fail(f"TMDb request failed: {exc}")
        except ValueError as exc:
            raise self._fail(f"TMDb returned invalid JSON: {exc}")
        if not isinstance(payload, dict):
            raise self._fail("TMDb returned unexpected response.")
        return payload

    def _request_with_retry(self, url: str, params: Dict[str, Any], headers: Dict[str, str]):
        """GET with bounded retry/backoff for transient network/server failures."""
        last_error = None
        total_attempts = max(1, int(self._retries) + 1)
        for attempt in range(total_attempts):
            try:
                resp = self.session.get(
                    url,
                    params=params,
                    headers=headers,
                    timeout=max(1.0, self._timeout_seconds),
                )
                if resp.status_code < 500:
                    return resp
                resp.raise_for_status()
            except requests.RequestException as exc:
                last_error = exc
                if attempt >= total_attempts - 1:
                    break
                delay = max(0.0, self._backoff_seconds) * (attempt + 1)
                if delay > 0:
                    time.sleep(delay)
        raise self._fail(f"TMDb request failed: {last_error}")

    def _fail(self, message: str) -> FetchError:
        self.last_error = message
        return FetchError(message)

    @staticmethod
    def _id(value: Any) -> str:
        text = str(value or "").strip()
        if not text:
            raise FetchError("A movie or person id is required.")
        return requests.utils.quote(text, safe="")
