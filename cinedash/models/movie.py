"""
Movie Models
Summaries shown on the dashboard plus detail, cast, person and review records
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _optional_text(value: Any) -> Optional[str]:
    text = _text(value).strip()
    return text or None


def _float(value: Any) -> float:
    try:
        return float(value or 0.0)
    except (TypeError, ValueError):
        return 0.0


def _int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def build_image_url(image_base: str, path: Optional[str]) -> Optional[str]:
    """Join an image base URL and a TMDb image path"""
    if not path:
        return None
    return f"{(image_base or '').rstrip('/')}/{path.lstrip('/')}"


@dataclass(frozen=True)
class MovieSummary:
    """One entry of a movie listing; identity is the id"""
    id: str
    title: str
    original_title: str = ""
    overview: str = ""
    release_date: str = ""
    poster_path: Optional[str] = None

    @classmethod
    def from_api(cls, row: Dict[str, Any]) -> "MovieSummary":
        """Build from a TMDb result row (snake_case JSON keys)"""
        movie_id = row.get("id")
        if movie_id is None or _text(movie_id).strip() == "":
            raise ValueError("movie row without id")
        return cls(
            id=_text(movie_id).strip(),
            title=_text(row.get("title") or row.get("name")),
            original_title=_text(row.get("original_title") or row.get("original_name")),
            overview=_text(row.get("overview")),
            release_date=_text(row.get("release_date") or row.get("first_air_date")),
            poster_path=_optional_text(row.get("poster_path")),
        )

    def poster_url(self, image_base: str) -> Optional[str]:
        return build_image_url(image_base, self.poster_path)

    def to_dict(self, image_base: Optional[str] = None) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "title": self.title,
            "originalTitle": self.original_title,
            "overview": self.overview,
            "releaseDate": self.release_date,
            "posterPath": self.poster_path,
        }
        if image_base:
            data["posterUrl"] = self.poster_url(image_base)
        return data


@dataclass(frozen=True)
class MovieDetails:
    id: str
    title: str
    original_title: str = ""
    overview: str = ""
    release_date: str = ""
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    tagline: str = ""
    runtime: int = 0
    status: str = ""
    homepage: Optional[str] = None
    vote_average: float = 0.0
    vote_count: int = 0
    genres: Tuple[str, ...] = ()

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "MovieDetails":
        summary = MovieSummary.from_api(payload)
        genres = tuple(
            _text(genre.get("name"))
            for genre in payload.get("genres") or []
            if isinstance(genre, dict) and genre.get("name")
        )
        return cls(
            id=summary.id,
            title=summary.title,
            original_title=summary.original_title,
            overview=summary.overview,
            release_date=summary.release_date,
            poster_path=summary.poster_path,
            backdrop_path=_optional_text(payload.get("backdrop_path")),
            tagline=_text(payload.get("tagline")),
            runtime=_int(payload.get("runtime")),
            status=_text(payload.get("status")),
            homepage=_optional_text(payload.get("homepage")),
            vote_average=_float(payload.get("vote_average")),
            vote_count=_int(payload.get("vote_count")),
            genres=genres,
        )

    def to_dict(self, image_base: Optional[str] = None) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "title": self.title,
            "originalTitle": self.original_title,
            "overview": self.overview,
            "releaseDate": self.release_date,
            "posterPath": self.poster_path,
            "backdropPath": self.backdrop_path,
            "tagline": self.tagline,
            "runtime": self.runtime,
            "status": self.status,
            "homepage": self.homepage,
            "voteAverage": self.vote_average,
            "voteCount": self.vote_count,
            "genres": list(self.genres),
        }
        if image_base:
            data["posterUrl"] = build_image_url(image_base, self.poster_path)
            data["backdropUrl"] = build_image_url(image_base, self.backdrop_path)
        return data


@dataclass(frozen=True)
class CastMember:
    id: str
    name: str
    character: str = ""
    profile_path: Optional[str] = None
    order: int = 0

    @classmethod
    def from_api(cls, row: Dict[str, Any]) -> "CastMember":
        return cls(
            id=_text(row.get("id")),
            name=_text(row.get("name")),
            character=_text(row.get("character")),
            profile_path=_optional_text(row.get("profile_path")),
            order=_int(row.get("order")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "character": self.character,
            "profilePath": self.profile_path,
            "order": self.order,
        }


@dataclass(frozen=True)
class PersonDetail:
    id: str
    name: str
    biography: str = ""
    birthday: Optional[str] = None
    place_of_birth: Optional[str] = None
    profile_path: Optional[str] = None
    known_for_department: str = ""

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "PersonDetail":
        return cls(
            id=_text(payload.get("id")),
            name=_text(payload.get("name")),
            biography=_text(payload.get("biography")),
            birthday=_optional_text(payload.get("birthday")),
            place_of_birth=_optional_text(payload.get("place_of_birth")),
            profile_path=_optional_text(payload.get("profile_path")),
            known_for_department=_text(payload.get("known_for_department")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "biography": self.biography,
            "birthday": self.birthday,
            "placeOfBirth": self.place_of_birth,
            "profilePath": self.profile_path,
            "knownForDepartment": self.known_for_department,
        }


@dataclass(frozen=True)
class Review:
    id: str
    author: str
    content: str = ""
    rating: Optional[float] = None
    created_at: str = ""
    url: Optional[str] = None

    @classmethod
    def from_api(cls, row: Dict[str, Any]) -> "Review":
        details = row.get("author_details") or {}
        rating = details.get("rating") if isinstance(details, dict) else None
        return cls(
            id=_text(row.get("id")),
            author=_text(row.get("author")),
            content=_text(row.get("content")),
            rating=_float(rating) if rating is not None else None,
            created_at=_text(row.get("created_at")),
            url=_optional_text(row.get("url")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "author": self.author,
            "content": self.content,
            "rating": self.rating,
            "createdAt": self.created_at,
            "url": self.url,
        }
