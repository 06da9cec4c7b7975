"""FastAPI app exposing the Cinedash dashboard, search and movie lookups."""

from __future__ import annotations

from concurrent.futures import wait
from typing import Any, Dict, Optional

from fastapi import Body, FastAPI, HTTPException, Query
from pydantic import BaseModel

from ..core.errors import ConfigurationError, DashboardError
from ..models.category import Category
from .runtime import CinedashRuntime, build_runtime


class SearchQueryRequest(BaseModel):
    q: str = ""


class RefreshRequest(BaseModel):
    wait: bool = False
    timeout_seconds: Optional[float] = None


def _image_base(runtime: CinedashRuntime) -> Optional[str]:
    return getattr(runtime.source, "image_base", None) or None


def _serialize_dashboard(runtime: CinedashRuntime) -> Dict[str, Any]:
    slots = runtime.store.snapshot()
    image_base = _image_base(runtime)
    return {
        "categories": [slot.to_dict(image_base) for slot in slots.values()],
        "status": runtime.store.aggregate_status().to_dict(),
    }


def _category_or_404(key: str) -> Category:
    try:
        return Category.from_key(key)
    except KeyError:
        raise HTTPException(status_code=404, detail="Category not found.")


def _lookup(runtime: CinedashRuntime, method: str, *args, **kwargs) -> Any:
    call = getattr(runtime.source, method, None)
    if not callable(call):
        raise HTTPException(status_code=501, detail=f"{runtime.source.name} does not support {method}.")
    try:
        return call(*args, **kwargs)
    except DashboardError as exc:
        raise HTTPException(status_code=502, detail=exc.message) from exc


def create_app(runtime: Optional[CinedashRuntime] = None) -> FastAPI:
    runtime = runtime or build_runtime()
    app = FastAPI(title="Cinedash", version="1.0.0")
    app.state.runtime = runtime

    @app.get("/api/dashboard")
    def dashboard() -> Dict:
        return _serialize_dashboard(runtime)

    @app.post("/api/dashboard/refresh")
    def refresh_dashboard(body: Optional[RefreshRequest] = None) -> Dict:
        body = body or RefreshRequest()
        runtime.orchestrator.refresh_all()
        settled = True
        if body.wait:
            settled = runtime.orchestrator.wait(timeout=body.timeout_seconds)
        return {"settled": settled, **_serialize_dashboard(runtime)}

    @app.post("/api/dashboard/{category}/refresh")
    def refresh_category(category: str, body: Optional[RefreshRequest] = None) -> Dict:
        body = body or RefreshRequest()
        resolved = _category_or_404(category)
        future = runtime.orchestrator.refresh_category(resolved)
        if body.wait:
            wait([future], timeout=body.timeout_seconds)
        return runtime.store.get(resolved).to_dict(_image_base(runtime))

    @app.get("/api/dashboard/{category}")
    def category_slot(category: str) -> Dict:
        return runtime.store.get(_category_or_404(category)).to_dict(_image_base(runtime))

    @app.get("/api/status")
    def status() -> Dict:
        return {
            **runtime.store.aggregate_status().to_dict(),
            "source": runtime.source.healthcheck(),
        }

    @app.get("/api/settings")
    def get_settings() -> Dict:
        return {"settings": runtime.settings.get_all()}

    @app.patch("/api/settings")
    def patch_settings(body: Dict[str, Any] = Body(default={})):  # noqa: B008
        updates = {k: v for k, v in body.items() if v is not None}
        if not updates:
            return {"ok": True, "settings": runtime.settings.get_all()}

        if "trending_periods" in updates:
            periods = updates["trending_periods"]
            if not isinstance(periods, dict):
                raise HTTPException(status_code=400, detail="trending_periods must be an object.")
            try:
                runtime.orchestrator.set_trending_periods(periods)
            except ConfigurationError as exc:
                raise HTTPException(status_code=400, detail=exc.message) from exc

        runtime.settings.update(updates)
        return {"ok": True, "settings": runtime.settings.get_all()}

    @app.post("/api/settings/reset")
    def reset_settings() -> Dict:
        runtime.settings.reset()
        return {"ok": True, "settings": runtime.settings.get_all()}

    @app.get("/api/search")
    def search(q: str = Query(default="")) -> Dict:
        results = runtime.index.search(q)
        return {
            "query": q,
            "results": [movie.to_dict(_image_base(runtime)) for movie in results],
            "noResults": bool(q) and not results,
        }

    @app.get("/api/search/remote")
    def remote_search(q: str = Query(default=""), page: int = Query(default=1, ge=1)) -> Dict:
        movies = _lookup(runtime, "search_movies", q, page=page)
        return {
            "query": q,
            "page": page,
            "results": [movie.to_dict(_image_base(runtime)) for movie in movies],
        }

    @app.post("/api/search/query")
    def set_search_query(body: SearchQueryRequest) -> Dict:
        runtime.search.set_query(body.q)
        return runtime.search.snapshot(_image_base(runtime))

    @app.get("/api/search/results")
    def search_results() -> Dict:
        return runtime.search.snapshot(_image_base(runtime))

    @app.get("/api/movies/{movie_id}")
    def movie_details(movie_id: str) -> Dict:
        details = _lookup(runtime, "movie_details", movie_id)
        return details.to_dict(_image_base(runtime))

    @app.get("/api/movies/{movie_id}/cast")
    def movie_cast(movie_id: str) -> Dict:
        cast = _lookup(runtime, "cast_members", movie_id)
        return {"movieId": movie_id, "cast": [member.to_dict() for member in cast]}

    @app.get("/api/movies/{movie_id}/reviews")
    def movie_reviews(movie_id: str, page: int = Query(default=1, ge=1)) -> Dict:
        reviews = _lookup(runtime, "reviews", movie_id, page=page)
        return {"movieId": movie_id, "reviews": [review.to_dict() for review in reviews]}

    @app.get("/api/movies/{movie_id}/recommendations")
    def movie_recommendations(movie_id: str) -> Dict:
        movies = _lookup(runtime, "recommendations", movie_id)
        return {"movieId": movie_id, "results": [movie.to_dict(_image_base(runtime)) for movie in movies]}

    @app.get("/api/people/{person_id}")
    def person_details(person_id: str) -> Dict:
        person = _lookup(runtime, "person_details", person_id)
        return person.to_dict()

    return app


app = create_app()
