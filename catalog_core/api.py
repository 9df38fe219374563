from datetime import datetime, timezone
from flask import Blueprint, current_app, request
from sqlalchemy import inspect, text
from models import db, Movie, utcnow
from .errors import expect_json, read_json, validate_movie_payload, NotFoundError
from .listing import ListingParams, list_movies as run_listing, distinct_genres
from .metrics import MOVIE_WRITES, LISTING_RESULTS

api_bp = Blueprint("api", __name__, url_prefix="/api")  # blueprint for API routes

def _utc_iso(dt: datetime) -> str:
    # stored naive, always UTC
    return dt.replace(tzinfo=timezone.utc).isoformat()

def movie_to_dict(m: Movie):
    return {
        "id": m.id,
        "title": m.title,
        "genre": m.genre,
        "rating": m.rating,
        "posterUrl": m.poster_url,
        "createdAt": _utc_iso(m.created_at),
        "updatedAt": _utc_iso(m.updated_at),
    }

def get_movie_or_404(movie_id: int) -> Movie:
    m = db.session.get(Movie, movie_id)
    if m is None:
        raise NotFoundError()
    return m

def _apply_fields(m: Movie, fields: dict):
    # full replace: absent optional fields clear the stored value
    m.title = fields["title"]
    m.genre = fields["genre"]
    m.rating = fields["rating"]
    m.poster_url = fields["posterUrl"]

@api_bp.get("/movies")
def list_movies():
    # GET /api/movies?search=keyword&genre=action&sortBy=title&sortOrder=asc
    params = ListingParams.from_args(request.args)
    items = run_listing(Movie.query.all(), params)
    filtered = "yes" if (params.search or params.genre) else "no"
    LISTING_RESULTS.labels(params.sort_by, filtered).observe(len(items))
    return [movie_to_dict(m) for m in items]

@api_bp.get("/movies/genres")
def list_genres():
    rows = db.session.query(Movie.genre).distinct().all()
    return distinct_genres(g for (g,) in rows)

@api_bp.post("/movies")
def create_movie():
    expect_json()
    fields = validate_movie_payload(read_json())

    now = utcnow()
    m = Movie(created_at=now, updated_at=now)
    _apply_fields(m, fields)
    db.session.add(m); db.session.commit()
    MOVIE_WRITES.labels("create").inc()
    current_app.logger.info("Created movie %s %r", m.id, m.title)
    return movie_to_dict(m), 201

@api_bp.get("/movies/<int:movie_id>")
def get_movie(movie_id):
    return movie_to_dict(get_movie_or_404(movie_id))

@api_bp.put("/movies/<int:movie_id>")
def update_movie(movie_id):
    expect_json()
    data = read_json()
    m = get_movie_or_404(movie_id)
    fields = validate_movie_payload(data)

    _apply_fields(m, fields)
    # refresh even when nothing changed; never earlier than created_at
    m.updated_at = max(utcnow(), m.created_at)
    db.session.commit()
    MOVIE_WRITES.labels("update").inc()
    return movie_to_dict(m)

@api_bp.delete("/movies/<int:movie_id>")
def delete_movie(movie_id):
    m = get_movie_or_404(movie_id)
    db.session.delete(m); db.session.commit()
    MOVIE_WRITES.labels("delete").inc()
    current_app.logger.info("Deleted movie %s", movie_id)
    return {"deleted": movie_id, "message": "Movie deleted successfully"}

# ---- operational endpoints ----

def _schema_status():
    existing = set(inspect(db.engine).get_table_names())
    expected = sorted(db.metadata.tables)
    return {
        "tables": [t for t in expected if t in existing],
        "missingTables": [t for t in expected if t not in existing],
    }

@api_bp.get("/movies/health")
def movies_health():
    try:
        db.session.execute(text("SELECT 1"))
        status = _schema_status()
    except Exception as e:
        db.session.rollback()
        current_app.logger.error("Health check failed: %s", e)
        return {"status": "unhealthy", "database": {"canConnect": False}}, 500

    healthy = not status["missingTables"]
    body = {
        "status": "healthy" if healthy else "degraded",
        "database": {"canConnect": True, **status},
    }
    return body, 200

@api_bp.post("/movies/migrate")
def run_migrations():
    current_app.logger.info("Manual migration requested...")
    db.create_all()
    status = _schema_status()
    return {"message": "Migrations applied successfully", **status}
