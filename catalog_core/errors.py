from flask import request, current_app
from werkzeug.exceptions import (
    HTTPException, BadRequest, NotFound, ServiceUnavailable, UnsupportedMediaType,
)
from sqlalchemy.exc import OperationalError
from typing import Any, Dict, List

from models import db, TITLE_MAX, GENRE_MAX, POSTER_URL_MAX, RATING_MIN, RATING_MAX

# -----------------------------
# Error types
# -----------------------------

class ValidationError(BadRequest):
    """One or more field constraints were violated; ``fields`` maps field -> messages."""
    error_code = "VALIDATION_ERROR"

    def __init__(self, fields: Dict[str, List[str]]):
        super().__init__("Validation failed")
        self.fields = fields


class NotFoundError(NotFound):
    error_code = "NOT_FOUND"

    def __init__(self, description: str = "Movie not found"):
        super().__init__(description)


class StoreUnavailableError(ServiceUnavailable):
    error_code = "STORE_UNAVAILABLE"

    def __init__(self):
        super().__init__("The movie store is currently unavailable")


class FieldError(ValueError):
    pass


# -----------------------------
# JSON error handlers
# -----------------------------

def _error_body(e: HTTPException) -> Dict[str, Any]:
    body = {
        "status": e.code,
        "code": getattr(e, "error_code", None) or e.name.replace(" ", "_").upper(),
        "message": e.description,
    }
    fields = getattr(e, "fields", None)
    if fields:
        body["fields"] = fields
    return {"error": body}


def install_json_error_handlers(app):
    @app.errorhandler(HTTPException)
    def handle_http(e: HTTPException):
        return _error_body(e), e.code

    @app.errorhandler(OperationalError)
    def handle_store_down(e: OperationalError):
        db.session.rollback()
        current_app.logger.error("Store unavailable on %s %s: %s", request.method, request.path, e.orig)
        err = StoreUnavailableError()
        return _error_body(err), err.code

    @app.errorhandler(Exception)
    def handle_generic(e: Exception):
        current_app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        # Avoid leaking details in production responses
        return {
            "error": {
                "status": 500,
                "code": "INTERNAL_SERVER_ERROR",
                "message": "Internal Server Error"
            }
        }, 500


# -----------------------------
# Validators & helpers
# -----------------------------

def expect_json():
    if request.method in {"POST", "PUT", "PATCH"}:
        ctype = request.headers.get("Content-Type", "")
        if "application/json" not in ctype:
            raise UnsupportedMediaType("Use Content-Type: application/json")

def read_json() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        raise BadRequest("Invalid or missing JSON body")
    if not isinstance(data, dict):
        raise BadRequest("JSON body must be an object")
    return data

def validate_title(v: Any) -> str:
    if v is not None and not isinstance(v, str):
        raise FieldError("title must be a string")
    title = (v or "").strip()
    if not title:
        raise FieldError("title is required")
    if len(title) > TITLE_MAX:
        raise FieldError(f"title must be ≤ {TITLE_MAX} chars")
    return title

def _optional_text(name: str, v: Any, limit: int) -> str | None:
    if v is None:
        return None
    if not isinstance(v, str):
        raise FieldError(f"{name} must be a string")
    text = v.strip()
    if not text:
        return None
    if len(text) > limit:
        raise FieldError(f"{name} must be ≤ {limit} chars")
    return text

def validate_genre(v: Any) -> str | None:
    return _optional_text("genre", v, GENRE_MAX)

def validate_poster_url(v: Any) -> str | None:
    return _optional_text("posterUrl", v, POSTER_URL_MAX)

def parse_rating(v: Any) -> int | None:
    if v is None:
        return None
    msg = f"rating must be an integer between {RATING_MIN} and {RATING_MAX}"
    # JSON integers only; bool is an int subclass in Python
    if not isinstance(v, int) or isinstance(v, bool):
        raise FieldError(msg)
    if not (RATING_MIN <= v <= RATING_MAX):
        raise FieldError(msg)
    return v

_MOVIE_FIELDS = (
    ("title", validate_title),
    ("genre", validate_genre),
    ("rating", parse_rating),
    ("posterUrl", validate_poster_url),
)

def validate_movie_payload(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate a create/update body and return the cleaned values keyed by JSON name.
    Every violated field is reported at once through ValidationError.
    """
    cleaned: Dict[str, Any] = {}
    errors: Dict[str, List[str]] = {}
    for name, validator in _MOVIE_FIELDS:
        try:
            cleaned[name] = validator(data.get(name))
        except FieldError as e:
            errors.setdefault(name, []).append(str(e))
    if errors:
        raise ValidationError(errors)
    return cleaned
