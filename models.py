from datetime import datetime, timezone
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

TITLE_MAX = 200
GENRE_MAX = 100
POSTER_URL_MAX = 500
RATING_MIN, RATING_MAX = 1, 5


def utcnow() -> datetime:
    # naive UTC, SQLite drops tzinfo anyway
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Movie(db.Model): #movie model
    __tablename__ = "movie"
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(TITLE_MAX), nullable=False, index=True)
    genre = db.Column(db.String(GENRE_MAX), nullable=True, index=True)
    rating = db.Column(db.Integer, nullable=True)          # 1–5 when set
    poster_url = db.Column(db.String(POSTER_URL_MAX), nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        db.CheckConstraint(
            f"rating IS NULL OR (rating >= {RATING_MIN} AND rating <= {RATING_MAX})",
            name="ck_movie_rating_range",
        ),
    )

    def __repr__(self):
        return f"<Movie {self.id} {self.title!r}>" #rep of the movie object
