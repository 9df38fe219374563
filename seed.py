#sample catalog, loaded only into an empty table
from models import db, Movie, utcnow

SAMPLE_MOVIES = [
    ("The Shawshank Redemption", "Drama", 5, "https://images.unsplash.com/photo-1489599849927-2ee91cede3ba?w=400"),
    ("The Dark Knight", "Action", 5, "https://images.unsplash.com/photo-1509347528160-9a9e33742cdb?w=400"),
    ("Inception", "Sci-Fi", 5, "https://images.unsplash.com/photo-1536440136628-849c177e76a1?w=400"),
    ("Forrest Gump", "Drama", 5, "https://images.unsplash.com/photo-1485846234645-a62644f84728?w=400"),
    ("The Matrix", "Sci-Fi", 5, "https://images.unsplash.com/photo-1518676590629-3dcbd9c5a5c9?w=400"),
    ("Pulp Fiction", "Crime", 5, "https://images.unsplash.com/photo-1440404653325-ab127d49abc1?w=400"),
    ("The Godfather", "Crime", 5, "https://images.unsplash.com/photo-1478720568477-152d9b164e26?w=400"),
    ("Interstellar", "Sci-Fi", 5, "https://images.unsplash.com/photo-1419242902214-272b3f66ee7a?w=400"),
    ("Avengers: Endgame", "Action", 4, "https://images.unsplash.com/photo-1635805737707-575885ab0820?w=400"),
    ("Parasite", "Thriller", 5, "https://images.unsplash.com/photo-1542204165-65bf26472b9b?w=400"),
    ("Spider-Man: No Way Home", "Action", 4, "https://images.unsplash.com/photo-1626278664285-f796b9ee7806?w=400"),
    ("Joker", "Thriller", 5, "https://images.unsplash.com/photo-1574267432644-f610f1289f0c?w=400"),
]


def seed_if_empty() -> int:
    """Insert the sample movies when the table has no rows. Returns how many were added."""
    if db.session.query(Movie.id).first() is not None:
        return 0
    now = utcnow()
    rows = [
        Movie(title=title, genre=genre, rating=rating, poster_url=poster,
              created_at=now, updated_at=now)
        for title, genre, rating, poster in SAMPLE_MOVIES
    ]
    db.session.add_all(rows)
    db.session.commit()
    return len(rows)


def initialize_database(logger, seed: bool = True) -> None:
    """Create missing tables, then seed an empty catalog. Safe to run on every start."""
    db.create_all()
    logger.info("Database schema ensured")
    if not seed:
        return
    added = seed_if_empty()
    if added:
        logger.info("Seeded %d sample movies", added)
    else:
        logger.info("Database already contains data. Skipping seed.")


if __name__ == "__main__":
    from app import create_app

    app = create_app({"SEED_ON_STARTUP": False})
    with app.app_context():
        initialize_database(app.logger)
        print("Movies:", Movie.query.count())
