"""
Listing query: search + genre filter + sort over a snapshot of the catalog.

Works on any objects exposing ``title``, ``genre`` and ``rating`` attributes
(``Movie`` rows in the app, plain namespaces in tests) so the ordering does not
depend on the database's collation or its idea of lower().
"""
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional

SORT_FIELDS = {"title", "rating"}

# A-Z -> a-z only; everything else compared as-is
_ASCII_FOLD = str.maketrans("ABCDEFGHIJKLMNOPQRSTUVWXYZ", "abcdefghijklmnopqrstuvwxyz")


def ascii_fold(s: str) -> str:
    return s.translate(_ASCII_FOLD)


def _non_blank(v: Optional[str]) -> Optional[str]:
    # whitespace only decides blankness; the value itself is matched as given
    return v if v and v.strip() else None


@dataclass(frozen=True)
class ListingParams:
    search: Optional[str] = None
    genre: Optional[str] = None
    sort_by: str = "title"
    descending: bool = False

    @classmethod
    def from_args(cls, args: Mapping[str, str]) -> "ListingParams":
        """Build params from query args; unknown or malformed values fall back to defaults."""
        sort_by = ascii_fold((args.get("sortBy") or "").strip())
        if sort_by not in SORT_FIELDS:
            sort_by = "title"
        order = ascii_fold((args.get("sortOrder") or "").strip())
        return cls(
            search=_non_blank(args.get("search")),
            genre=_non_blank(args.get("genre")),
            sort_by=sort_by,
            descending=(order == "desc"),
        )


def matches(movie, params: ListingParams) -> bool:
    if params.search and ascii_fold(params.search) not in ascii_fold(movie.title or ""):
        return False
    if params.genre:
        if movie.genre is None or ascii_fold(movie.genre) != ascii_fold(params.genre):
            return False
    return True


def _sort_by_rating(movies: List, descending: bool) -> List:
    rated = sorted((m for m in movies if m.rating is not None), key=lambda m: m.title)
    # stable sort keeps the title order inside equal ratings, in both directions
    rated.sort(key=lambda m: m.rating, reverse=descending)
    unrated = sorted((m for m in movies if m.rating is None), key=lambda m: m.title)
    # no rating counts as lower than any rating
    return rated + unrated if descending else unrated + rated


def list_movies(movies: Iterable, params: ListingParams) -> List:
    picked = [m for m in movies if matches(m, params)]
    if params.sort_by == "rating":
        return _sort_by_rating(picked, params.descending)
    return sorted(picked, key=lambda m: m.title, reverse=params.descending)


def distinct_genres(genres: Iterable[Optional[str]]) -> List[str]:
    return sorted({g for g in genres if g and g.strip()})
