from collections.abc import Sequence

DEFAULT_QUALITY_TERMS = ("popular", "acclaimed", "award", "winning", "hit", "successful", "top", "best", "famous", "great")
DEFAULT_BASE_TERMS = ("movie", "film", "cinema", "entertainment")


def build_search_terms(
    genre: str | None = None,
    year: str | None = None,
    quality_terms: Sequence[str] = DEFAULT_QUALITY_TERMS,
    base_terms: Sequence[str] = DEFAULT_BASE_TERMS,
    max_terms: int = 10,
    max_quality_terms: int = 5,
    max_base_terms: int = 3,
) -> list[str]:
    """Keyword searches used to approximate a "popular movies" listing.

    OMDB has no popularity endpoint, so the listing is assembled from a few
    broad searches: the year, the genre, then generic quality and category
    words from the configured pools.
    """
    terms: list[str] = []
    if year:
        terms.append(year)
    if genre:
        terms.append(genre.lower())
    terms.extend(quality_terms[:max_quality_terms])
    terms.extend(base_terms[:max_base_terms])

    return [term for term in terms if term.strip()][:max_terms]
