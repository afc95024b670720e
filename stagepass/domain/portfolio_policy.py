from stagepass.domain.exceptions import PortfolioLimitReachedError


MEDIA_IMAGE = "image"
MEDIA_VIDEO = "video"

MAX_IMAGES = 3
MAX_VIDEOS = 3

# Links carry no uploaded media and are not capped.
_LIMITS = {
    MEDIA_IMAGE: MAX_IMAGES,
    MEDIA_VIDEO: MAX_VIDEOS,
}


def limit_for(media_type: str) -> int | None:
    return _LIMITS.get(media_type)


def check_portfolio_limit(artist_id: str, media_type: str, current_count: int) -> None:
    """Raise if one more item of ``media_type`` would exceed the artist's allowance."""
    limit = limit_for(media_type)
    if limit is not None and current_count >= limit:
        raise PortfolioLimitReachedError(artist_id, media_type, limit)
