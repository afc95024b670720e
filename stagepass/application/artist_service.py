import logging

from sqlalchemy.orm import Session

from stagepass.domain.exceptions import NotFoundError, UnauthenticatedError
from stagepass.domain.portfolio_policy import (
    MEDIA_IMAGE,
    MEDIA_VIDEO,
    check_portfolio_limit,
)
from stagepass.infrastructure.db.models import Artist, PortfolioItem
from stagepass.infrastructure.repositories.artist_repository import ArtistRepository
from stagepass.infrastructure.repositories.event_repository import EventRepository


logger = logging.getLogger(__name__)


class ArtistService:
    """Artist directory and portfolio media, with per-type upload allowances."""

    def __init__(self, db: Session):
        self.db = db
        self.artist_repository = ArtistRepository(db)
        self.event_repository = EventRepository(db)

    def list_artists(
        self,
        search: str | None = None,
        category: str | None = None,
    ) -> list[Artist]:
        return self.artist_repository.list_artists(search=search, category=category)

    def get_artist(self, artist_id: str) -> Artist:
        artist = self.artist_repository.get_by_id(artist_id)
        if artist is None:
            raise NotFoundError("Artist", artist_id)
        return artist

    def save_artist(
        self,
        user_id: str | None,
        name: str,
        profession: str,
        bio: str | None = None,
        image_url: str | None = None,
        categories: list[str] | None = None,
        artist_id: str | None = None,
    ) -> Artist:
        """
        Create an artist, or update one when ``artist_id`` is given.

        A non-empty ``categories`` list replaces the artist's categories;
        ``None`` or an empty list leaves them as they are.
        """
        self._require_user(user_id, "A signed-in user is required to manage artists")

        if artist_id:
            artist = self.get_artist(artist_id)
            artist.name = name
            artist.profession = profession
            artist.bio = bio
            artist.image_url = image_url
            self.db.flush()
        else:
            artist = self.artist_repository.create_artist(
                name=name,
                profession=profession,
                bio=bio,
                image_url=image_url,
            )

        if categories:
            found = {
                category.name: category
                for category in self.artist_repository.get_categories_by_name(categories)
            }
            for category_name in categories:
                if category_name not in found:
                    raise NotFoundError("Category", category_name)
            self.artist_repository.replace_categories(
                artist,
                [found[category_name].id for category_name in categories],
            )

        logger.info(
            "Artist saved. artist_id=%s user_id=%s updated=%s",
            artist.id,
            user_id,
            bool(artist_id),
        )
        return artist

    def get_media_counts(self, artist_id: str) -> dict[str, int]:
        counts = self.artist_repository.media_counts(artist_id)
        return {
            "images": counts.get(MEDIA_IMAGE, 0),
            "videos": counts.get(MEDIA_VIDEO, 0),
        }

    def list_portfolio(self, artist_id: str) -> list[PortfolioItem]:
        self.get_artist(artist_id)
        return self.artist_repository.list_portfolio(artist_id)

    def add_portfolio_item(
        self,
        user_id: str | None,
        artist_id: str,
        title: str,
        media_url: str,
        media_type: str,
        description: str = "",
    ) -> PortfolioItem:
        self._require_user(user_id, "A signed-in user is required to manage portfolios")

        if self.artist_repository.get_for_update(artist_id) is None:
            raise NotFoundError("Artist", artist_id)

        check_portfolio_limit(
            artist_id,
            media_type,
            self.artist_repository.count_media(artist_id, media_type),
        )

        item = self.artist_repository.add_portfolio_item(
            artist_id=artist_id,
            title=title,
            description=description,
            media_url=media_url,
            media_type=media_type,
        )
        logger.info(
            "Portfolio item added. artist_id=%s media_type=%s item_id=%s",
            artist_id,
            media_type,
            item.id,
        )
        return item

    def _require_user(self, user_id: str | None, message: str) -> None:
        if not user_id:
            raise UnauthenticatedError(message)
        if self.event_repository.get_profile(user_id) is None:
            raise NotFoundError("User", user_id)
