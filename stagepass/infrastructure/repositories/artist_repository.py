# stagepass/infrastructure/repositories/artist_repository.py

from sqlalchemy.orm import Session, selectinload
from sqlalchemy import delete, func, or_, select

from stagepass.infrastructure.db.models import (
    Artist,
    ArtistCategory,
    Category,
    PortfolioItem,
)


class ArtistRepository:

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, artist_id: str) -> Artist | None:
        stmt = (
            select(Artist)
            .options(selectinload(Artist.categories))
            .where(Artist.id == artist_id)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def get_for_update(self, artist_id: str) -> Artist | None:
        """
        Lock the artist row so concurrent portfolio writes for the same
        artist are counted one after another.
        """
        stmt = select(Artist).where(Artist.id == artist_id).with_for_update()
        return self.db.execute(stmt).scalar_one_or_none()

    def list_artists(
        self,
        search: str | None = None,
        category: str | None = None,
    ) -> list[Artist]:
        stmt = select(Artist).options(selectinload(Artist.categories))

        if search:
            term = f"%{search.lower()}%"
            stmt = stmt.where(
                or_(
                    func.lower(Artist.name).like(term),
                    func.lower(Artist.profession).like(term),
                    func.lower(Artist.bio).like(term),
                )
            )

        if category and category != "all":
            stmt = (
                stmt.join(ArtistCategory, ArtistCategory.artist_id == Artist.id)
                .join(Category, ArtistCategory.category_id == Category.id)
                .where(Category.name == category)
            )

        stmt = stmt.order_by(Artist.name)
        return list(self.db.execute(stmt).scalars().all())

    def create_artist(
        self,
        name: str,
        profession: str,
        bio: str | None = None,
        image_url: str | None = None,
    ) -> Artist:
        artist = Artist(
            name=name,
            profession=profession,
            bio=bio,
            image_url=image_url,
        )
        self.db.add(artist)
        self.db.flush()
        return artist

    def get_categories_by_name(self, names: list[str]) -> list[Category]:
        stmt = select(Category).where(Category.name.in_(names))
        return list(self.db.execute(stmt).scalars().all())

    def replace_categories(self, artist: Artist, category_ids: list[str]) -> None:
        self.db.execute(
            delete(ArtistCategory).where(ArtistCategory.artist_id == artist.id)
        )
        for category_id in dict.fromkeys(category_ids):
            self.db.add(ArtistCategory(artist_id=artist.id, category_id=category_id))
        self.db.flush()
        self.db.expire(artist, ["categories"])

    # -----------------------------
    # Portfolio
    # -----------------------------
    def list_portfolio(self, artist_id: str) -> list[PortfolioItem]:
        stmt = (
            select(PortfolioItem)
            .where(PortfolioItem.artist_id == artist_id)
            .order_by(PortfolioItem.created_at.desc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def count_media(self, artist_id: str, media_type: str) -> int:
        stmt = (
            select(func.count())
            .select_from(PortfolioItem)
            .where(PortfolioItem.artist_id == artist_id)
            .where(PortfolioItem.media_type == media_type)
        )
        return self.db.execute(stmt).scalar_one()

    def media_counts(self, artist_id: str) -> dict[str, int]:
        stmt = (
            select(PortfolioItem.media_type, func.count())
            .where(PortfolioItem.artist_id == artist_id)
            .group_by(PortfolioItem.media_type)
        )
        return {media_type: count for media_type, count in self.db.execute(stmt).all()}

    def add_portfolio_item(
        self,
        artist_id: str,
        title: str,
        description: str,
        media_url: str,
        media_type: str,
    ) -> PortfolioItem:
        item = PortfolioItem(
            artist_id=artist_id,
            title=title,
            description=description,
            media_url=media_url,
            media_type=media_type,
        )
        self.db.add(item)
        self.db.flush()
        return item
