from sqlalchemy.ext.asyncio import AsyncSession


class BaseRepository:
    """Thin base class that holds the database session.

    Every concrete repository receives an ``AsyncSession`` at
    construction time so that the customer, lead, message and duplicate
    repositories of one intake request share a single unit of work.
    Services decide where the commit boundaries fall.
    """

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def flush(self) -> None:
        """Flush pending changes without committing."""
        await self._db.flush()

    async def commit(self) -> None:
        """Commit the current transaction."""
        await self._db.commit()

    async def rollback(self) -> None:
        """Roll back the current transaction.

        Every instance loaded in the session is expired afterwards;
        re-query before touching them again.
        """
        await self._db.rollback()
