"""Like service layer."""

from __future__ import annotations

import asyncio

from folio.errors import DatabaseError
from folio.repositories.base import RelationalStore, StoreError, UniqueViolationError, eq
from folio.schemas.auth import Principal
from folio.schemas.like import LikeContentType, LikeSummary, ToggleLikeResponse

TABLE_LIKES = "likes"


class LikeService:
    def __init__(self, store: RelationalStore) -> None:
        self._store = store

    async def toggle_like(
        self,
        *,
        principal: Principal,
        content_type: LikeContentType,
        content_id: str,
    ) -> ToggleLikeResponse:
        filters = self._user_filters(principal.identity_id, content_type, content_id)
        try:
            removed = await self._store.delete(TABLE_LIKES, filters)
            if not removed:
                try:
                    await self._store.insert(
                        TABLE_LIKES,
                        {
                            "user_id": principal.identity_id,
                            "content_type": content_type.value,
                            "content_id": content_id,
                        },
                    )
                except UniqueViolationError:
                    # A concurrent toggle already liked it; the end state is the same.
                    pass
        except StoreError as exc:
            raise DatabaseError("Failed to toggle like") from exc

        count = await self._count(content_type, content_id)
        return ToggleLikeResponse(liked=not removed, count=count)

    async def get_like_summary(
        self,
        *,
        content_type: LikeContentType,
        content_id: str,
        principal: Principal | None,
    ) -> LikeSummary:
        """Like count and caller status, fetched concurrently since both are reads."""
        if principal is None:
            count = await self._count(content_type, content_id)
            liked = False
        else:
            count, liked = await asyncio.gather(
                self._count(content_type, content_id),
                self._has_liked(principal.identity_id, content_type, content_id),
            )
        return LikeSummary(content_type=content_type, content_id=content_id, count=count, liked=liked)

    async def _count(self, content_type: LikeContentType, content_id: str) -> int:
        try:
            return await self._store.count(
                TABLE_LIKES,
                [eq("content_type", content_type.value), eq("content_id", content_id)],
            )
        except StoreError as exc:
            raise DatabaseError("Failed to get like count") from exc

    async def _has_liked(self, user_id: str, content_type: LikeContentType, content_id: str) -> bool:
        try:
            return await self._store.count(TABLE_LIKES, self._user_filters(user_id, content_type, content_id)) > 0
        except StoreError as exc:
            raise DatabaseError("Failed to check like status") from exc

    @staticmethod
    def _user_filters(user_id: str, content_type: LikeContentType, content_id: str):
        return [
            eq("user_id", user_id),
            eq("content_type", content_type.value),
            eq("content_id", content_id),
        ]
