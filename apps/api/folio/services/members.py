"""Member profile service layer."""

import logging

from folio.core.logging_safety import safe_log_identifier
from folio.errors import DatabaseError, NotFoundError
from folio.repositories.base import RelationalStore, Row, StoreError, eq
from folio.schemas.auth import PermissionLevel, Principal
from folio.schemas.member import Member
from folio.services.principals import TABLE_MEMBERS

logger = logging.getLogger(__name__)


class MemberService:
    def __init__(self, store: RelationalStore) -> None:
        self._store = store

    async def get_member(self, member_id: str) -> Member:
        try:
            row = await self._store.select_one(TABLE_MEMBERS, [eq("id", member_id)])
        except StoreError as exc:
            raise DatabaseError("Failed to fetch member") from exc
        if row is None:
            raise NotFoundError()
        return self._to_member(row)

    async def update_permission(self, *, admin: Principal, member_id: str, permission: PermissionLevel) -> Member:
        try:
            rows = await self._store.update(TABLE_MEMBERS, [eq("id", member_id)], {"permission": permission.value})
        except StoreError as exc:
            raise DatabaseError("Failed to update member permission") from exc
        if not rows:
            raise NotFoundError()

        logger.info(
            "member.permission_changed member_id=%s admin_id=%s permission=%s",
            safe_log_identifier(member_id, prefix="pid"),
            safe_log_identifier(admin.identity_id, prefix="pid"),
            permission.value,
        )
        return self._to_member(rows[0])

    @staticmethod
    def _to_member(row: Row) -> Member:
        return Member(
            id=row["id"],
            username=row.get("username") or "",
            permission=PermissionLevel(row.get("permission") or PermissionLevel.GUEST.value),
            is_subscriber=bool(row.get("is_subscriber")),
            bio=row.get("bio"),
            created_at=row["created_at"],
        )
