# Rev 0.2.0
# cyfrboard – ProfileRepository
from __future__ import annotations

from typing import List, Optional, Sequence

from cyfrboard.models.entities import Profile
from cyfrboard.repositories.gateway import NoRowsError, SupabaseGateway, eq, in_

PROFILE_COLUMNS = "id, first_name, second_name, phone"


class ProfileRepository:
    def __init__(self, gateway: SupabaseGateway):
        self._gw = gateway

    async def get_profile(self, user_id: str) -> Optional[Profile]:
        """None when the identity has not filled the account form yet."""
        try:
            row = await self._gw.select("profiles", PROFILE_COLUMNS, filters={"id": eq(user_id)}, single=True)
        except NoRowsError:
            return None
        return Profile.from_row(row)

    async def get_profiles(self, user_ids: Sequence[str]) -> List[Profile]:
        if not user_ids:
            return []
        rows = await self._gw.select("profiles", "id, first_name, second_name", filters={"id": in_(user_ids)})
        return [Profile.from_row(r) for r in rows]

    async def upsert_profile(self, profile: Profile) -> Profile:
        row = await self._gw.upsert(
            "profiles",
            {
                "id": profile.id,
                "first_name": profile.first_name or None,
                "second_name": profile.second_name or None,
                "phone": profile.phone,
            },
            on_conflict="id",
            columns=PROFILE_COLUMNS,
        )
        return Profile.from_row(row) if row else profile
