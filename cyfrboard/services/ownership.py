# Rev 0.2.0
# cyfrboard – workspace ownership gate
from __future__ import annotations

import logging

from cyfrboard.models.types import OWNER_ROLE

log = logging.getLogger(__name__)

NOT_OWNER = "Only the workspace owner can delete it."


async def is_workspace_owner(workspaces_repo, workspace_id: str, user_id: str) -> bool:
    """Role of this identity in this specific workspace, compared to the literal owner role."""
    role = await workspaces_repo.get_membership_role(workspace_id, user_id)
    log.debug("Role of %s in %s: %s", user_id, workspace_id, role)
    return role == OWNER_ROLE
