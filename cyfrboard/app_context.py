# cyfrboard application context
# Rev 0.2.0

from __future__ import annotations
from dataclasses import dataclass

from .repositories.auth_repository import AuthRepository
from .repositories.gateway import SupabaseGateway
from .repositories.profile_repository import ProfileRepository
from .repositories.project_repository import ProjectRepository
from .repositories.task_repository import TaskRepository
from .repositories.workspace_repository import WorkspaceRepository
from .services.session_guard import SessionGuard
from .utils.config import BackendConfig
from .utils.logging_setup import get_logger


@dataclass
class AppContext:
    """Central container for shared app resources."""
    gateway: SupabaseGateway
    auth: AuthRepository
    workspaces: WorkspaceRepository
    projects: ProjectRepository
    tasks: TaskRepository
    profiles: ProfileRepository
    session: SessionGuard

    @classmethod
    def create(cls, cfg: BackendConfig, gateway: SupabaseGateway | None = None) -> "AppContext":
        """Build the gateway, repositories and session guard."""
        log = get_logger("AppContext")
        gw = gateway or SupabaseGateway.from_config(cfg)
        auth = AuthRepository(gw)
        ctx = cls(
            gateway=gw,
            auth=auth,
            workspaces=WorkspaceRepository(gw),
            projects=ProjectRepository(gw),
            tasks=TaskRepository(gw),
            profiles=ProfileRepository(gw),
            session=SessionGuard(auth),
        )
        log.info("AppContext initialized for backend %s", cfg.url)
        return ctx

    async def aclose(self) -> None:
        await self.gateway.aclose()
