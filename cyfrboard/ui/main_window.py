# Rev 0.2.0
# cyfrboard - Main Window: top bar, navigation dock, routed central stack

from __future__ import annotations

import logging

from PySide6.QtCore import Qt
from PySide6.QtWidgets import QMainWindow, QWidget, QVBoxLayout, QStackedWidget, QDockWidget

from cyfrboard.ui.account_view import AccountView
from cyfrboard.ui.auth_view import AuthView
from cyfrboard.ui.panels.navigation_panel import NavigationPanel
from cyfrboard.ui.panels.top_bar import TopBar
from cyfrboard.ui.task_board_view import TaskBoardView
from cyfrboard.ui.window_mode import apply_window_settings, remember_window_settings
from cyfrboard.ui.workspace_view import WorkspaceView
from cyfrboard.ui.workspaces_view import WorkspacesView
from cyfrboard.utils.config import save_settings
from cyfrboard.viewmodels.account_viewmodel import AccountViewModel
from cyfrboard.viewmodels.auth_viewmodel import AuthViewModel
from cyfrboard.viewmodels.shell_viewmodel import ShellViewModel
from cyfrboard.viewmodels.task_board_viewmodel import TaskBoardViewModel
from cyfrboard.viewmodels.workspace_viewmodel import WorkspaceViewModel
from cyfrboard.viewmodels.workspaces_viewmodel import WorkspacesViewModel

log = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    """
    One page at a time in the central stack. Every navigation builds a fresh
    view model and closes the previous one, so late results of the old page
    are dropped instead of painting over the new one.
    """

    def __init__(self, *, ctx, settings: dict, logfile: str | None = None, parent=None):
        super().__init__(parent)
        self._ctx = ctx
        self._settings = settings
        self._logfile = logfile
        self._page_vm = None
        self._page = None

        self.setWindowTitle("CYFR Board")

        # ---- shell ----
        self._shell_vm = ShellViewModel(ctx.session, ctx.workspaces)
        self._top = TopBar(self)
        self._nav = NavigationPanel(self)
        self._stack = QStackedWidget(self)

        central = QWidget(self)
        v = QVBoxLayout(central)
        v.setContentsMargins(0, 0, 0, 0)
        v.addWidget(self._top)
        v.addWidget(self._stack, 1)
        self.setCentralWidget(central)

        dock = QDockWidget("Navigation", self)
        dock.setObjectName("NavigationDock")
        dock.setAllowedAreas(Qt.LeftDockWidgetArea | Qt.RightDockWidgetArea)
        dock.setFeatures(QDockWidget.DockWidgetMovable)
        dock.setWidget(self._nav)
        self.addDockWidget(Qt.LeftDockWidgetArea, dock)
        self._dock = dock

        # ---- wiring ----
        self._top.accountRequested.connect(self.open_account)
        self._top.signOutRequested.connect(self._on_sign_out)
        self._nav.workspaceSelected.connect(self.open_workspace)
        self._nav.allWorkspacesRequested.connect(self.open_workspaces)
        self._shell_vm.workspacesChanged.connect(self._nav.set_workspaces)
        self._shell_vm.identityChanged.connect(self._on_identity_changed)
        ctx.session.loginRequired.connect(self.show_login)

        apply_window_settings(self, settings)
        self._on_identity_changed(None)

    # -------------------- lifecycle --------------------

    def start(self) -> None:
        self.show_landing()

    def shutdown(self) -> None:
        self._close_page()
        self._shell_vm.close()
        try:
            save_settings(remember_window_settings(self, self._settings))
        except OSError as exc:
            log.warning("Could not save window settings: %s", exc)

    # -------------------- routing --------------------

    def _mount(self, vm, page: QWidget) -> None:
        self._close_page()
        self._page_vm = vm
        self._page = page
        self._stack.addWidget(page)
        self._stack.setCurrentWidget(page)

    def _close_page(self) -> None:
        if self._page_vm is not None:
            self._page_vm.close()
            self._page_vm = None
        if self._page is not None:
            self._stack.removeWidget(self._page)
            self._page.deleteLater()
            self._page = None

    def _auth_page(self) -> AuthViewModel:
        vm = AuthViewModel(self._ctx.session, self._ctx.auth)
        vm.signedIn.connect(lambda _identity: self.open_workspaces())
        self._mount(vm, AuthView(vm))
        return vm

    def show_landing(self) -> None:
        vm = self._auth_page()
        vm.run(vm.landing())

    def show_login(self) -> None:
        if isinstance(self._page, AuthView):
            return
        log.info("Showing login")
        self._auth_page()

    def open_workspaces(self) -> None:
        vm = WorkspacesViewModel(self._ctx.session, self._ctx.workspaces)
        page = WorkspacesView(vm)
        page.workspaceChosen.connect(self.open_workspace)
        vm.workspaceCreated.connect(lambda _ws: self._shell_vm.refresh())
        self._mount(vm, page)
        vm.start()

    def open_workspace(self, workspace_id: str) -> None:
        vm = WorkspaceViewModel(self._ctx.session, self._ctx.workspaces, self._ctx.projects)
        page = WorkspaceView(vm)
        page.projectChosen.connect(self.open_project)
        page.backRequested.connect(self.open_workspaces)
        vm.workspaceDeleted.connect(lambda _wid: self._after_workspace_deleted())
        self._mount(vm, page)
        vm.start(workspace_id)

    def open_project(self, project_id: str) -> None:
        vm = TaskBoardViewModel(
            self._ctx.session, self._ctx.projects, self._ctx.tasks,
            self._ctx.workspaces, self._ctx.profiles,
        )
        page = TaskBoardView(vm)
        page.backRequested.connect(self._back_from_board)
        vm.projectDeleted.connect(self.open_workspace)
        self._mount(vm, page)
        vm.start(project_id)

    def open_account(self) -> None:
        vm = AccountViewModel(self._ctx.session, self._ctx.profiles)
        self._mount(vm, AccountView(vm))
        vm.start()

    # -------------------- shell events --------------------

    def _back_from_board(self, workspace_id: str) -> None:
        if workspace_id:
            self.open_workspace(workspace_id)
        else:
            self.open_workspaces()

    def _after_workspace_deleted(self) -> None:
        self._shell_vm.refresh()
        self.open_workspaces()

    def _on_identity_changed(self, identity) -> None:
        self._top.set_identity(identity)
        self._dock.setVisible(identity is not None)

    def _on_sign_out(self) -> None:
        self._shell_vm.run(self._shell_vm.sign_out())
