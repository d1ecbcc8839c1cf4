"""
End-to-end installation sequence.

Order matters:
1. Root check, before anything is touched.
2. Credentials, before any artifact that embeds them.
3. Router instructions and the operator pause, then the connection prompts.
4. Host provisioning steps, each aborting the run on failure.
"""
from __future__ import annotations

import os
from typing import Callable, List, Optional, Tuple

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from vyprovision.config.config import Config
from vyprovision.constants import VYOS_API_KEY_ID
from vyprovision.context import InstallContext
from vyprovision.credentials import CredentialSet
from vyprovision.exceptions import ExternalCommandFailure
from vyprovision.monitoring.logger import get_logger
from vyprovision.prompts import collect_router_settings, wait_for_operator
from vyprovision.runtime.guards import detect_server_ip, require_root
from vyprovision.runtime.shell import CommandRunner
from vyprovision.steps import backend, database, frontend, packages, repository, service_user, systemd

logger = get_logger(__name__)

Step = Tuple[str, Callable[[], object]]


def router_commands(api_key: str) -> List[str]:
    """Commands the operator runs on the VyOS router to enable the REST API."""
    return [
        "conf",
        f"set service https api keys id {VYOS_API_KEY_ID} key '{api_key}'",
        "set service https api rest",
        "# optional:",
        "# set service https api graphql",
        "commit",
        "save",
        "exit",
    ]


class Installer:
    """Runs the installation once, front to back. No retries, no rollback."""

    def __init__(
        self,
        config: Config,
        runner: Optional[CommandRunner] = None,
        console: Optional[Console] = None,
        geteuid: Callable[[], int] = os.geteuid,
    ):
        self.config = config
        self.runner = runner or CommandRunner()
        self.console = console or Console()
        self._geteuid = geteuid

    def prepare(self) -> InstallContext:
        """Checks, secrets and operator input. Mutates nothing on the host."""
        require_root(self._geteuid)

        credentials = CredentialSet.generate(self.config.database)
        self.runner.add_sensitive(*credentials.sensitive_values())

        server_ip = detect_server_ip(self.runner)
        self.print_banner(server_ip)
        self.print_router_commands(credentials.api_key)
        wait_for_operator()

        self.console.rule("VyOS connection configuration")
        router = collect_router_settings(self.config.router)

        return InstallContext(
            config=self.config,
            credentials=credentials,
            router=router,
            server_ip=server_ip,
        )

    def steps(self, ctx: InstallContext) -> List[Step]:
        cfg = ctx.config
        runner = self.runner
        return [
            ("Installing OS dependencies", lambda: packages.install_os_packages(cfg.packages, runner)),
            (f"Installing Node.js {cfg.packages.node_major}.x", lambda: packages.install_nodejs(cfg.packages, runner)),
            ("Creating service user", lambda: service_user.ensure_service_user(cfg.installer, runner)),
            ("Configuring PostgreSQL", lambda: database.provision_database(cfg.database, ctx.credentials, runner)),
            ("Verifying database login", lambda: database.verify_role_login(ctx.credentials)),
            ("Updating pg_hba.conf", lambda: database.configure_pg_hba(cfg.database, runner)),
            (f"Cloning VyManager ({cfg.installer.repo_branch})", lambda: repository.clone_repository(cfg.installer, runner)),
            ("Setting up backend", lambda: backend.setup_backend(ctx, runner)),
            ("Setting up frontend", lambda: frontend.setup_frontend(ctx, runner)),
            ("Running Prisma migrations", lambda: frontend.run_migrations(ctx, runner)),
            ("Creating systemd services", lambda: systemd.install_units(cfg, runner)),
        ]

    def run(self) -> InstallContext:
        ctx = self.prepare()
        for title, step in self.steps(ctx):
            self.console.print(f"[bold blue]==>[/bold blue] [blue]{title}[/blue]")
            logger.info("Step started", step=title)
            try:
                step()
            except OSError as e:
                # Local file operations (unit files, pg_hba.conf) abort like a failed command.
                raise ExternalCommandFailure(title, 1, str(e)) from e
        logger.info("Installation completed")
        self.print_summary(ctx)
        return ctx

    def print_banner(self, server_ip: str) -> None:
        installer = self.config.installer
        body = "\n".join([
            f"Frontend : http://{server_ip}:{installer.frontend_port}",
            f"Backend  : http://{server_ip}:{installer.backend_port}",
            f"Docs     : http://{server_ip}:{installer.backend_port}/docs",
        ])
        self.console.print(Panel(body, title="VyManager Production Installer (no Docker)"))

    def print_router_commands(self, api_key: str) -> None:
        self.console.print("[bold blue]==>[/bold blue] VyOS REST API key generated")
        self.console.print(Panel(Text("\n".join(router_commands(api_key))), title="Run on the VyOS router"))

    def print_summary(self, ctx: InstallContext) -> None:
        db = ctx.config.database
        table = Table(title="Save these", show_header=False)
        table.add_column("Item", style="bold")
        table.add_column("Value")
        table.add_row("Database Name", db.name)
        table.add_row("Database User", db.user)
        table.add_row("Database Pass", ctx.credentials.db_password)
        table.add_row("VyOS API Key", ctx.credentials.api_key)
        table.add_row("Frontend", ctx.frontend_url)
        table.add_row("Backend", ctx.backend_url)
        table.add_row("Docs", ctx.docs_url)

        self.console.print("[bold green]✔[/bold green] VyManager installation completed successfully")
        self.console.print(table)
