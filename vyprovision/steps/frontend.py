"""
Next.js frontend: .env, build and Prisma migrations.

The .env must exist before `npm run build`; the production build reads
BETTER_AUTH_SECRET and DATABASE_URL.
"""
from __future__ import annotations

from vyprovision.constants import FRONTEND_ENV_FILE
from vyprovision.context import InstallContext
from vyprovision.envfile import write_env_file
from vyprovision.monitoring.logger import get_logger
from vyprovision.runtime.shell import CommandRunner

logger = get_logger(__name__)


def frontend_env_values(ctx: InstallContext) -> dict[str, str]:
    installer = ctx.config.installer
    local_frontend = f"http://localhost:{installer.frontend_port}"
    local_backend = f"http://localhost:{installer.backend_port}"
    return {
        "NODE_ENV": "production",
        "VYMANAGER_ENV": "production",
        "BETTER_AUTH_SECRET": ctx.credentials.auth_secret,
        "BETTER_AUTH_URL": local_frontend,
        "NEXT_PUBLIC_APP_URL": local_frontend,
        "NEXT_PUBLIC_API_URL": local_backend,
        "DATABASE_URL": ctx.credentials.connection_string,
        "TRUSTED_ORIGINS": f"{ctx.frontend_url},{local_frontend}",
    }


def setup_frontend(ctx: InstallContext, runner: CommandRunner) -> None:
    installer = ctx.config.installer
    frontend_dir = installer.frontend_dir
    user = installer.service_user
    home = installer.service_home

    write_env_file(frontend_dir / FRONTEND_ENV_FILE, frontend_env_values(ctx), owner=user)

    runner.run(["npm", "install"], user=user, home=home, cwd=frontend_dir)
    runner.run(["npm", "run", "build"], user=user, home=home, cwd=frontend_dir)
    logger.info("Frontend built", path=str(frontend_dir))


def run_migrations(ctx: InstallContext, runner: CommandRunner) -> None:
    installer = ctx.config.installer
    user = installer.service_user
    home = installer.service_home

    runner.run(["npx", "prisma", "migrate", "deploy"], user=user, home=home, cwd=installer.frontend_dir)
    runner.run(["npx", "prisma", "generate"], user=user, home=home, cwd=installer.frontend_dir)
    logger.info("Prisma migrations applied")
