"""
PostgreSQL role, database and privileges for the application.

Statements are sent to psql on stdin with the role and database names as psql
variables (`:'var'` is quoted as a literal, `:"var"` as an identifier). The
password never appears on a command line: it travels in the environment and is
read with \\getenv (psql 15+).

Re-running is safe: an existing role gets its password reset to the new
secret, an existing database is kept and re-owned, grants are idempotent.
"""
from __future__ import annotations

import os
import re
import tempfile
from pathlib import Path

from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool

from vyprovision.config.config import DatabaseConfig
from vyprovision.constants import (
    PG_HBA_FROM_METHOD,
    PG_HBA_TO_METHOD,
    POSTGRES_ADMIN_USER,
    POSTGRES_SERVICE,
)
from vyprovision.credentials import CredentialSet
from vyprovision.exceptions import ConfigurationError, ExternalCommandFailure
from vyprovision.monitoring.logger import get_logger
from vyprovision.runtime.shell import CommandRunner

logger = get_logger(__name__)

PASSWORD_ENV_VAR = "VYPROVISION_DB_PASSWORD"

PROVISION_SQL = f"""\
\\getenv db_password {PASSWORD_ENV_VAR}
SELECT format('CREATE ROLE %I LOGIN', :'db_user')
 WHERE NOT EXISTS (SELECT 1 FROM pg_roles WHERE rolname = :'db_user')
\\gexec
ALTER ROLE :"db_user" WITH LOGIN PASSWORD :'db_password';
SELECT format('CREATE DATABASE %I OWNER %I', :'db_name', :'db_user')
 WHERE NOT EXISTS (SELECT 1 FROM pg_database WHERE datname = :'db_name')
\\gexec
ALTER DATABASE :"db_name" OWNER TO :"db_user";
GRANT ALL PRIVILEGES ON DATABASE :"db_name" TO :"db_user";
\\connect :"db_name"
GRANT ALL ON SCHEMA public TO :"db_user";
ALTER DEFAULT PRIVILEGES IN SCHEMA public GRANT ALL ON TABLES TO :"db_user";
ALTER DEFAULT PRIVILEGES IN SCHEMA public GRANT ALL ON SEQUENCES TO :"db_user";
"""


def psql_command(database: DatabaseConfig) -> list[str]:
    return [
        "psql", "-X", "-q",
        "-v", "ON_ERROR_STOP=1",
        "-v", f"db_user={database.user}",
        "-v", f"db_name={database.name}",
        "-d", "postgres",
    ]


def provision_database(database: DatabaseConfig, credentials: CredentialSet, runner: CommandRunner) -> None:
    """Create or update the role and database, then grant schema privileges."""
    runner.run(["systemctl", "enable", "--now", POSTGRES_SERVICE])
    runner.run(
        psql_command(database),
        user=POSTGRES_ADMIN_USER,
        env={PASSWORD_ENV_VAR: credentials.db_password},
        input=PROVISION_SQL,
    )
    logger.info("PostgreSQL role and database provisioned", db_name=database.name, db_user=database.user)


def verify_role_login(credentials: CredentialSet) -> None:
    """Log in over TCP as the application role, exactly as the app will."""
    engine = create_engine(credentials.connection_string, poolclass=NullPool)
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1")).scalar()
    except SQLAlchemyError as e:
        raise ExternalCommandFailure(
            "connect to application database as application role",
            1,
            type(e).__name__,
        ) from e
    finally:
        engine.dispose()
    logger.info("Application role login verified")


def find_pg_hba(pg_config_root: Path) -> Path:
    """Locate <root>/<version>/main/pg_hba.conf, newest version first."""
    candidates = []
    if pg_config_root.is_dir():
        for child in pg_config_root.iterdir():
            hba = child / "main" / "pg_hba.conf"
            if hba.is_file():
                candidates.append((_version_key(child.name), hba))
    if not candidates:
        raise ConfigurationError(f"No pg_hba.conf found under {pg_config_root}")
    candidates.sort()
    return candidates[-1][1]


def _version_key(name: str) -> tuple:
    return tuple(int(p) if p.isdigit() else -1 for p in name.split("."))


def rewrite_pg_hba(content: str) -> tuple[str, int]:
    """
    Switch `peer` rows to `scram-sha-256`, except rows for the postgres user.

    Returns:
        (new content, number of rows changed)
    """
    out = []
    changed = 0
    for line in content.splitlines(keepends=True):
        stripped = line.strip()
        fields = stripped.split()
        if (
            stripped
            and not stripped.startswith("#")
            and len(fields) >= 4
            and fields[2] != POSTGRES_ADMIN_USER
            and PG_HBA_FROM_METHOD in fields[3:]
        ):
            line = re.sub(rf"\b{PG_HBA_FROM_METHOD}\b", PG_HBA_TO_METHOD, line, count=1)
            changed += 1
        out.append(line)
    return "".join(out), changed


def configure_pg_hba(database: DatabaseConfig, runner: CommandRunner) -> int:
    """Apply rewrite_pg_hba to the installed cluster and reload PostgreSQL."""
    hba = find_pg_hba(database.pg_config_root)
    new_content, changed = rewrite_pg_hba(hba.read_text())
    if changed:
        st = hba.stat()
        fd, tmp_name = tempfile.mkstemp(dir=str(hba.parent), prefix=".pg_hba.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as f:
                f.write(new_content)
            os.chmod(tmp_name, st.st_mode & 0o777)
            os.chown(tmp_name, st.st_uid, st.st_gid)
            os.replace(tmp_name, hba)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
        runner.run(["systemctl", "reload", POSTGRES_SERVICE])
    logger.info("pg_hba.conf checked", path=str(hba), rows_changed=changed)
    return changed
