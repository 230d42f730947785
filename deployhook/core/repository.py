"""SQLite repository for environments and confirmed deployments."""

import json
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from functools import lru_cache
from pathlib import Path
from typing import Iterator

from deployhook.config import settings
from deployhook.core.exceptions import DuplicateEnvironmentError
from deployhook.models.deployment import Deployment, DeploymentStatus
from deployhook.models.environment import (
    Environment,
    EnvironmentCreate,
    EnvironmentOptions,
    SourceProviderBinding,
)
from deployhook.models.events import DeploymentEvent
from deployhook.utils.logging import get_logger

logger = get_logger("environment_repository")

PROJECT_ROOT = Path(__file__).resolve().parents[2]


def _resolve_db_path(db_path: str | Path) -> Path:
    """Resolve database path relative to project root when not absolute."""
    path = Path(db_path)
    return path if path.is_absolute() else PROJECT_ROOT / path


class EnvironmentRepository:
    """Repository for environments and their deployments in SQLite."""

    def __init__(self, db_path: Path | str | None = None):
        self.db_path = _resolve_db_path(db_path or settings.database_path)
        self._ensure_db_exists()

    def _ensure_db_exists(self) -> None:
        """Create database and tables if they don't exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        with self._get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS environments (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    repository TEXT NOT NULL,
                    branch TEXT NOT NULL,
                    options TEXT NOT NULL,
                    provider TEXT NOT NULL,
                    installation_id INTEGER NOT NULL,
                    owner_id INTEGER NOT NULL,
                    members TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    UNIQUE (repository, name)
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_environments_branch
                ON environments(repository, branch)
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS deployments (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    environment_id INTEGER NOT NULL
                        REFERENCES environments(id) ON DELETE CASCADE,
                    hash TEXT NOT NULL,
                    initiator_id INTEGER NOT NULL,
                    status TEXT NOT NULL,
                    meta TEXT NOT NULL,
                    github_deployment_id INTEGER,
                    created_at TEXT NOT NULL
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_deployments_environment
                ON deployments(environment_id, created_at DESC)
            """)
            # Redelivered deployment events must not add a second row
            conn.execute("""
                CREATE UNIQUE INDEX IF NOT EXISTS idx_deployments_github
                ON deployments(environment_id, github_deployment_id)
            """)
            conn.commit()

        logger.debug("environment_repository.initialized", db_path=str(self.db_path))

    @contextmanager
    def _get_connection(self) -> Iterator[sqlite3.Connection]:
        """Get a database connection with row factory."""
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            yield conn
        finally:
            conn.close()

    def _row_to_environment(self, row: sqlite3.Row) -> Environment:
        """Convert a database row to an Environment."""
        return Environment(
            id=row["id"],
            name=row["name"],
            repository=row["repository"],
            branch=row["branch"],
            options=EnvironmentOptions(**json.loads(row["options"])),
            source_provider=SourceProviderBinding(
                provider=row["provider"],
                installation_id=row["installation_id"],
            ),
            owner_id=row["owner_id"],
            members=json.loads(row["members"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    def _row_to_deployment(self, row: sqlite3.Row) -> Deployment:
        """Convert a database row to a Deployment."""
        return Deployment(
            id=row["id"],
            environment_id=row["environment_id"],
            hash=row["hash"],
            initiator_id=row["initiator_id"],
            status=DeploymentStatus(row["status"]),
            meta=json.loads(row["meta"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    # Environments

    async def create_environment(self, data: EnvironmentCreate) -> Environment:
        """Insert a new environment."""
        created_at = datetime.utcnow()
        with self._get_connection() as conn:
            try:
                cursor = conn.execute(
                    """
                    INSERT INTO environments
                    (name, repository, branch, options, provider, installation_id,
                     owner_id, members, created_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        data.name,
                        data.repository,
                        data.branch,
                        json.dumps(data.options.model_dump()),
                        "github",
                        data.installation_id,
                        data.owner_id,
                        json.dumps(data.members),
                        created_at.isoformat(),
                    ),
                )
            except sqlite3.IntegrityError:
                raise DuplicateEnvironmentError(data.repository, data.name)
            conn.commit()
            environment_id = cursor.lastrowid

        logger.info(
            "environment_repository.created",
            environment_id=environment_id,
            repository=data.repository,
            branch=data.branch,
        )
        return Environment(
            id=environment_id,
            name=data.name,
            repository=data.repository,
            branch=data.branch,
            options=data.options,
            source_provider=SourceProviderBinding(installation_id=data.installation_id),
            owner_id=data.owner_id,
            members=data.members,
            created_at=created_at,
        )

    async def get_environment(self, environment_id: int) -> Environment | None:
        """Get an environment by ID."""
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT * FROM environments WHERE id = ?", (environment_id,)
            ).fetchone()
        return self._row_to_environment(row) if row else None

    async def list_environments(self) -> list[Environment]:
        """List all environments in configuration order."""
        with self._get_connection() as conn:
            rows = conn.execute("SELECT * FROM environments ORDER BY id").fetchall()
        return [self._row_to_environment(row) for row in rows]

    async def delete_environment(self, environment_id: int) -> bool:
        """Delete an environment and its deployments."""
        with self._get_connection() as conn:
            cursor = conn.execute(
                "DELETE FROM environments WHERE id = ?", (environment_id,)
            )
            conn.commit()
        return cursor.rowcount > 0

    async def environments_tracking_branch(
        self, repository: str, branch: str
    ) -> list[Environment]:
        """Environments of ``repository`` bound to ``branch``, in configuration order."""
        with self._get_connection() as conn:
            rows = conn.execute(
                """
                SELECT * FROM environments
                WHERE repository = ? AND branch = ?
                ORDER BY id
                """,
                (repository, branch),
            ).fetchall()
        return [self._row_to_environment(row) for row in rows]

    async def environment_by_provider_event(
        self, event: DeploymentEvent
    ) -> Environment | None:
        """Find the environment a provider deployment event refers to.

        Deployments created by this service carry the environment id in their
        payload. Deployments created by other tools are matched on repository
        and environment name instead.
        """
        if event.environment_id is not None:
            environment = await self.get_environment(event.environment_id)
            if environment and environment.repository == event.repository:
                return environment
            return None

        if not event.environment_name:
            return None

        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT * FROM environments WHERE repository = ? AND name = ?",
                (event.repository, event.environment_name),
            ).fetchone()
        return self._row_to_environment(row) if row else None

    # Deployments

    async def save_deployment(self, deployment: Deployment) -> Deployment:
        """Persist a deployment and return it with its assigned ID.

        A deployment whose ``github_deployment_id`` is already stored for the
        environment is not inserted again; the stored row is returned instead.
        """
        github_deployment_id = deployment.meta.get("github_deployment_id")
        with self._get_connection() as conn:
            cursor = conn.execute(
                """
                INSERT INTO deployments
                (environment_id, hash, initiator_id, status, meta,
                 github_deployment_id, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT (environment_id, github_deployment_id) DO NOTHING
                """,
                (
                    deployment.environment_id,
                    deployment.hash,
                    deployment.initiator_id,
                    deployment.status.value,
                    json.dumps(deployment.meta),
                    github_deployment_id,
                    deployment.created_at.isoformat(),
                ),
            )
            conn.commit()
            if cursor.rowcount:
                return deployment.model_copy(update={"id": cursor.lastrowid})

            row = conn.execute(
                """
                SELECT * FROM deployments
                WHERE environment_id = ? AND github_deployment_id = ?
                """,
                (deployment.environment_id, github_deployment_id),
            ).fetchone()

        logger.debug(
            "environment_repository.deployment_exists",
            environment_id=deployment.environment_id,
            github_deployment_id=github_deployment_id,
        )
        return self._row_to_deployment(row)

    async def find_deployment_by_github_id(
        self, environment_id: int, github_deployment_id: int
    ) -> Deployment | None:
        """Get the deployment recorded for a GitHub deployment, if any."""
        with self._get_connection() as conn:
            row = conn.execute(
                """
                SELECT * FROM deployments
                WHERE environment_id = ? AND github_deployment_id = ?
                """,
                (environment_id, github_deployment_id),
            ).fetchone()
        return self._row_to_deployment(row) if row else None

    async def list_deployments(
        self, environment_id: int, limit: int = 20, offset: int = 0
    ) -> list[Deployment]:
        """List deployments of an environment, newest first."""
        with self._get_connection() as conn:
            rows = conn.execute(
                """
                SELECT * FROM deployments
                WHERE environment_id = ?
                ORDER BY created_at DESC, id DESC
                LIMIT ? OFFSET ?
                """,
                (environment_id, limit, offset),
            ).fetchall()
        return [self._row_to_deployment(row) for row in rows]

    async def ping(self) -> bool:
        """Whether the database can be opened and holds our schema."""
        try:
            with self._get_connection() as conn:
                conn.execute("SELECT 1 FROM environments LIMIT 1").fetchall()
        except sqlite3.Error as e:
            logger.warning(
                "environment_repository.unreachable", db_path=str(self.db_path), error=str(e)
            )
            return False
        return True

    async def count_deployments(self) -> int:
        """Count all stored deployments."""
        with self._get_connection() as conn:
            row = conn.execute("SELECT COUNT(*) FROM deployments").fetchone()
        return row[0]


@lru_cache
def get_environment_repository() -> EnvironmentRepository:
    """Get the singleton EnvironmentRepository."""
    return EnvironmentRepository()
