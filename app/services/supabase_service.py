"""
Supabase service for JobTrack
Handles application storage and connection management
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import psycopg2
from psycopg2.extras import RealDictCursor
from supabase import create_client, Client

from app.config import Settings, settings as default_settings
from app.models.application import JobApplication, JobApplicationCreate, JobApplicationUpdate
from app.models.status import ApplicationStatus
from app.services.store import ApplicationNotFoundError, ApplicationStoreError

logger = logging.getLogger(__name__)

COLUMNS = (
    "id", "user_id", "company_name", "position", "status", "application_date",
    "application_platform", "job_type", "location", "salary", "contact_person",
    "contact_email", "notes", "created_at", "updated_at",
)
SELECT_COLUMNS = ", ".join(COLUMNS)


def _row_to_application(row: Dict[str, Any]) -> JobApplication:
    data = dict(row)
    data["id"] = str(data["id"])
    data["user_id"] = str(data["user_id"])
    return JobApplication.model_validate(data)


def _payload(data) -> Dict[str, Any]:
    """JSON-ready column values from a create/update model"""
    return data.model_dump(mode="json", exclude_unset=isinstance(data, JobApplicationUpdate))


class SupabaseApplicationStore:
    """Application store on Supabase, with a direct PostgreSQL fallback"""

    def __init__(self, config: Optional[Settings] = None):
        config = config or default_settings
        self.supabase_url = config.supabase_url
        self.supabase_anon_key = config.supabase_anon_key
        self.database_url = config.database_url
        self.table = config.applications_table

        # Try Supabase client first, fallback to direct PostgreSQL
        if self.supabase_url and self.supabase_anon_key:
            try:
                self.client: Client = create_client(self.supabase_url, self.supabase_anon_key)
                logger.info("Supabase client initialized successfully")
                self.use_direct_connection = False
            except Exception as e:
                logger.warning(f"Supabase client failed, falling back to direct connection: {e}")
                self.use_direct_connection = True
        else:
            self.use_direct_connection = True

        if self.use_direct_connection and not self.database_url:
            raise ValueError("Either SUPABASE_URL/ANON_KEY or DATABASE_URL must be set in environment variables")

        if self.use_direct_connection:
            logger.info("Using direct PostgreSQL connection")
        else:
            logger.info("Using Supabase client")

    def _should_fall_back(self, error: Exception) -> bool:
        """Switch to the direct connection when the REST key is rejected"""
        if not self.use_direct_connection and self.database_url and "Invalid API key" in str(error):
            self.use_direct_connection = True
            return True
        return False

    async def list_applications(
        self,
        user_id: str,
        status: Optional[ApplicationStatus] = None,
        company: Optional[str] = None,
        position: Optional[str] = None,
    ) -> List[JobApplication]:
        """Get applications for a user, optionally filtered, newest application date first"""
        try:
            if not self.use_direct_connection:
                query = self.client.table(self.table).select(SELECT_COLUMNS).eq("user_id", user_id)
                if status:
                    query = query.eq("status", ApplicationStatus(status).value)
                if company:
                    query = query.ilike("company_name", f"%{company}%")
                if position:
                    query = query.ilike("position", f"%{position}%")
                result = query.order("application_date", desc=True).execute()
                rows = result.data or []
            else:
                with psycopg2.connect(self.database_url) as conn:
                    with conn.cursor(cursor_factory=RealDictCursor) as cur:
                        params: List[Any] = [user_id]
                        where_clauses = ["user_id = %s"]
                        if status:
                            where_clauses.append("status = %s")
                            params.append(ApplicationStatus(status).value)
                        if company:
                            where_clauses.append("company_name ILIKE %s")
                            params.append(f"%{company}%")
                        if position:
                            where_clauses.append("position ILIKE %s")
                            params.append(f"%{position}%")
                        cur.execute(
                            f"SELECT {SELECT_COLUMNS} FROM {self.table} WHERE "
                            + " AND ".join(where_clauses)
                            + " ORDER BY application_date DESC",
                            tuple(params),
                        )
                        rows = [dict(r) for r in cur.fetchall()]
            logger.info(f"Retrieved {len(rows)} applications for user {user_id}")
            return [_row_to_application(r) for r in rows]
        except Exception as e:
            logger.error(f"Error retrieving applications: {str(e)}")
            if self._should_fall_back(e):
                return await self.list_applications(user_id, status, company, position)
            raise ApplicationStoreError(f"Failed to load applications: {e}") from e

    async def get_application(self, application_id: str, user_id: str) -> Optional[JobApplication]:
        """Get a specific application by ID"""
        try:
            if not self.use_direct_connection:
                result = (
                    self.client.table(self.table)
                    .select(SELECT_COLUMNS)
                    .eq("id", application_id)
                    .eq("user_id", user_id)
                    .execute()
                )
                row = result.data[0] if result.data else None
            else:
                with psycopg2.connect(self.database_url) as conn:
                    with conn.cursor(cursor_factory=RealDictCursor) as cur:
                        cur.execute(
                            f"SELECT {SELECT_COLUMNS} FROM {self.table} WHERE id = %s AND user_id = %s",
                            (application_id, user_id),
                        )
                        row = cur.fetchone()
            if not row:
                logger.info(f"No application found with id {application_id} for user {user_id}")
                return None
            return _row_to_application(row)
        except Exception as e:
            logger.error(f"Error retrieving application: {str(e)}")
            if self._should_fall_back(e):
                return await self.get_application(application_id, user_id)
            raise ApplicationStoreError(f"Failed to load application {application_id}: {e}") from e

    async def create_application(self, user_id: str, data: JobApplicationCreate) -> JobApplication:
        """Create a new application entry"""
        values = {"user_id": user_id, **_payload(data)}
        try:
            if not self.use_direct_connection:
                result = self.client.table(self.table).insert(values).execute()
                if not result.data:
                    raise ApplicationStoreError("No data returned from application creation")
                row = result.data[0]
            else:
                columns = list(values)
                with psycopg2.connect(self.database_url) as conn:
                    with conn.cursor(cursor_factory=RealDictCursor) as cur:
                        cur.execute(
                            f"INSERT INTO {self.table} ({', '.join(columns)}) "
                            f"VALUES ({', '.join(['%s'] * len(columns))}) "
                            f"RETURNING {SELECT_COLUMNS}",
                            tuple(values[c] for c in columns),
                        )
                        row = cur.fetchone()
            logger.info(f"Created application: {data.position} at {data.company_name}")
            return _row_to_application(row)
        except ApplicationStoreError:
            raise
        except Exception as e:
            logger.error(f"Error creating application: {str(e)}")
            if self._should_fall_back(e):
                return await self.create_application(user_id, data)
            raise ApplicationStoreError(f"Failed to create application: {e}") from e

    async def update_application(
        self, application_id: str, user_id: str, data: JobApplicationUpdate
    ) -> Optional[JobApplication]:
        """Update the fields set on ``data``"""
        values = _payload(data)
        if not values:
            return await self.get_application(application_id, user_id)
        try:
            if not self.use_direct_connection:
                values["updated_at"] = datetime.now(timezone.utc).isoformat()
                result = (
                    self.client.table(self.table)
                    .update(values)
                    .eq("id", application_id)
                    .eq("user_id", user_id)
                    .execute()
                )
                row = result.data[0] if result.data else None
            else:
                assignments = ", ".join(f"{c} = %s" for c in values)
                with psycopg2.connect(self.database_url) as conn:
                    with conn.cursor(cursor_factory=RealDictCursor) as cur:
                        cur.execute(
                            f"UPDATE {self.table} SET {assignments}, updated_at = NOW() "
                            f"WHERE id = %s AND user_id = %s RETURNING {SELECT_COLUMNS}",
                            tuple(values.values()) + (application_id, user_id),
                        )
                        row = cur.fetchone()
            if not row:
                logger.warning(f"No application found with id {application_id} for user {user_id}")
                return None
            logger.info(f"Updated application {application_id}")
            return _row_to_application(row)
        except Exception as e:
            logger.error(f"Error updating application: {str(e)}")
            if self._should_fall_back(e):
                return await self.update_application(application_id, user_id, data)
            raise ApplicationStoreError(f"Failed to update application {application_id}: {e}") from e

    async def update_application_status(
        self,
        application_id: str,
        status: ApplicationStatus,
        expected_status: Optional[ApplicationStatus] = None,
    ) -> Optional[JobApplication]:
        """
        Set the status and bump updated_at; repeating the call is harmless.
        With ``expected_status`` the row is only written while it still has
        that status, and None is returned when no row matched.
        """
        status = ApplicationStatus(status)
        expected = ApplicationStatus(expected_status) if expected_status is not None else None
        try:
            if not self.use_direct_connection:
                data = {
                    "status": status.value,
                    "updated_at": datetime.now(timezone.utc).isoformat(),
                }
                query = self.client.table(self.table).update(data).eq("id", application_id)
                if expected is not None:
                    query = query.eq("status", expected.value)
                result = query.execute()
                row = result.data[0] if result.data else None
            else:
                sql = f"UPDATE {self.table} SET status = %s, updated_at = NOW() WHERE id = %s"
                params = [status.value, application_id]
                if expected is not None:
                    sql += " AND status = %s"
                    params.append(expected.value)
                with psycopg2.connect(self.database_url) as conn:
                    with conn.cursor(cursor_factory=RealDictCursor) as cur:
                        cur.execute(f"{sql} RETURNING {SELECT_COLUMNS}", tuple(params))
                        row = cur.fetchone()
        except Exception as e:
            logger.error(f"Error updating application status: {str(e)}")
            if self._should_fall_back(e):
                return await self.update_application_status(application_id, status, expected_status)
            raise ApplicationStoreError(f"Failed to update application {application_id}: {e}") from e

        if not row:
            if expected is not None:
                logger.info(f"Application {application_id} no longer {expected.value}; left unchanged")
                return None
            raise ApplicationNotFoundError(application_id)
        logger.info(f"Updated application {application_id} status to {status.value}")
        return _row_to_application(row)

    async def delete_application(self, application_id: str, user_id: str) -> bool:
        """Delete a specific application by ID"""
        try:
            if not self.use_direct_connection:
                result = self.client.table(self.table).delete().eq("id", application_id).eq("user_id", user_id).execute()
                deleted = bool(result.data)
            else:
                with psycopg2.connect(self.database_url) as conn:
                    with conn.cursor() as cur:
                        cur.execute(
                            f"DELETE FROM {self.table} WHERE id = %s AND user_id = %s",
                            (application_id, user_id),
                        )
                        deleted = cur.rowcount > 0
        except Exception as e:
            logger.error(f"Error deleting application {application_id}: {str(e)}")
            if self._should_fall_back(e):
                return await self.delete_application(application_id, user_id)
            raise ApplicationStoreError(f"Failed to delete application {application_id}: {e}") from e

        if deleted:
            logger.info(f"Deleted application {application_id}")
        else:
            logger.warning(f"No application found with id {application_id} for user {user_id}")
        return deleted
