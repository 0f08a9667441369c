"""
Database Service using psycopg2
Writes one audit row per processed document
"""

import threading
from datetime import datetime
from typing import Any, Dict, Optional

import psycopg2

from batch_uploader.utils.environment_utils import MachineIdentity, get_machine_identity

AUDIT_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

AUDIT_INSERT_SQL = """
    INSERT INTO "AuditDmChanges"
    ("Module", "WindowsUserName", "AppUserName", "UserMachineName",
     "UserMachineIPv4", "MAC", "ActionName", "UserAction", "ActionAttribute",
     "AffectedCustomer", "ActionStatus", "TimeStamp")
    VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
"""


class DatabaseService:
    """
    Audit trail writer backed by a single PostgreSQL connection.

    The connection is opened lazily and shared by all upload workers; every
    statement runs under one lock so the session is never used concurrently.
    """

    def __init__(
        self,
        db_config: Dict[str, Any],
        logger,
        machine_identity: Optional[MachineIdentity] = None,
        module_name: str = "Seibel-Service",
        app_user_name: str = "Seibel-user",
        action_name: str = "Uploading",
    ):
        self.db_config = db_config
        self.logger = logger
        self.machine_identity = machine_identity or get_machine_identity()
        self.module_name = module_name
        self.app_user_name = app_user_name
        self.action_name = action_name
        self._connection = None
        self._lock = threading.Lock()

    def _get_connection(self):
        """Return the shared connection, opening it if needed. Caller holds the lock."""
        if self._connection is None or self._connection.closed:
            self._connection = psycopg2.connect(
                host=self.db_config["host"],
                port=self.db_config["port"],
                database=self.db_config["database"],
                user=self.db_config["user"],
                password=self.db_config["password"],
                sslmode=self.db_config.get("sslmode", "prefer"),
            )
        return self._connection

    def test_connection(self) -> bool:
        """Test database connectivity"""
        with self._lock:
            try:
                conn = self._get_connection()
                with conn.cursor() as cursor:
                    cursor.execute("SELECT version()")
                    version = cursor.fetchone()[0]
                self.logger.info("Database connection successful")
                self.logger.info(f"PostgreSQL version: {version}")
                return True
            except Exception as e:
                self.logger.error(f"Database connection test failed: {str(e)}")
                return False

    def record_audit(
        self, document_type: str, affected_customer: str, status: str
    ) -> bool:
        """
        Insert one audit row for a processed document.

        Args:
            document_type: Repository object type of the document
            affected_customer: Customer label, "<document> - <mobile>"
            status: "Success" or "Fail"

        Returns:
            bool: True if the row was written; failures are logged, not raised
        """
        timestamp = datetime.now().strftime(AUDIT_TIMESTAMP_FORMAT)
        identity = self.machine_identity
        params = (
            self.module_name,
            identity.os_user,
            self.app_user_name,
            identity.hostname,
            identity.ipv4_address,
            identity.mac_address,
            self.action_name,
            self.action_name,
            document_type,
            affected_customer,
            status,
            timestamp,
        )

        with self._lock:
            conn = None
            try:
                conn = self._get_connection()
                with conn.cursor() as cursor:
                    cursor.execute(AUDIT_INSERT_SQL, params)
                conn.commit()
                return True
            except Exception as e:
                self.logger.error(
                    f"Error inserting audit record for {affected_customer}: {str(e)}"
                )
                if conn is not None and not conn.closed:
                    try:
                        conn.rollback()
                    except psycopg2.Error as rollback_error:
                        self.logger.error(f"Rollback failed: {str(rollback_error)}")
                return False

    def close(self):
        """Close the shared connection after the last batch."""
        with self._lock:
            if self._connection is not None and not self._connection.closed:
                try:
                    self._connection.close()
                    self.logger.info("Database connection closed successfully")
                except psycopg2.Error as e:
                    self.logger.error(f"Error closing database connection: {str(e)}")
            self._connection = None
