"""
Audit database connection configuration (environment-driven)
===========================================================

This module defines DB_CONFIG but reads all values from environment variables.
It contains no secrets and is safe to commit. It is only consulted when the
required DB_* variables are not all present in the environment.

ENVIRONMENT VARIABLES:
---------------------
Required:
- DB_HOST: Database server hostname or IP address
- DB_NAME: Database name
- DB_USER: Database username
- DB_PASSWORD: Database password (plain, or encrypted - see below)

Optional:
- DB_PORT: Database server port (default: 5432)
- DB_SSLMODE: SSL mode for connection (default: prefer)
  Options: disable, prefer, require, verify-ca, verify-full
- DB_PASSWORD_ENCRYPTED: "true" when DB_PASSWORD holds a value produced by
  batch_uploader.utils.crypto_utils.encrypt_password (requires SECRET_KEY)

AUDIT TABLE:
-----------
Each uploaded or failed document writes one row to AuditDmChanges:

CREATE TABLE IF NOT EXISTS "AuditDmChanges" (
    "Module" VARCHAR(100),
    "WindowsUserName" VARCHAR(100),
    "AppUserName" VARCHAR(100),
    "UserMachineName" VARCHAR(255),
    "UserMachineIPv4" VARCHAR(45),
    "MAC" VARCHAR(32),
    "ActionName" VARCHAR(100),
    "UserAction" VARCHAR(100),
    "ActionAttribute" VARCHAR(255),
    "AffectedCustomer" VARCHAR(500),
    "ActionStatus" VARCHAR(20),
    "TimeStamp" VARCHAR(19)
);
"""

import os


DB_CONFIG = {
    "host": os.getenv("DB_HOST", ""),
    "port": int(os.getenv("DB_PORT", "5432")),
    "database": os.getenv("DB_NAME", ""),
    "user": os.getenv("DB_USER", ""),
    "password": os.getenv("DB_PASSWORD", ""),
    "sslmode": os.getenv("DB_SSLMODE", "prefer"),
    "password_encrypted": os.getenv("DB_PASSWORD_ENCRYPTED", "false").lower()
    == "true",
}
