"""
Centralized Configuration Management
Reads the environment (optionally from a .env file) with config/ fallbacks
"""

import importlib.util
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

# Global logger for config manager
_config_logger = None


def set_config_logger(logger):
    """Set the logger for config manager."""
    global _config_logger
    _config_logger = logger


def config_log(message: str, level: str = "INFO"):
    """Log message using config logger if available, otherwise print."""
    if _config_logger:
        if level == "INFO":
            _config_logger.info(message)
        elif level == "WARNING":
            _config_logger.warning(message)
        elif level == "ERROR":
            _config_logger.error(message)
    else:
        print(message)


# Project root is the parent of the package directory
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
CONFIG_DIR = os.path.join(PROJECT_ROOT, "config")

DEFAULT_BATCH_FOLDER_PATTERN = r"\d{2}-\d{2}-\d{4}"


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes")


def _env_float(name: str) -> Optional[float]:
    value = os.environ.get(name, "").strip()
    return float(value) if value else None


def _resolve(path: str) -> str:
    if os.path.isabs(path):
        return path
    return os.path.join(PROJECT_ROOT, path)


class ConfigurationError(Exception):
    """Configuration error exception"""

    pass


@dataclass
class DatabaseConfig:
    """Audit database connection configuration"""

    host: str
    port: int
    database: str
    user: str
    password: str
    sslmode: str = "prefer"
    password_encrypted: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for psycopg2"""
        return {
            "host": self.host,
            "port": self.port,
            "database": self.database,
            "user": self.user,
            "password": self.password,
            "sslmode": self.sslmode,
        }

    def validate(self) -> bool:
        """Validate configuration"""
        required_fields = [self.host, self.database, self.user, self.password]
        if not all(required_fields):
            config_log("ERROR: Missing required database fields", "ERROR")
            return False
        return True


@dataclass
class RepositoryConfig:
    """Remote document repository configuration"""

    url: str
    username: str
    password: str
    password_encrypted: bool = True
    timeout: float = 60.0

    def validate(self) -> bool:
        """Validate configuration"""
        if not all([self.url, self.username, self.password]):
            config_log("ERROR: Missing required repository fields", "ERROR")
            return False
        return True


@dataclass
class PathsConfig:
    """Folder workflow configuration"""

    to_be_processed: str = "data/to_be_processed"
    in_progress: str = "data/in_progress"
    processed: str = "data/processed"
    failed: str = "data/failed"
    logs_dir: str = "logs"

    def get_absolute_paths(self) -> Dict[str, str]:
        """Get absolute paths for all directories"""
        return {
            "to_be_processed": _resolve(self.to_be_processed),
            "in_progress": _resolve(self.in_progress),
            "processed": _resolve(self.processed),
            "failed": _resolve(self.failed),
            "logs_dir": _resolve(self.logs_dir),
        }


@dataclass
class ProcessingConfig:
    """Batch processing configuration"""

    max_workers: int = 4
    max_attempts: int = 4
    retry_base_delay: float = 0.0
    retry_max_delay: float = 30.0
    shutdown_timeout: Optional[float] = None
    document_extensions: List[str] = field(default_factory=lambda: [".pdf"])
    enable_audit: bool = True
    batch_folder_pattern: str = DEFAULT_BATCH_FOLDER_PATTERN

    def validate(self) -> bool:
        """Validate configuration"""
        if self.max_workers < 1:
            config_log("ERROR: THREAD_POOL_SIZE must be at least 1", "ERROR")
            return False
        if self.max_attempts < 1:
            config_log("ERROR: MAX_UPLOAD_ATTEMPTS must be at least 1", "ERROR")
            return False
        if not self.document_extensions:
            config_log("ERROR: No document extensions configured", "ERROR")
            return False
        return True


class ConfigManager:
    """Centralized configuration management"""

    def __init__(self, env_file: Optional[str] = None):
        self._env_file = env_file or os.path.join(PROJECT_ROOT, ".env")
        self._db_config = None
        self._repository_config = None
        self._paths_config = None
        self._processing_config = None
        self._secret_key = ""
        self._configs_loaded = False

    def _ensure_configs_loaded(self):
        """Ensure configurations are loaded."""
        if not self._configs_loaded:
            self._load_configs()
            self.validate_all()
            self.create_directories()
            self._configs_loaded = True

    def _load_configs(self):
        """Load all configurations"""
        if os.path.exists(self._env_file):
            load_dotenv(self._env_file)
            config_log(f"Loaded environment from: {self._env_file}")
        else:
            config_log(f"No .env file found at: {self._env_file}")

        try:
            self._load_processing_config()
            self._load_paths_config()
            self._load_repository_config()
            if self._processing_config.enable_audit:
                self._load_database_config()
            self._secret_key = os.environ.get("SECRET_KEY", "")
            config_log("All configurations loaded successfully")
        except ConfigurationError:
            raise
        except Exception as e:
            config_log(f"Configuration loading failed: {e}", "ERROR")
            raise ConfigurationError(f"Failed to load configuration: {e}")

    def _load_database_config(self):
        """Load audit database configuration"""
        if all(
            key in os.environ
            for key in ["DB_HOST", "DB_USER", "DB_PASSWORD", "DB_NAME"]
        ):
            config_log("Loading database config from environment variables")
            self._db_config = DatabaseConfig(
                host=os.environ["DB_HOST"],
                port=int(os.environ.get("DB_PORT", 5432)),
                database=os.environ["DB_NAME"],
                user=os.environ["DB_USER"],
                password=os.environ["DB_PASSWORD"],
                sslmode=os.environ.get("DB_SSLMODE", "prefer"),
                password_encrypted=_env_bool("DB_PASSWORD_ENCRYPTED", "false"),
            )
            return

        # Fallback to config file
        config_log("Loading database config from db_config.py")
        try:
            db_config_path = os.path.join(CONFIG_DIR, "db_config.py")
            spec = importlib.util.spec_from_file_location("db_config", db_config_path)
            db_config_module = importlib.util.module_from_spec(spec)
            spec.loader.exec_module(db_config_module)

            self._db_config = DatabaseConfig(**db_config_module.DB_CONFIG)
        except Exception as e:
            raise ConfigurationError(f"Cannot load db_config.py: {e}")

    def _load_repository_config(self):
        """Load repository configuration"""
        self._repository_config = RepositoryConfig(
            url=os.environ.get("REPOSITORY_URL", ""),
            username=os.environ.get("REPOSITORY_USERNAME", ""),
            password=os.environ.get("REPOSITORY_PASSWORD", ""),
            password_encrypted=_env_bool("REPOSITORY_PASSWORD_ENCRYPTED", "true"),
            timeout=float(os.environ.get("REPOSITORY_TIMEOUT", 60)),
        )
        config_log("Repository configuration loaded")

    def _load_paths_config(self):
        """Load folder workflow configuration"""
        self._paths_config = PathsConfig(
            to_be_processed=os.environ.get(
                "TO_BE_PROCESSED_DIR", "data/to_be_processed"
            ),
            in_progress=os.environ.get("IN_PROGRESS_DIR", "data/in_progress"),
            processed=os.environ.get("PROCESSED_DIR", "data/processed"),
            failed=os.environ.get("FAILED_DIR", "data/failed"),
            logs_dir=os.environ.get("LOGS_DIR", "logs"),
        )
        config_log("Paths configuration loaded")

    def _load_processing_config(self):
        """Load processing configuration"""
        extensions = [
            ext.strip() if ext.strip().startswith(".") else f".{ext.strip()}"
            for ext in os.environ.get("DOCUMENT_EXTENSIONS", ".pdf").split(",")
            if ext.strip()
        ]
        self._processing_config = ProcessingConfig(
            max_workers=int(os.environ.get("THREAD_POOL_SIZE", 4)),
            max_attempts=int(os.environ.get("MAX_UPLOAD_ATTEMPTS", 4)),
            retry_base_delay=float(os.environ.get("RETRY_BASE_DELAY", 0)),
            retry_max_delay=float(os.environ.get("RETRY_MAX_DELAY", 30)),
            shutdown_timeout=_env_float("SHUTDOWN_TIMEOUT"),
            document_extensions=extensions,
            enable_audit=_env_bool("ENABLE_AUDIT", "true"),
            batch_folder_pattern=os.environ.get(
                "BATCH_FOLDER_PATTERN", DEFAULT_BATCH_FOLDER_PATTERN
            ),
        )
        config_log("Processing configuration loaded")

    @property
    def database(self) -> Optional[DatabaseConfig]:
        self._ensure_configs_loaded()
        return self._db_config

    @property
    def repository(self) -> RepositoryConfig:
        self._ensure_configs_loaded()
        return self._repository_config

    @property
    def paths(self) -> PathsConfig:
        self._ensure_configs_loaded()
        return self._paths_config

    @property
    def processing(self) -> ProcessingConfig:
        self._ensure_configs_loaded()
        return self._processing_config

    @property
    def secret_key(self) -> str:
        self._ensure_configs_loaded()
        return self._secret_key

    def validate_all(self) -> bool:
        """Validate all configurations"""
        if not self._processing_config.validate():
            raise ConfigurationError("Invalid processing configuration")

        if not self._repository_config.validate():
            raise ConfigurationError("Invalid repository configuration")

        if self._db_config is not None and not self._db_config.validate():
            raise ConfigurationError("Invalid database configuration")

        needs_secret = self._repository_config.password_encrypted or (
            self._db_config is not None and self._db_config.password_encrypted
        )
        if needs_secret and not self._secret_key:
            raise ConfigurationError(
                "SECRET_KEY is required to decrypt encrypted passwords"
            )

        config_log("All configurations validated successfully")
        return True

    def create_directories(self):
        """Create all output directories"""
        abs_paths = self._paths_config.get_absolute_paths()
        for name, directory in abs_paths.items():
            if name == "to_be_processed":
                continue
            Path(directory).mkdir(parents=True, exist_ok=True)
            config_log(f"Directory ready: {directory}")


# Global configuration instance
_config_manager = None


def get_config() -> ConfigManager:
    """Get global configuration manager instance"""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def reload_config() -> ConfigManager:
    """Reload configuration"""
    global _config_manager
    _config_manager = ConfigManager()
    return _config_manager
