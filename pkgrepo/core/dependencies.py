from pathlib import Path
from typing import Optional
import os

from pkgrepo.storage.store_manager import StoreManager
from pkgrepo.storage.json_store_manager import JsonStoreManager
from pkgrepo.services.updater import PackageUpdater

REPO_PATH_ENV_VAR = "PKGREPO_PATH"
LOG_LEVEL_ENV_VAR = "PKGREPO_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "INFO"

_store: Optional[StoreManager] = None
_updater: Optional[PackageUpdater] = None

def get_default_repo_path() -> Path:
    """
    Default starting path for repository lookups.

    Priority:
    1. Environment variable PKGREPO_PATH
    2. The current working directory
    """
    env_path = os.environ.get(REPO_PATH_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return Path.cwd()

def get_log_level() -> str:
    return os.environ.get(LOG_LEVEL_ENV_VAR, DEFAULT_LOG_LEVEL).upper()

def get_store() -> StoreManager:
    global _store
    if _store is None:
        _store = JsonStoreManager()
    return _store

def get_updater() -> PackageUpdater:
    global _updater
    if _updater is None:
        _updater = PackageUpdater(get_store())
    return _updater
