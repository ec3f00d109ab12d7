"""Configuration loader."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Tuple

import yaml
from dotenv import load_dotenv

from .errors import ConfigError
from .models import ActorProfile
from .profiles import load_profiles

LOGGER = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path("~/.guildbot").expanduser()
ENV_FILE_NAME = ".env"
PERMISSIONS_FILE = "permissions.yaml"
PROFILES_FILE = "profiles.yaml"


@dataclass
class Config:
    slack_bot_token: str
    home_scope_id: str
    config_dir: Path
    admin_role_ids: List[str] = field(default_factory=list)
    moderator_role_ids: List[str] = field(default_factory=list)
    owner_ids: List[str] = field(default_factory=list)
    profiles: Dict[str, ActorProfile] = field(default_factory=dict)


def resolve_config_dir(config_dir: Path | str | None) -> Path:
    """Resolve and validate the directory containing .env + YAML files."""
    target = (
        Path(config_dir).expanduser() if config_dir else DEFAULT_CONFIG_DIR
    ).resolve()
    if not target.exists():
        raise ConfigError(
            f"Config directory {target} does not exist. "
            "Create it and add .env (plus optional permissions.yaml and profiles.yaml)."
        )
    if not target.is_dir():
        raise ConfigError(f"Config directory {target} is not a directory")
    return target


def load_config(config_dir: Path | str | None = None) -> Config:
    """Load guildbot configuration from the provided or default directory."""
    root = resolve_config_dir(config_dir)
    return _load_config_from_root(root)


def _load_config_from_root(root: Path) -> Config:
    _load_env_file(root / ENV_FILE_NAME)

    admin_role_ids, moderator_role_ids, owner_ids = _load_permissions(root / PERMISSIONS_FILE)
    profiles = load_profiles(root / PROFILES_FILE)

    return Config(
        slack_bot_token=_require_env("SLACK_BOT_TOKEN"),
        home_scope_id=_require_env("GUILDBOT_HOME_SCOPE_ID"),
        config_dir=root,
        admin_role_ids=admin_role_ids,
        moderator_role_ids=moderator_role_ids,
        owner_ids=owner_ids,
        profiles=profiles,
    )


def _load_env_file(path: Path) -> None:
    if not path.exists():
        LOGGER.warning("No .env file found at %s; relying on shell environment.", path)
        return
    load_dotenv(dotenv_path=path, override=False)


def _require_env(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise ConfigError(f"{name} is not set")
    return value


def _load_permissions(path: Path) -> Tuple[List[str], List[str], List[str]]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        LOGGER.warning("No %s at %s; only platform admins get elevated permissions", PERMISSIONS_FILE, path)
        return [], [], []
    except OSError as exc:
        raise ConfigError(f"Failed to read {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    if data is None:
        return [], [], []
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid {PERMISSIONS_FILE} structure at {path}")

    return (
        _id_list(data, "admin_groups", path),
        _id_list(data, "moderator_groups", path),
        _id_list(data, "bot_owners", path),
    )


def _id_list(data: dict, key: str, path: Path) -> List[str]:
    value = data.get(key) or []
    if not isinstance(value, list):
        raise ConfigError(f"{key} in {path} must be a list of ids")
    return [str(item).strip() for item in value if str(item).strip()]
