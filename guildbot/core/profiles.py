"""Read-only access to stored user profiles."""

from __future__ import annotations

import abc
import logging
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml

from .errors import ConfigError
from .models import ActorProfile
from .permissions import Permission

LOGGER = logging.getLogger(__name__)


class ProfileStore(abc.ABC):
    """Source of :class:`ActorProfile` records."""

    @abc.abstractmethod
    def get_profile(self, user_id: str) -> Optional[ActorProfile]:
        """Return the stored profile of ``user_id`` or ``None``."""


class InMemoryProfileStore(ProfileStore):
    def __init__(self, profiles: Optional[Mapping[str, ActorProfile]] = None) -> None:
        self._profiles: Dict[str, ActorProfile] = dict(profiles or {})

    def get_profile(self, user_id: str) -> Optional[ActorProfile]:
        return self._profiles.get(user_id)

    def __len__(self) -> int:
        return len(self._profiles)


def load_profiles(path: Path) -> Dict[str, ActorProfile]:
    """Parse ``profiles.yaml``; a missing file yields no profiles."""
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        LOGGER.info("No profiles file at %s; every user starts without grants", path)
        return {}
    except OSError as exc:
        raise ConfigError(f"Failed to read {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid profiles.yaml structure at {path}")

    profiles: Dict[str, ActorProfile] = {}
    for user_id, cfg in (data.get("profiles") or {}).items():
        cfg = cfg or {}
        if not isinstance(cfg, dict):
            raise ConfigError(f"Profile {user_id} must be a mapping")
        permission = None
        raw_permission = cfg.get("permission")
        if raw_permission is not None:
            try:
                permission = Permission.from_name(str(raw_permission))
            except ValueError as exc:
                raise ConfigError(
                    f"Unsupported permission {raw_permission} for profile {user_id}"
                ) from exc
        profiles[str(user_id)] = ActorProfile(user_id=str(user_id), permission=permission)
    return profiles
