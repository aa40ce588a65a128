import os
import re
import logging
from typing import List, Optional

import yaml

from assume_setup import constants

logger = logging.getLogger(__name__)

# Plain scalars such as yes, 0755 or 2024-01-01 stay strings; only null keeps its meaning
_TYPED_SCALAR_TAGS = {
    "tag:yaml.org,2002:bool",
    "tag:yaml.org,2002:int",
    "tag:yaml.org,2002:float",
    "tag:yaml.org,2002:timestamp",
}

class StringScalarLoader(yaml.SafeLoader):
    """SafeLoader that reads every plain scalar except null as a string."""
    pass

StringScalarLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag not in _TYPED_SCALAR_TAGS]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}

class ConfigError(Exception):
    """Custom exception for config store errors."""
    pass

class ConfigNotFoundError(ConfigError):
    """Raised when the config file does not exist yet."""
    pass

class ConfigWriteError(ConfigError):
    """Raised when the config file cannot be written."""
    pass

class RoleAlias:
    """A short key pointing at an IAM role ARN."""
    def __init__(self, key: str, role_arn: str):
        self.key = key
        self.role_arn = role_arn

    def to_dict(self) -> dict:
        return {
            constants.ROLE_KEY_FIELD: self.key,
            constants.ROLE_ARN_FIELD: self.role_arn,
        }

    def __eq__(self, other):
        if not isinstance(other, RoleAlias):
            return NotImplemented
        return self.key == other.key and self.role_arn == other.role_arn

    def __str__(self):
        return f"RoleAlias(key={self.key}, role_arn={self.role_arn})"

class ProfileEntry:
    """Role aliases and session name stored for a single AWS profile."""
    def __init__(self, profile_id: str, session_name: str, roles: Optional[List[RoleAlias]] = None):
        self.profile_id = profile_id
        self.session_name = session_name
        self.roles = roles if roles is not None else []

    def keys(self) -> List[str]:
        return [role.key for role in self.roles]

    def find_role(self, key: str) -> Optional[RoleAlias]:
        """Returns the first alias registered under key, if any."""
        for role in self.roles:
            if role.key == key:
                return role
        return None

    def add_role(self, key: str, role_arn: str) -> RoleAlias:
        # Appended even if the key is already present; lookups return the first match.
        role = RoleAlias(key, role_arn)
        self.roles.append(role)
        return role

    def edit_role(self, key: str, role_arn: str) -> int:
        """Points every alias named key at role_arn. Returns the number updated."""
        updated = 0
        for role in self.roles:
            if role.key == key:
                role.role_arn = role_arn
                updated += 1
        return updated

    def delete_role(self, key: str) -> int:
        """Removes every alias named key. Returns the number removed."""
        remaining = [role for role in self.roles if role.key != key]
        removed = len(self.roles) - len(remaining)
        self.roles = remaining
        return removed

    def to_dict(self) -> dict:
        return {
            constants.PROFILE_FIELD: self.profile_id,
            constants.SESSION_NAME_FIELD: self.session_name,
            constants.ROLE_LIST_FIELD: [role.to_dict() for role in self.roles],
        }

    def __eq__(self, other):
        if not isinstance(other, ProfileEntry):
            return NotImplemented
        return (self.profile_id == other.profile_id
                and self.session_name == other.session_name
                and self.roles == other.roles)

    def __str__(self):
        return f"ProfileEntry(profile_id={self.profile_id}, session_name={self.session_name}, roles={len(self.roles)})"

def _require_str(value, field: str, source: str) -> str:
    if not isinstance(value, str):
        raise ConfigError(f"Field '{field}' in {source} must be a string, got {value!r}")
    return value

def _parse_role(data, source: str) -> RoleAlias:
    if not isinstance(data, dict):
        raise ConfigError(f"Role entry in {source} is not a mapping: {data!r}")
    missing_fields = [field for field in (constants.ROLE_KEY_FIELD, constants.ROLE_ARN_FIELD) if field not in data]
    if missing_fields:
        raise ConfigError(f"Missing required fields in role entry of {source}: {missing_fields}")
    return RoleAlias(
        _require_str(data[constants.ROLE_KEY_FIELD], constants.ROLE_KEY_FIELD, source),
        _require_str(data[constants.ROLE_ARN_FIELD], constants.ROLE_ARN_FIELD, source),
    )

def _parse_entry(data, source: str, default_profile: Optional[str] = None) -> ProfileEntry:
    if not isinstance(data, dict):
        raise ConfigError(f"Profile entry in {source} is not a mapping: {data!r}")
    profile_id = data.get(constants.PROFILE_FIELD, default_profile)
    if profile_id is None:
        raise ConfigError(f"Missing required field '{constants.PROFILE_FIELD}' in profile entry of {source}")
    role_list = data.get(constants.ROLE_LIST_FIELD) or []
    if not isinstance(role_list, list):
        raise ConfigError(f"'{constants.ROLE_LIST_FIELD}' of profile '{profile_id}' in {source} is not a list")
    roles = [_parse_role(item, source) for item in role_list]
    session_name = data.get(constants.SESSION_NAME_FIELD) or ""
    return ProfileEntry(
        _require_str(profile_id, constants.PROFILE_FIELD, source),
        _require_str(session_name, constants.SESSION_NAME_FIELD, source),
        roles,
    )

def load(path: str) -> List[ProfileEntry]:
    """Loads every profile entry from the YAML config file at path."""
    if not os.path.exists(path):
        raise ConfigNotFoundError(f"{path} does not exist. please use `{constants.PROG_NAME} init`")
    try:
        with open(path, 'r') as f:
            data = yaml.load(f, Loader=StringScalarLoader)
    except yaml.YAMLError as e:
        raise ConfigError(f"Error decoding YAML from {path}: {e}")
    except OSError as e:
        raise ConfigError(f"Error reading file {path}: {e}")

    if data is None:
        logger.debug(f"Config file {path} is empty")
        return []

    if isinstance(data, dict):
        # Single-profile layout written by 1.0 releases
        logger.info(f"Reading legacy single-profile config from {path} as profile '{constants.DEFAULT_PROFILE}'")
        return [_parse_entry(data, path, default_profile=constants.DEFAULT_PROFILE)]

    if not isinstance(data, list):
        raise ConfigError(f"Config file {path} is not a valid YAML list.")

    entries = [_parse_entry(item, path) for item in data]
    seen = set()
    for entry in entries:
        if entry.profile_id in seen:
            raise ConfigError(f"Profile '{entry.profile_id}' appears more than once in {path}")
        seen.add(entry.profile_id)

    logger.debug(f"Loaded {len(entries)} profile entries from {path}")
    return entries

def save(entries: List[ProfileEntry], path: str) -> None:
    """Overwrites the config file at path with entries."""
    payload = yaml.safe_dump(
        [entry.to_dict() for entry in entries],
        sort_keys=False,
        default_flow_style=False,
    )
    try:
        parent = os.path.dirname(path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(path, 'w') as f:
            f.write(payload)
    except OSError as e:
        raise ConfigWriteError(f"Error writing file {path}: {e}")
    logger.debug(f"Wrote {len(entries)} profile entries to {path}")

def find_by_profile(entries: List[ProfileEntry], profile_id: str) -> Optional[ProfileEntry]:
    for entry in entries:
        if entry.profile_id == profile_id:
            return entry
    return None

def require_profile(entries: List[ProfileEntry], profile_id: str) -> ProfileEntry:
    entry = find_by_profile(entries, profile_id)
    if entry is None:
        raise ConfigError(
            f"No entry for profile '{profile_id}'. please use `{constants.PROG_NAME} --profile {profile_id} init`"
        )
    return entry

def init_profile(path: str, profile_id: str, session_name: str) -> ProfileEntry:
    """Creates the entry for profile_id, creating the config file when needed."""
    if not session_name:
        raise ConfigError("you have to specify a session name")
    if not re.fullmatch(constants.SESSION_NAME_PATTERN, session_name):
        raise ConfigError(
            f"invalid session name '{session_name}': use 2-64 letters, digits or any of +=,.@_-"
        )

    try:
        entries = load(path)
    except ConfigNotFoundError:
        logger.info(f"Creating new config file at {path}")
        entries = []

    if find_by_profile(entries, profile_id) is not None:
        raise ConfigError(f"you already have an entry for profile '{profile_id}' in {path}")

    entry = ProfileEntry(profile_id, session_name)
    entries.append(entry)
    save(entries, path)
    return entry
