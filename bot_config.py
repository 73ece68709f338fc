"""Bot configuration and operator policy.

This file centralizes the operator-controlled settings that decide who may
run /op and /deop and which role those commands hand out. Everything is
read from the environment (or a .env file) once at startup and frozen into
an OperatorConfig that is passed to the command cog.

Required:
    DISCORD_TOKEN       bot credential
    OPERATOR_ROLE_ID    numeric id of the role granted/revoked
    ALLOWED_USERS       comma-separated user ids (may be empty)

Optional:
    OPERATOR_ROLE_NAME  role name that authorizes callers (default "Operator")
    COMMAND_PREFIX      prefix for text commands (default "!")
    HEALTH_PORT         port for the health endpoint (disabled when unset)
"""

from dataclasses import dataclass, field
from typing import FrozenSet, Mapping, Optional
import os
import re

DEFAULT_OPERATOR_ROLE_NAME = 'Operator'
DEFAULT_COMMAND_PREFIX = '!'

MAX_SNOWFLAKE = 2 ** 64 - 1

_UNSIGNED_RE = re.compile(r'\+?[0-9]+')


class ConfigError(Exception):
    """Startup configuration problem. Always fatal."""

    def __init__(self, key: str, message: str):
        super().__init__(message)
        self.key = key


class MissingConfigError(ConfigError):
    def __init__(self, key: str):
        super().__init__(
            key,
            f"Missing {key} environment variable. Use a .env file or set this variable in a script.",
        )


class MalformedConfigError(ConfigError):
    pass


@dataclass(frozen=True)
class OperatorConfig:
    token: str = field(repr=False)
    role_id: int
    role_name: str = DEFAULT_OPERATOR_ROLE_NAME
    allowed_users: FrozenSet[int] = frozenset()
    command_prefix: str = DEFAULT_COMMAND_PREFIX
    health_port: Optional[int] = None


def _parse_unsigned(text: str) -> Optional[int]:
    """Parse an unsigned 64-bit integer, returning None when it doesn't fit."""
    if not _UNSIGNED_RE.fullmatch(text):
        return None
    value = int(text)
    if value > MAX_SNOWFLAKE:
        return None
    return value


def resolve_role_id(raw: Optional[str], key: str = 'OPERATOR_ROLE_ID') -> int:
    """Parse a role id, ignoring anything after the first '.'.

    Some hosting dashboards store numbers as floats and hand back
    "718954921353019454.0"; only the integer part is meaningful.
    An empty string counts as present-but-malformed.
    """
    if raw is None:
        raise MissingConfigError(key)
    integer_part = raw.split('.', 1)[0]
    value = _parse_unsigned(integer_part)
    if value is None:
        raise MalformedConfigError(
            key, f"Invalid {key}: failed to parse integer part from '{raw}' (must be a valid u64)"
        )
    return value


def resolve_role_name(raw: Optional[str]) -> str:
    return raw if raw else DEFAULT_OPERATOR_ROLE_NAME


def resolve_allow_list(raw: Optional[str]) -> FrozenSet[int]:
    """Parse a comma-separated list of user ids.

    Entries are trimmed; blanks and anything that is not a valid id are
    dropped without complaint.
    """
    if not raw:
        return frozenset()
    ids = set()
    for piece in raw.split(','):
        value = _parse_unsigned(piece.strip())
        if value is not None:
            ids.add(value)
    return frozenset(ids)


def resolve_port(raw: Optional[str], key: str = 'HEALTH_PORT') -> Optional[int]:
    if not raw:
        return None
    try:
        port = int(raw)
    except ValueError:
        raise MalformedConfigError(key, f"Invalid {key}: '{raw}' is not a port number")
    if not 0 < port < 65536:
        raise MalformedConfigError(key, f"Invalid {key}: {port} is out of range")
    return port


def load_config(environ: Optional[Mapping[str, str]] = None) -> OperatorConfig:
    """Build the process-wide configuration.

    Raises ConfigError on anything missing or malformed; callers treat that
    as fatal.
    """
    env = os.environ if environ is None else environ

    token = env.get('DISCORD_TOKEN')
    if not token:
        raise MissingConfigError('DISCORD_TOKEN')

    role_id = resolve_role_id(env.get('OPERATOR_ROLE_ID'))

    allowed_raw = env.get('ALLOWED_USERS')
    if allowed_raw is None:
        raise MissingConfigError('ALLOWED_USERS')

    return OperatorConfig(
        token=token,
        role_id=role_id,
        role_name=resolve_role_name(env.get('OPERATOR_ROLE_NAME')),
        allowed_users=resolve_allow_list(allowed_raw),
        command_prefix=env.get('COMMAND_PREFIX') or DEFAULT_COMMAND_PREFIX,
        health_port=resolve_port(env.get('HEALTH_PORT')),
    )
