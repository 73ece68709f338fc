"""Grant or revoke the operator role on a guild member."""
import asyncio
import enum
import logging
from typing import Optional

import aiohttp
import discord

logger = logging.getLogger(__name__)


class RoleDirection(enum.Enum):
    GRANT = 'grant'
    REVOKE = 'revoke'


class MutationOutcome(enum.Enum):
    SUCCESS = 'success'
    FAILURE = 'failure'


async def apply_role(
    target: discord.Member,
    role_id: int,
    direction: RoleDirection,
    *,
    reason: Optional[str] = None,
) -> MutationOutcome:
    """Make a single add/remove call for the role.

    Every failure (missing bot permission, unknown role, network trouble)
    comes back as FAILURE; the cause only goes to the log. No retries.
    """
    role = discord.Object(id=role_id)
    try:
        if direction is RoleDirection.GRANT:
            await target.add_roles(role, reason=reason)
        else:
            await target.remove_roles(role, reason=reason)
    except discord.Forbidden as e:
        logger.warning(f"⚠️ Missing permission to {direction.value} role {role_id} for {target}: {e}")
        return MutationOutcome.FAILURE
    except discord.HTTPException as e:
        logger.warning(f"⚠️ Discord rejected {direction.value} of role {role_id} for {target}: {e}")
        return MutationOutcome.FAILURE
    except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
        logger.warning(f"⚠️ Network error during {direction.value} of role {role_id} for {target}: {e!r}")
        return MutationOutcome.FAILURE

    verb = 'Granted' if direction is RoleDirection.GRANT else 'Revoked'
    logger.info(f"✅ {verb} role {role_id} for {target}")
    return MutationOutcome.SUCCESS
