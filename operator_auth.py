"""
Operator permission checks shared by the op/deop commands.

A caller may manage the operator role when either:
1. Their user id is in the ALLOWED_USERS allow-list
2. They hold a role whose name is exactly OPERATOR_ROLE_NAME
"""
import enum
import logging
from dataclasses import dataclass
from typing import AbstractSet, Iterable, List, Optional

import discord

logger = logging.getLogger(__name__)


class MembershipRetrievalError(Exception):
    """The caller's roles could not be determined."""


class AuthorizationPath(enum.Enum):
    ROLE = 'role'
    ALLOW_LIST = 'allow_list'
    NONE = 'none'


@dataclass(frozen=True)
class AuthorizationDecision:
    allowed: bool
    path: AuthorizationPath

    def __bool__(self) -> bool:
        return self.allowed


def evaluate(
    requester_id: int,
    requester_roles: Optional[Iterable],
    operator_role_name: str,
    allow_list: Optional[AbstractSet[int]],
) -> AuthorizationDecision:
    """Decide whether a caller may manage the operator role.

    The allow-list lookup runs first since it needs nothing but a set
    membership test. Role names are compared exactly (case-sensitive).
    A missing roles view or allow-list just means no match on that path.
    """
    if allow_list and requester_id in allow_list:
        return AuthorizationDecision(True, AuthorizationPath.ALLOW_LIST)

    for role in requester_roles or ():
        if getattr(role, 'name', None) == operator_role_name:
            return AuthorizationDecision(True, AuthorizationPath.ROLE)

    return AuthorizationDecision(False, AuthorizationPath.NONE)


def is_authorized(
    requester_id: int,
    requester_roles: Optional[Iterable],
    operator_role_name: str,
    allow_list: Optional[AbstractSet[int]],
) -> bool:
    return evaluate(requester_id, requester_roles, operator_role_name, allow_list).allowed


async def get_membership_view(
    guild: Optional[discord.Guild],
    user_id: int,
    member: Optional[discord.Member] = None,
) -> List[discord.Role]:
    """
    Return the caller's current roles in the guild.
    A Member already attached to the invocation is used as-is; otherwise
    the member cache is tried first with a fallback to the API.

    Raises MembershipRetrievalError when the command was not used in a guild
    or the member could not be fetched.
    """
    if guild is None:
        raise MembershipRetrievalError("Command used outside of a server")

    if member is None:
        member = guild.get_member(user_id)
    if member is None:
        try:
            member = await guild.fetch_member(user_id)
        except discord.NotFound as e:
            raise MembershipRetrievalError(f"User {user_id} is not a member of guild {guild.id}") from e
        except discord.HTTPException as e:
            raise MembershipRetrievalError(f"Could not fetch member {user_id}: {e}") from e

    roles = getattr(member, 'roles', None)
    if roles is None:
        raise MembershipRetrievalError(f"Could not get roles for member {user_id}")
    return list(roles)
