import logging

import discord
from discord import app_commands
from discord.ext import commands

from bot_config import OperatorConfig
from operator_auth import MembershipRetrievalError, evaluate, get_membership_view
from role_mutation import MutationOutcome, RoleDirection, apply_role

logger = logging.getLogger(__name__)

DENIED_MESSAGE = "You do not have permission to run this command."
FAILURE_MESSAGE = "An error has occurred."
RETRIEVAL_FAILURE_MESSAGE = "Could not verify your server roles. Please try again."

SUCCESS_MESSAGES = {
    RoleDirection.GRANT: "Successfully opped {name}",
    RoleDirection.REVOKE: "Successfully de-opped {name}",
}


class OperatorCog(commands.Cog):
    """Cog for the op/deop commands"""

    def __init__(self, bot: commands.Bot, config: OperatorConfig):
        self.bot = bot
        self.config = config
        logger.info("OperatorCog initialized")

    @commands.hybrid_command(name="op", description="Op a user")
    @app_commands.describe(user="User")
    async def op(self, ctx: commands.Context, user: discord.Member):
        await self.run_role_command(ctx, user, RoleDirection.GRANT)

    @commands.hybrid_command(name="deop", description="De-op a user")
    @app_commands.describe(user="User")
    async def deop(self, ctx: commands.Context, user: discord.Member):
        await self.run_role_command(ctx, user, RoleDirection.REVOKE)

    async def run_role_command(self, ctx: commands.Context, target: discord.Member, direction: RoleDirection) -> str:
        """Resolve one op/deop invocation and send its single reply."""
        # Acknowledge slash invocations before any API calls; no-op for prefix commands
        try:
            await ctx.defer()
        except discord.NotFound as e:
            logger.warning(f"⚠️ Interaction expired before defer: {e}")

        try:
            message = await self._resolve(ctx, target, direction)
        except Exception as e:
            logger.error(f"❌ Unexpected error during {direction.value} for {target}: {e}", exc_info=True)
            message = FAILURE_MESSAGE
        await ctx.send(message)
        return message

    async def _resolve(self, ctx: commands.Context, target: discord.Member, direction: RoleDirection) -> str:
        config = self.config
        requester = ctx.author

        member = requester if isinstance(requester, discord.Member) else None
        try:
            roles = await get_membership_view(ctx.guild, requester.id, member)
        except MembershipRetrievalError as e:
            logger.error(f"❌ Could not get member roles for {requester}: {e}")
            return RETRIEVAL_FAILURE_MESSAGE

        decision = evaluate(requester.id, roles, config.role_name, config.allowed_users)
        if not decision:
            logger.info(f"Denied {direction.value} of operator role for {requester} (id {requester.id})")
            return DENIED_MESSAGE
        logger.debug(f"{requester} authorized via {decision.path.value}")

        outcome = await apply_role(
            target,
            config.role_id,
            direction,
            reason=f"{direction.value} requested by {requester} ({requester.id})",
        )
        if outcome is MutationOutcome.SUCCESS:
            return SUCCESS_MESSAGES[direction].format(name=target.display_name)
        return FAILURE_MESSAGE

    async def cog_command_error(self, ctx: commands.Context, error: commands.CommandError):
        if isinstance(error, (commands.MissingRequiredArgument, commands.BadArgument)):
            name = ctx.command.name if ctx.command else "op"
            await ctx.send(f"Usage: {ctx.clean_prefix}{name} <user>")
            return
        logger.error(f"❌ Command error in {ctx.command}: {error}", exc_info=error)
        await ctx.send(FAILURE_MESSAGE)


async def setup(bot: commands.Bot):
    """Required setup function for loading the cog"""
    await bot.add_cog(OperatorCog(bot, bot.operator_config))
    logger.info("OperatorCog loaded successfully")
