import io
import logging
import os
import sys
from datetime import datetime

import colorama
import discord
from discord.ext import commands
from dotenv import load_dotenv

from bot_config import ConfigError, OperatorConfig, load_config

logger = logging.getLogger(__name__)

LICENSE_NOTICE = (
    "Copyright (c) 2025 HauC3\n\n"
    "Licensed under the Blue Oak Model License 1.0.0 "
    "(see https://blueoakcouncil.org/license/1.0.0 for details)"
)

EXTENSIONS = [
    "cogs.operator_commands",
]


def _print_startup_banner():
    ts = datetime.now().strftime('%Y-%m-%d %H:%M:%S')
    print(f"\n{LICENSE_NOTICE}\n")
    print(f"✨ Operator bot • started at {ts}\n")


def setup_logging(level_name=None):
    """Configure a compact, emoji-based console logger and reduce noise.

    The level comes from LOG_LEVEL (default INFO). Returns a module logger.
    """
    colorama.init()
    RESET = colorama.Style.RESET_ALL
    COLORS = {
        'DEBUG': colorama.Fore.CYAN,
        'INFO': colorama.Fore.GREEN,
        'WARNING': colorama.Fore.YELLOW,
        'ERROR': colorama.Fore.RED,
        'CRITICAL': colorama.Fore.MAGENTA,
    }

    LEVEL_EMOJI = {
        'DEBUG': '🔎',
        'INFO': 'ℹ️',
        'WARNING': '⚠️',
        'ERROR': '❌',
        'CRITICAL': '💥',
    }

    class CleanFormatter(logging.Formatter):
        def format(self, record: logging.LogRecord) -> str:
            ts = datetime.now().strftime('%H:%M:%S')
            lvl = record.levelname
            emoji = LEVEL_EMOJI.get(lvl, '')
            color = COLORS.get(lvl, '')
            name = record.name
            # shorten common long logger names for readability
            if name.startswith('discord'):
                name = 'discord'
            if name == '__main__' or name == __name__:
                name = 'main'
            message = super().format(record)
            return f"{color}{emoji} {ts} [{lvl}] {name}: {message}{RESET}"

    level_name = (level_name or os.getenv('LOG_LEVEL') or 'INFO').upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO

    # remove any pre-configured handlers (avoids duplicate lines)
    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)

    # Windows consoles often use cp1252 which can't encode emojis
    if isinstance(sys.stdout, io.TextIOWrapper) and (sys.stdout.encoding or '').lower() != 'utf-8':
        sys.stdout.reconfigure(encoding='utf-8', errors='replace')
    sh = logging.StreamHandler(stream=sys.stdout)
    sh.setLevel(level)
    sh.setFormatter(CleanFormatter('%(message)s'))
    root.addHandler(sh)
    root.setLevel(level)

    for noisy in ('discord', 'aiohttp.access', 'asyncio'):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    return logging.getLogger(__name__)


def create_bot(config: OperatorConfig) -> commands.Bot:
    intents = discord.Intents.default()
    intents.message_content = True
    bot = commands.Bot(command_prefix=commands.when_mentioned_or(config.command_prefix), intents=intents)
    bot.operator_config = config
    bot.health_runner = None
    synced = False

    async def setup_hook():
        """Load cogs when bot starts"""
        for ext in EXTENSIONS:
            await bot.load_extension(ext)
            logger.info(f"✅ Loaded {ext}")

        if config.health_port:
            from health_server import start_health_server
            bot.health_runner = await start_health_server(bot, config.health_port)

    @bot.event
    async def on_ready():
        """Called when the bot is ready and connected to Discord"""
        nonlocal synced
        logger.info(f"{bot.user} is connected!")
        if synced:
            return
        try:
            commands_synced = await bot.tree.sync()
            synced = True
            logger.info(f"✅ Synced {len(commands_synced)} commands globally")
        except discord.HTTPException as e:
            logger.error(f"❌ Failed to sync application commands: {e}")

    base_close = bot.close

    async def close():
        if bot.health_runner is not None:
            await bot.health_runner.cleanup()
            bot.health_runner = None
        await base_close()

    bot.setup_hook = setup_hook
    bot.close = close
    return bot


def main():
    load_dotenv()
    setup_logging()
    _print_startup_banner()

    try:
        config = load_config()
    except ConfigError as e:
        logger.error(str(e))
        sys.exit(1)

    logger.info(f"Allowed users: {sorted(config.allowed_users)}")

    bot = create_bot(config)
    try:
        bot.run(config.token, log_handler=None)
    except discord.LoginFailure as e:
        logger.error(f"❌ Failed to log in: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
