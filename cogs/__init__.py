"""
Package initializer for the cogs package.

Makes the `cogs` directory an explicit Python package so extensions can be
loaded by dotted name, e.g. `await bot.load_extension("cogs.operator_commands")`.
"""

__all__ = [
    "operator_commands",
]
