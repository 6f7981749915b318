"""Commands for gitlab-rescue."""

# Import all commands to register them
from gitlab_rescue.commands.base import Command, get_command_registry, register_command
from gitlab_rescue.commands.dotenv import DotEnvCommand
from gitlab_rescue.commands.get_variable import GetVariableCommand

__all__ = [
    "Command",
    "register_command",
    "get_command_registry",
    "GetVariableCommand",
    "DotEnvCommand",
]
