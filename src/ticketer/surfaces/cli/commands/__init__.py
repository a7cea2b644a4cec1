from .expire import register_expire_commands
from .tickets import register_ticket_commands

__all__ = [
    "register_expire_commands",
    "register_ticket_commands",
]
