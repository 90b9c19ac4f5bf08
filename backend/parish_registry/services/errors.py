"""
Exceptions raised by the service layer.

Routers translate these into HTTP responses; anything else escaping a write
path is treated as a persistence failure.
"""


class RegistryError(Exception):
    """Base exception for service layer errors"""


class ValidationError(RegistryError):
    """Raised when input passes schema validation but fails a database check"""


class MemberNotFoundError(RegistryError, LookupError):
    """Raised when a referenced member does not exist"""

    def __init__(self, member_id: int):
        self.member_id = member_id
        super().__init__(f"Member {member_id} not found")


class RecordNotFoundError(RegistryError, LookupError):
    """Raised when a requested register entry does not exist"""
