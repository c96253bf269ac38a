"""Pack serializers: ORM entities to API DTOs.

Every pack function takes an explicit reference (`ById` or `Loaded`) rather
than guessing from the argument's type.
"""

from campra.repositories.refs import ById, EntityNotFound, Loaded, Ref, resolve, resolve_optional

__all__ = [
    "ById",
    "EntityNotFound",
    "Loaded",
    "Ref",
    "resolve",
    "resolve_optional",
]
