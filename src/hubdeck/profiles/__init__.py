"""Profile management for hubdeck.

Provides the profile store and the pieces it is built from:

* :class:`ProfileStore` -- stateful authority over the profile list.
* :mod:`~hubdeck.profiles.validator` -- structural rules for profiles.
* :mod:`~hubdeck.profiles.migrations` -- presence-gated upgrades of old records.
* :mod:`~hubdeck.profiles.template` -- the default profile used by "add".
* :class:`FilePersistence` -- the on-disk persistence collaborator.

Example::

    from hubdeck.profiles import FilePersistence, ProfileStore

    store = ProfileStore(FilePersistence(), verifier, platform)
    result = await store.init()
"""

from hubdeck.profiles.persistence import FilePersistence, ProfilePersistence
from hubdeck.profiles.store import (
    InitResult,
    ProfileStore,
    StorePhase,
    SwitchResult,
    UsersResult,
)

__all__ = [
    "FilePersistence",
    "InitResult",
    "ProfilePersistence",
    "ProfileStore",
    "StorePhase",
    "SwitchResult",
    "UsersResult",
]
