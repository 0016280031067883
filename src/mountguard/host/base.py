"""
Host-facing interfaces for mountguard.

The policy core does not know about players, inventories or chat. The host
plugs in two collaborators:
- PermissionChecker: answers "does this actor hold this permission?"
- MessageSink: delivers a rendered denial message to an actor

Two simple implementations are included for hosts without their own
permission system and for the CLI: StaticPermissions and CatalogMessageSink.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable

from mountguard.messages import DEFAULT_LANG, MessageCatalog

# Permission that exempts an actor from every gear restriction
PERMISSION_BYPASS = "mountguard.bypass"


class PermissionChecker(ABC):
    """
    Source of per-actor permissions.

    Implementations may fail (e.g. a remote permission store is down); the
    host adapter treats any failure as "no permission".
    """

    @abstractmethod
    def has_permission(self, actor_id: str, permission: str) -> bool:
        """Return True if the actor holds the permission."""
        ...


class MessageSink(ABC):
    """
    Delivers denial feedback to actors. Fire-and-forget.

    Example:
        class ChatSink(MessageSink):
            def deliver(self, actor_id, template_key, args):
                player = server.find(actor_id)
                player.chat(lang.render(template_key, *args, lang=player.lang))
    """

    @abstractmethod
    def deliver(self, actor_id: str, template_key: str, args: tuple[str, ...]) -> None:
        """Send a templated message to an actor."""
        ...


class StaticPermissions(PermissionChecker):
    """In-memory permission grants: permission -> set of actor ids."""

    def __init__(self, grants: dict[str, Iterable[str]] | None = None) -> None:
        self._grants: dict[str, set[str]] = {
            permission: set(actors) for permission, actors in (grants or {}).items()
        }

    def grant(self, actor_id: str, permission: str = PERMISSION_BYPASS) -> None:
        self._grants.setdefault(permission, set()).add(actor_id)

    def revoke(self, actor_id: str, permission: str = PERMISSION_BYPASS) -> None:
        self._grants.get(permission, set()).discard(actor_id)

    def has_permission(self, actor_id: str, permission: str) -> bool:
        return actor_id in self._grants.get(permission, set())


class CatalogMessageSink(MessageSink):
    """
    Renders templates through a MessageCatalog and hands the text to a
    callback, e.g. a console print or a chat send.
    """

    def __init__(
        self,
        send: Callable[[str, str], None],
        catalog: MessageCatalog | None = None,
        lang: str = DEFAULT_LANG,
    ) -> None:
        self._send = send
        self.catalog = catalog if catalog is not None else MessageCatalog()
        self.lang = lang

    def deliver(self, actor_id: str, template_key: str, args: tuple[str, ...]) -> None:
        self._send(actor_id, self.catalog.render(template_key, *args, lang=self.lang))
