"""
Message templates for mountguard.

Decisions carry a template key plus positional arguments; the host renders
them in the actor's language. This module ships the default English table
and a small catalog hosts can extend with translations.
"""

MSG_MOUNT_RESTRICTED = "Warn.MountRestrictedItems"
MSG_EQUIP_RESTRICTED = "Warn.CannotEquipRestrictedWhileMounted"

DEFAULT_LANG = "en"

DEFAULT_MESSAGES: dict[str, str] = {
    MSG_MOUNT_RESTRICTED: "Mount blocked. Remove these items before mounting:\n{0}",
    MSG_EQUIP_RESTRICTED: "Equip blocked while mounted on this vehicle:\n{0}",
}


class MessageCatalog:
    """
    Template lookup by language with English fallback.

    Usage:
        catalog = MessageCatalog()
        catalog.register({MSG_EQUIP_RESTRICTED: "Interdit: {0}"}, lang="fr")
        text = catalog.render(MSG_EQUIP_RESTRICTED, "Heavy Plate Helmet", lang="fr")
    """

    def __init__(self) -> None:
        self._messages: dict[str, dict[str, str]] = {DEFAULT_LANG: dict(DEFAULT_MESSAGES)}

    def register(self, messages: dict[str, str], lang: str = DEFAULT_LANG) -> None:
        """Add or override templates for a language."""
        self._messages.setdefault(lang, {}).update(messages)

    def get(self, key: str, lang: str = DEFAULT_LANG) -> str:
        """
        Look up a template.

        Falls back to English, then to the key itself, so a missing
        translation still produces something readable.
        """
        table = self._messages.get(lang, {})
        if key in table:
            return table[key]
        return self._messages[DEFAULT_LANG].get(key, key)

    def render(self, key: str, *args: str, lang: str = DEFAULT_LANG) -> str:
        """Format a template with positional arguments."""
        return self.get(key, lang).format(*args)

    @property
    def languages(self) -> list[str]:
        return sorted(self._messages)
