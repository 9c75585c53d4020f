from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class CatalogCard:
    """
    A canonical card from the catalog.

    Attributes:
        card_id: Stable catalog identifier (e.g., "TFC-1"), if the source has one
        name: Character or card name (e.g., "Tipo")
        version: Subtitle for characters (e.g., "Growing Son")
        cost: Ink cost to play the card
        lore: Lore gained when questing
        strength: Character strength
        willpower: Character willpower
        card_type: Card type (Character, Action, Item, Location, ...)
        inks: Ink colors, usually one, two for dual-ink cards
        rarity: Rarity label as published
        inkable: True if the card can be put into the inkwell
        set_code: Set identifier (e.g., "1", "2", "Q1")
        simple_name: Pre-normalized name some catalogs ship for lookups
    """

    card_id: str | None
    name: str
    version: str | None = None
    cost: int | None = None
    lore: int | None = None
    strength: int | None = None
    willpower: int | None = None
    card_type: str | None = None
    inks: tuple[str, ...] = ()
    rarity: str | None = None
    inkable: bool | None = None
    set_code: str | None = None
    simple_name: str | None = None

    @property
    def full_name(self) -> str:
        """Display name, "Name - Version" when the card has a version."""
        if self.version:
            return f"{self.name} - {self.version}"
        return self.name

    @property
    def ink(self) -> str | None:
        """Primary ink color."""
        return self.inks[0] if self.inks else None
