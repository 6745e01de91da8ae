"""Data models for the RacikPC catalog and builder."""
from dataclasses import dataclass
from enum import Enum

from .formatting import to_rupiah

MARKETPLACES = ("shopee", "tokopedia", "lazada")


class PartCategory(str, Enum):
    """The 8 fixed build slots, in display / PDF order."""
    CPU = "CPU"
    MOTHERBOARD = "Motherboard"
    GPU = "GPU"
    RAM = "RAM"
    STORAGE = "Storage"
    PSU = "PSU"
    CASE = "Case"
    COOLER = "Cooler"

    @classmethod
    def parse(cls, value):
        """
        Resolves a category from its tag, case-insensitively.

        :param value: A PartCategory or a string like 'cpu' or 'Motherboard'.
        :return: The matching PartCategory.
        :raises ValueError: If the tag is not one of the 8 categories.
        """
        if isinstance(value, cls):
            return value
        for category in cls:
            if category.value.lower() == str(value).strip().lower():
                return category
        raise ValueError(f"Unknown part category '{value}'")


def _clean_links(raw):
    # Unknown marketplaces are dropped
    if not isinstance(raw, dict):
        return None
    links = {market: raw[market] for market in MARKETPLACES if raw.get(market)}
    return links or None


@dataclass(frozen=True)
class Part:
    id: int
    name: str
    category: PartCategory
    price: int = 0
    image_url: str | None = None
    description: str = ""
    specs: str = ""
    marketplace_links: dict | None = None
    marketplace_link: str | None = None  # legacy single-link column

    @property
    def primary_link(self) -> str | None:
        """The 'Beli Sekarang' link: shopee, then tokopedia, then lazada, then the legacy link."""
        links = self.marketplace_links or {}
        for market in MARKETPLACES:
            if links.get(market):
                return links[market]
        return self.marketplace_link

    @classmethod
    def from_row(cls, row: dict) -> "Part":
        """
        Builds a Part from a `components` table row.

        The category lives in the `type` column. Prices arrive as strings
        or numbers and are coerced to whole Rupiah.

        :param row: The raw row dictionary.
        :raises ValueError: If the row has no usable id, type or price.
        """
        try:
            part_id = int(row["id"])
            price = to_rupiah(row.get("price") or 0)
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid component row: {e}") from e
        if price < 0:
            raise ValueError(f"Negative price for component {part_id}")

        return cls(
            id=part_id,
            name=row.get("name") or "",
            category=PartCategory.parse(row.get("type") or row.get("category")),
            price=price,
            image_url=row.get("image_url") or None,
            description=row.get("description") or "",
            specs=row.get("specs") or "",
            marketplace_links=_clean_links(row.get("marketplace_links")),
            marketplace_link=row.get("marketplace_link") or None,
        )

    def spec_lines(self) -> list[str]:
        """Splits the free-text specs into bullet lines, dropping blanks."""
        return [line.strip(" -•\t") for line in self.specs.splitlines() if line.strip(" -•\t")]


@dataclass(frozen=True)
class Monitor:
    id: int
    title: str
    price: int = 0
    description: str = ""
    resolution: str = ""
    refresh_rate: int = 0
    panel_type: str = ""
    screen_size: float = 0.0
    rating: float = 0.0
    featured: bool = False
    image_url: str | None = None
    marketplace_links: dict | None = None

    @classmethod
    def from_row(cls, row: dict) -> "Monitor":
        try:
            return cls(
                id=int(row["id"]),
                title=row.get("title") or "",
                price=to_rupiah(row.get("price") or 0),
                description=row.get("description") or "",
                resolution=row.get("resolution") or "",
                refresh_rate=int(row.get("refresh_rate") or 0),
                panel_type=row.get("panel_type") or "",
                screen_size=float(row.get("screen_size") or 0),
                rating=float(row.get("rating") or 0),
                featured=bool(row.get("featured")),
                image_url=row.get("image_url") or None,
                marketplace_links=_clean_links(row.get("marketplace_links")),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid monitor row: {e}") from e


@dataclass
class User:
    id: str
    username: str
    role: str = "user"
    email: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @classmethod
    def from_auth_payload(cls, payload: dict) -> "User":
        """
        Maps a Supabase auth user object onto a User.

        The username comes from the user metadata, then the e-mail local
        part, then the literal 'User'. Role defaults to 'user'.
        """
        metadata = payload.get("user_metadata") or {}
        email = payload.get("email")
        username = metadata.get("username") or (email.split("@")[0] if email else "") or "User"
        role = metadata.get("role") or "user"
        return cls(
            id=str(payload.get("id", "")),
            username=username,
            role=role,
            email=email,
        )
