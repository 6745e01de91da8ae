import logging

from .checker import CompatibilityChecker
from .formatting import PLACEHOLDER, format_price
from .models import PartCategory

logger = logging.getLogger(__name__)

TOTAL_LABEL = "Total Harga"


class BuildSession:
    """
    Represents a single PC build in progress.

    Holds exactly one slot per PartCategory (8 in total), each empty or
    holding one Part. The total price and compatibility issues are
    derived from the slots on every read, never stored.
    """

    def __init__(self, checker=None):
        """
        Initializes a new, empty build.

        :param checker: A CompatibilityChecker. A default one is created if omitted.
        """
        self.checker = checker or CompatibilityChecker()
        self.parts = {category: None for category in PartCategory}

    def select_part(self, category, part):
        """
        Adds or replaces the part in a slot.

        The catalog is trusted to pre-filter by category; no cross-check
        against `part.category` is made.

        :param category: A PartCategory (or its tag, e.g. 'cpu').
        :param part: The Part to place in the slot.
        """
        category = PartCategory.parse(category)
        self.parts[category] = part
        logger.debug(f"Selected {category.value}: {part.name}")

    def clear_slot(self, category):
        """Empties one slot. Clearing an empty slot is a no-op."""
        category = PartCategory.parse(category)
        self.parts[category] = None

    def reset(self):
        for category in PartCategory:
            self.parts[category] = None

    def get_total_price(self):
        """
        Sums the price of every filled slot.

        :return: The total in whole Rupiah, 0 for an empty build.
        """
        return sum(part.price for part in self.parts.values() if part)

    def get_compatibility_issues(self):
        return self.checker.check_build(self.parts)

    def can_export(self):
        """True when at least one part is priced and no conflicts are known."""
        return not self.get_compatibility_issues() and self.get_total_price() > 0

    def export_rows(self):
        """
        Produces the rows handed to the PDF exporter.

        One (category, name, formatted price) row per slot in category
        order, with '-' for empty slots, followed by the total row.

        :return: A list of 3-tuples of strings.
        """
        rows = []
        for category, part in self.parts.items():
            if part:
                rows.append((category.value, part.name, format_price(part.price)))
            else:
                rows.append((category.value, PLACEHOLDER, PLACEHOLDER))
        rows.append(("", TOTAL_LABEL, format_price(self.get_total_price())))
        return rows

    def selected_ids(self):
        """
        Serializes the build as {category tag: part id} for filled slots.

        This is what gets stored in the web session cookie.
        """
        return {category.value: part.id for category, part in self.parts.items() if part}

    @classmethod
    def from_ids(cls, ids, parts, checker=None):
        """
        "Re-hydrates" a build from stored ids against a catalog listing.

        Ids that no longer exist in the catalog, and unknown category
        tags, leave the slot empty.

        :param ids: Mapping of category tag to part id.
        :param parts: The Parts currently in the catalog.
        :param checker: Optional CompatibilityChecker to use.
        :return: A new BuildSession.
        """
        session = cls(checker=checker)
        by_id = {part.id: part for part in parts}
        for tag, part_id in (ids or {}).items():
            try:
                category = PartCategory.parse(tag)
            except ValueError:
                logger.warning(f"Dropping unknown slot '{tag}' from stored build")
                continue
            part = by_id.get(part_id)
            if part:
                session.parts[category] = part
            else:
                logger.warning(f"Part {part_id} for {category.value} is no longer in the catalog")
        return session

    def display(self):
        """
        Prints a formatted summary of the current build to the console.

        Includes part names, individual prices, the total price and any
        compatibility issues.
        """
        print("\n--- RAKITAN KAMU ---")
        for category, part in self.parts.items():
            if part:
                print(f"  {category.value.upper()}: {part.name} - {format_price(part.price)}")
            else:
                print(f"  {category.value.upper()}: ---")

        print("---------------------------------")
        print(f"  TOTAL: {format_price(self.get_total_price())}")
        print("---------------------------------")
        for issue in self.get_compatibility_issues():
            print(f"  ! {issue}")
