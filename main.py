import logging
import os
import sys

from racikpc.config import Config, setup_logging
from racikpc.database import catalog_from_config
from racikpc.errors import ExportError
from racikpc.exporter import export_filename, render_pdf
from racikpc.formatting import format_price
from racikpc.models import PartCategory
from racikpc.partlist import BuildSession

logger = logging.getLogger(__name__)

# --- Category shortcuts accepted at the prompt ---
CATEGORY_ALIASES = {
    "cpu": PartCategory.CPU,
    "mobo": PartCategory.MOTHERBOARD,
    "motherboard": PartCategory.MOTHERBOARD,
    "gpu": PartCategory.GPU,
    "vga": PartCategory.GPU,
    "ram": PartCategory.RAM,
    "memory": PartCategory.RAM,
    "storage": PartCategory.STORAGE,
    "ssd": PartCategory.STORAGE,
    "psu": PartCategory.PSU,
    "case": PartCategory.CASE,
    "casing": PartCategory.CASE,
    "cooler": PartCategory.COOLER,
}


class RacikPCApp:
    """
    Command-line manual builder.

    Lets the user pick one part per category from the catalog, clear
    slots, see compatibility issues and save the build as a PDF.
    """

    def __init__(self, catalog, output_dir="."):
        """
        :param catalog: The Catalog to pick parts from.
        :param output_dir: Folder PDF exports are written to.
        """
        self.catalog = catalog
        self.output_dir = output_dir
        self.build = BuildSession()

    def pick_part(self, category):
        """
        Lists the catalog parts for a category and lets the user pick one.

        :param category: The PartCategory to fill.
        """
        keyword = input(f"Search {category.value} (enter for all): ").strip()
        results = self.catalog.search_parts(category, keyword)
        if not results:
            print(f"Stok komponen kosong for '{keyword or category.value}'.")
            return

        print(f"\nFound {len(results)} {category.value} parts:")
        for i, part in enumerate(results[:10]):
            print(f"  [{i+1}] {part.name} - {format_price(part.price)}")
        print("  [0] Cancel")

        try:
            choice = int(input("Pick a number: ").strip())
            if choice == 0:
                return
            if choice < 0:
                raise IndexError(choice)
            self.build.select_part(category, results[choice - 1])
        except (ValueError, IndexError):
            print("Invalid choice, try again.")

    def export(self):
        """Writes the build to a PDF in the output folder, if it can be exported."""
        try:
            document = render_pdf(self.build)
        except ExportError as e:
            print(f"Cannot save PDF: {e}")
            return None
        path = os.path.join(self.output_dir, export_filename())
        with open(path, "wb") as f:
            f.write(document)
        print(f"Saved {path}")
        return path

    def run(self):
        """
        The main interaction loop.

        Commands: a category name to pick a part, 'clear <category>',
        'reset', 'pdf', or 'quit'.
        """
        print("\n--- RACIK PC MANUAL ---")
        print("Type a category (cpu, mobo, gpu, ...) to pick a part.")
        print("Type 'clear <category>', 'reset', 'pdf' or 'quit'.")

        while True:
            self.build.display()
            command = input("\n> ").strip().lower()

            if command == "quit":
                print("Sampai jumpa!")
                break
            if command == "reset":
                self.build.reset()
                continue
            if command == "pdf":
                self.export()
                continue
            if command.startswith("clear "):
                category = CATEGORY_ALIASES.get(command[len("clear "):].strip())
                if category:
                    self.build.clear_slot(category)
                else:
                    print("Unknown category.")
                continue

            category = CATEGORY_ALIASES.get(command)
            if not category:
                print(f"'{command}' isn't a known part type. Try again.")
                continue
            self.pick_part(category)


# --- Application Entry Point ---
if __name__ == "__main__":
    config = Config.from_env()
    setup_logging(config.log_level)
    try:
        catalog = catalog_from_config(config)
    except ValueError as e:
        logger.error(str(e))
        sys.exit(1)

    parts = catalog.list_parts()
    if not parts:
        logger.warning("Catalog is empty; nothing to build with.")
    RacikPCApp(catalog).run()
