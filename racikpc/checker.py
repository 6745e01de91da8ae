import logging
import re

from .models import PartCategory

logger = logging.getLogger(__name__)

SOCKET_PATTERN = re.compile(r'LGA\s?\d+|AM\d', re.IGNORECASE)


def extract_socket(specs):
    """
    Pulls the first socket token (e.g. 'LGA 1700', 'am5') out of free-text specs.

    :param specs: The part's specs string (may be empty or None).
    :return: The matched substring, exactly as written, or None.
    """
    if not specs:
        return None
    match = SOCKET_PATTERN.search(specs)
    return match.group(0) if match else None


def _normalize_socket(socket_str):
    """
    Normalizes a socket token into a comparable form.

    Upper-cases and strips all whitespace, so 'lga 1700' and 'LGA1700'
    compare equal.

    :param socket_str: The raw socket token.
    :return: A normalized string (e.g. 'LGA1700', 'AM5').
    """
    return re.sub(r'\s+', '', socket_str).upper()


class CompatibilityChecker:
    """
    Checks the parts selected in a build for known conflicts.

    Only the CPU <-> Motherboard socket pairing is checked. RAM type,
    PSU wattage and case form factor are not.
    """

    def check_build(self, parts):
        """
        Runs the compatibility checks on a category -> part mapping.

        :param parts: Mapping of PartCategory to a Part or None.
        :return: A list of issue strings. Empty if no issues.
        """
        issues = []

        cpu = parts.get(PartCategory.CPU)
        mobo = parts.get(PartCategory.MOTHERBOARD)

        # --- CPU <-> Motherboard Socket Check ---
        if cpu and mobo:
            cpu_socket = extract_socket(cpu.specs)
            mobo_socket = extract_socket(mobo.specs)

            if not cpu_socket or not mobo_socket:
                logger.debug(
                    f"Skipping socket check, no socket in specs "
                    f"(cpu={cpu_socket!r}, motherboard={mobo_socket!r})"
                )
            elif _normalize_socket(cpu_socket) != _normalize_socket(mobo_socket):
                issues.append(
                    f"Socket mismatch: CPU ({cpu_socket}) vs Motherboard ({mobo_socket})"
                )
            else:
                logger.debug(f"CPU <-> Mobo socket OK ({cpu_socket})")

        return issues
