import json
import logging
import os

import requests

from .errors import CatalogError, InvalidPayloadError
from .formatting import to_rupiah
from .models import MARKETPLACES, Monitor, Part, PartCategory

logger = logging.getLogger(__name__)

COMPONENTS_TABLE = "components"
MONITORS_TABLE = "monitors"

# Write payload shapes, tried in order until one is accepted by the schema:
#   full         -> `marketplace_links` mapping plus the legacy `marketplace_link`
#   links_only   -> only the `marketplace_links` mapping
#   legacy_link  -> only the single `marketplace_link` column (primary link)
#   no_links     -> neither link column
PAYLOAD_SHAPES = ("full", "links_only", "legacy_link", "no_links")
LINK_COLUMNS = ("marketplace_links", "marketplace_link")
MISSING_COLUMN_CODES = {"PGRST204", "42703"}


def _parse_rows(rows, factory, label):
    """Converts raw rows, skipping (and logging) any that fail to parse."""
    items = []
    for row in rows:
        try:
            items.append(factory(row))
        except ValueError as e:
            row_id = row.get('id', '?') if isinstance(row, dict) else '?'
            logger.warning(f"Skipping {label} row {row_id}: {e}")
    return items


def shape_payload(payload, shape):
    """
    Rewrites a write payload into one of the PAYLOAD_SHAPES.

    :param payload: The full payload (may hold `marketplace_links` and/or
                    `marketplace_link`).
    :param shape: One of PAYLOAD_SHAPES.
    :return: A new dictionary; the input is not modified.
    """
    base = {k: v for k, v in payload.items() if k not in LINK_COLUMNS}
    links = payload.get("marketplace_links") or {}

    if shape == "full":
        shaped = dict(base)
        if links:
            shaped["marketplace_links"] = links
        if payload.get("marketplace_link"):
            shaped["marketplace_link"] = payload["marketplace_link"]
        return shaped

    if shape == "links_only":
        shaped = dict(base)
        if links:
            shaped["marketplace_links"] = links
        return shaped

    if shape == "legacy_link":
        primary = next((links[m] for m in MARKETPLACES if links.get(m)), None)
        primary = primary or payload.get("marketplace_link")
        shaped = dict(base)
        if primary:
            shaped["marketplace_link"] = primary
        return shaped

    if shape == "no_links":
        return base

    raise ValueError(f"Unknown payload shape '{shape}'")


def validate_payload(payload, partial=False):
    """
    Checks a write payload before it is sent to the database.

    :param payload: The column values to write.
    :param partial: True for updates, where `type` and `price` may be omitted.
    :return: A copy with `type` set to the canonical tag and `price` in whole Rupiah.
    :raises InvalidPayloadError: If the payload would not read back as a Part.
    """
    if not isinstance(payload, dict):
        raise InvalidPayloadError("Payload must be an object")
    cleaned = dict(payload)

    if "type" in cleaned or not partial:
        try:
            cleaned["type"] = PartCategory.parse(cleaned.get("type")).value
        except ValueError as e:
            raise InvalidPayloadError(str(e)) from e

    if "price" in cleaned or not partial:
        try:
            price = to_rupiah(cleaned.get("price") or 0)
        except ValueError as e:
            raise InvalidPayloadError(str(e)) from e
        if price < 0:
            raise InvalidPayloadError("Price must not be negative")
        cleaned["price"] = price

    if not partial and not str(cleaned.get("name") or "").strip():
        raise InvalidPayloadError("Name is required")
    return cleaned


def is_missing_column_error(error):
    """True if a CatalogError says one of the link columns does not exist."""
    if error.code in MISSING_COLUMN_CODES:
        return True
    message = str(error).lower()
    return any(col in message for col in LINK_COLUMNS) and "column" in message


class Catalog:
    """
    Read-only source of Parts and Monitors, plus keyword search.

    Subclasses provide `list_parts` and `list_monitors`. Both degrade to
    an empty list on failure instead of raising.
    """

    def list_parts(self):
        raise NotImplementedError

    def list_monitors(self):
        raise NotImplementedError

    def get_part(self, part_id):
        """
        Finds a single part by id.

        :param part_id: The part's integer id.
        :return: The Part, or None if it is not in the catalog.
        """
        for part in self.list_parts():
            if part.id == part_id:
                return part
        return None

    def search_parts(self, category=None, keyword=""):
        """
        Searches the catalog, first filtering by category, then by keyword.

        :param category: A PartCategory or tag, or None for every category.
        :param keyword: Case-insensitive substring of the part name.
        :return: A list of matching Parts, cheapest first.
        """
        if category is not None:
            category = PartCategory.parse(category)
        keyword = (keyword or "").strip().lower()

        matches = []
        for part in self.list_parts():
            # --- STEP 1: CATEGORY FILTER ---
            if category is not None and part.category != category:
                continue
            # --- STEP 2: KEYWORD FILTER ---
            if keyword and keyword not in part.name.lower():
                continue
            matches.append(part)

        return sorted(matches, key=lambda p: p.price)


class LocalCatalog(Catalog):
    """
    Catalog backed by `components.json` and `monitors.json` in a folder.

    Each file holds a JSON list of rows shaped like the Supabase tables.
    """

    def __init__(self, json_folder_path):
        self.json_path = json_folder_path
        logger.info(f"Using local catalog at {self.json_path}")

    def _load(self, table):
        path = os.path.join(self.json_path, f"{table}.json")
        try:
            with open(path, "r", encoding="utf-8") as f:
                rows = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Could not load {path}: {e}")
            return []
        if not isinstance(rows, list):
            logger.error(f"{path} does not hold a list of rows")
            return []
        logger.debug(f"Loaded {len(rows)} items from {path}")
        return rows

    def list_parts(self):
        return _parse_rows(self._load(COMPONENTS_TABLE), Part.from_row, "component")

    def list_monitors(self):
        return _parse_rows(self._load(MONITORS_TABLE), Monitor.from_row, "monitor")


class SupabaseCatalog(Catalog):
    """
    Catalog backed by the Supabase REST API (PostgREST).

    Reads swallow errors and return an empty list. Admin writes raise
    CatalogError, and go through the PAYLOAD_SHAPES fallback so they work
    against databases that predate the `marketplace_links` column.
    """

    def __init__(self, url, anon_key, session=None, timeout=10.0, access_token=None):
        """
        :param url: The project URL, e.g. 'https://xyz.supabase.co'.
        :param anon_key: The project's anon (public) API key.
        :param session: A requests.Session (or compatible) to send requests with.
        :param timeout: Per-request timeout in seconds.
        :param access_token: A user access token for writes, if logged in.
        """
        self.base_url = f"{url.rstrip('/')}/rest/v1"
        self.anon_key = anon_key
        self.session = session or requests.Session()
        self.timeout = timeout
        self.access_token = access_token

    def set_access_token(self, token):
        self.access_token = token

    def _headers(self, prefer=None):
        headers = {
            "apikey": self.anon_key,
            "Authorization": f"Bearer {self.access_token or self.anon_key}",
            "Content-Type": "application/json",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    # --- Reads ---

    def _select(self, table):
        try:
            response = self.session.get(
                f"{self.base_url}/{table}",
                params={"select": "*"},
                headers=self._headers(),
                timeout=self.timeout,
            )
            response.raise_for_status()
            rows = response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.error(f"Supabase error reading '{table}': {e}")
            return []
        if not isinstance(rows, list):
            logger.error(f"Unexpected payload reading '{table}': {rows!r}")
            return []
        return rows

    def list_parts(self):
        return _parse_rows(self._select(COMPONENTS_TABLE), Part.from_row, "component")

    def list_monitors(self):
        return _parse_rows(self._select(MONITORS_TABLE), Monitor.from_row, "monitor")

    # --- Writes ---

    def _send(self, method, params=None, payload=None):
        """
        Sends one write request and decodes the PostgREST response.

        :raises CatalogError: On transport errors or non-2xx responses.
        """
        try:
            response = self.session.request(
                method,
                f"{self.base_url}/{COMPONENTS_TABLE}",
                params=params,
                json=payload,
                headers=self._headers(prefer="return=representation"),
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise CatalogError(f"Network error: {e}") from e

        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = {}
            if not isinstance(body, dict):
                body = {}
            message = body.get("message") or response.text or f"HTTP {response.status_code}"
            raise CatalogError(message, code=body.get("code"), status=response.status_code)

        if method == "DELETE":
            return None
        try:
            rows = response.json()
        except ValueError as e:
            raise CatalogError(f"Invalid response body: {e}") from e
        if not rows:
            raise CatalogError("No row returned", status=response.status_code)
        return rows[0] if isinstance(rows, list) else rows

    def _write_with_fallback(self, method, payload, params=None):
        """
        Tries each payload shape in order until the database accepts one.

        A shape is abandoned only when the error says a link column is
        missing; any other error is raised at once. If every shape fails,
        the last error is raised.
        """
        last_error = None
        tried = []
        for shape in PAYLOAD_SHAPES:
            shaped = shape_payload(payload, shape)
            if shaped in tried:
                continue
            tried.append(shaped)
            try:
                row = self._send(method, params=params, payload=shaped)
            except CatalogError as e:
                if not is_missing_column_error(e):
                    raise
                logger.warning(f"{method} with '{shape}' payload rejected ({e}), trying next shape")
                last_error = e
                continue
            if shape != "full":
                logger.info(f"{method} succeeded with '{shape}' payload")
            try:
                return Part.from_row(row)
            except ValueError as e:
                raise CatalogError(f"Stored row is not a valid component: {e}") from e
        raise last_error

    def create_part(self, payload):
        """
        Inserts a component and returns the stored Part.

        :param payload: Column values (`name`, `type`, `price`, ...).
        :raises InvalidPayloadError: If the payload is not a valid component.
        :raises CatalogError: If the insert fails for every payload shape.
        """
        return self._write_with_fallback("POST", validate_payload(payload))

    def update_part(self, part_id, payload):
        """
        Updates a component by id and returns the stored Part.

        :raises InvalidPayloadError: If a given type or price is invalid.
        :raises CatalogError: If the update fails for every payload shape.
        """
        payload = validate_payload(payload, partial=True)
        return self._write_with_fallback("PATCH", payload, params={"id": f"eq.{part_id}"})

    def delete_part(self, part_id):
        """:raises CatalogError: If the delete is rejected."""
        self._send("DELETE", params={"id": f"eq.{part_id}"})
        logger.info(f"Deleted component {part_id}")


def catalog_from_config(config):
    """
    Picks the catalog backend for a Config.

    A local JSON folder wins when configured; otherwise Supabase is used.

    :raises ValueError: If neither backend is configured.
    """
    if config.json_path:
        return LocalCatalog(config.json_path)
    if config.uses_supabase:
        return SupabaseCatalog(
            config.supabase_url,
            config.supabase_anon_key,
            timeout=config.request_timeout,
        )
    raise ValueError("Set RACIKPC_JSON_PATH or SUPABASE_URL and SUPABASE_ANON_KEY")
