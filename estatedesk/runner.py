"""Wiring for console processes: settings, logging, search backend, orchestrators, store."""

from functools import reduce
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from estatedesk import secrets
from estatedesk.domains import DOMAINS, get_domain
from estatedesk.logging_config import setup_logging
from estatedesk.search.backend import AlgoliaSearchBackend, SearchBackend
from estatedesk.search.orchestrator import SearchOrchestrator
from estatedesk.search.schema import Criteria, merge_criteria
from estatedesk.search.url_state import UrlFilterCodec, decode_query
from estatedesk.settings import get_setting, load_settings
from estatedesk.store.documents import FirestoreDocumentStore

_PROJECT_ROOT = Path(__file__).resolve().parent.parent


def bootstrap() -> dict[str, Any]:
    """Load .env and settings, configure logging. Returns settings."""
    load_dotenv(_PROJECT_ROOT / ".env")
    settings = load_settings()
    setup_logging(_PROJECT_ROOT, settings)
    return settings


def build_backend(settings: dict[str, Any]) -> AlgoliaSearchBackend:
    app_id = get_setting(settings, "search.app_id", "")
    key_name = get_setting(settings, "search.api_key_secret", "ALGOLIA_API_KEY")
    api_key = secrets.get_secret(key_name)
    if not app_id or not api_key:
        raise ValueError(f"Search is not configured: set search.app_id and the {key_name} secret")
    return AlgoliaSearchBackend(
        app_id,
        api_key,
        timeout=float(get_setting(settings, "search.timeout_sec", 10.0)),
    )


def build_orchestrator(
    name: str,
    settings: dict[str, Any],
    backend: SearchBackend,
) -> SearchOrchestrator:
    """Orchestrator for one domain. Sort replicas are checked against search.known_indices when set."""
    domain = get_domain(name, settings)
    known = get_setting(settings, "search.known_indices", [])
    if known:
        domain.sort_table.validate(known)
    return SearchOrchestrator(
        domain,
        backend,
        debounce_sec=float(get_setting(settings, "search.debounce_sec", 0.3)),
        timeout_sec=float(get_setting(settings, "search.timeout_sec", 10.0)),
    )


def criteria_from_url(name: str, query: str) -> Criteria:
    """Decode every URL-synced surface of a domain and merge them (later surfaces win)."""
    if name not in DOMAINS:
        raise ValueError(f"Unknown search domain: {name!r}")
    params = decode_query(query)
    decoded = [UrlFilterCodec(schema).decode(params) for schema in DOMAINS[name].URL_SCHEMAS]
    return reduce(merge_criteria, decoded, {})


def build_store(settings: dict[str, Any]) -> FirestoreDocumentStore:
    return FirestoreDocumentStore(
        get_setting(settings, "firestore.project_id", "") or None,
        get_setting(settings, "firestore.database", "(default)"),
    )
