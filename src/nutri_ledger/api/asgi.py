"""ASGI entrypoint for the nutri ledger API."""

from nutri_ledger.api.app import create_app
from nutri_ledger.containers import build_container

app = create_app(build_container())
