"""CLI for the ``finance_summary`` package.

Typer-based console interface. A local ``.env`` is loaded with
``python-dotenv`` (without overriding the environment) before configuration is
read; command options override ``FINANCE_SUMMARY_*`` variables. Business logic
lives in :mod:`finance_summary.api`.

Commands
--------
- ``show <user-id>``: print the highlight cards and the formatted transaction
  list for a user (``--json`` for a machine-readable mapping).
- ``import <user-id> <records.json>``: validate a JSON array of records and
  store it under the user's key.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from sqlalchemy.exc import SQLAlchemyError

from .api import load_summary
from .config import SummaryConfig
from .errors import FinanceSummaryError
from .loader import parse_records, storage_key
from .logging_setup import configure_logging
from .models import DashboardSummary, UserIdentity
from .storage import JsonFileStore, SqlKeyValueStore

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    name="finance-summary",
    no_args_is_help=True,
    add_completion=False,
    help="Summarize a user's stored transactions: totals, latest activity and a formatted list.",
)

StoreOption = Annotated[
    Path | None,
    typer.Option(
        "--store",
        help="JSON key-value file to read from (ignored when a database URL is given).",
        dir_okay=False,
    ),
]
DatabaseUrlOption = Annotated[
    str | None,
    typer.Option(
        envvar="DATABASE_URL", help="SQLAlchemy URL of a database with a kv_entries table."
    ),
]
NamespaceOption = Annotated[
    str | None, typer.Option(help="Storage key namespace (default @gofinances).")
]


def _fail(message: str) -> typer.Exit:
    err_console.print(f"[red]Error:[/red] {escape(message)}")
    return typer.Exit(1)


def _open_store(store: Path | None, database_url: str | None) -> JsonFileStore | SqlKeyValueStore:
    if database_url:
        return SqlKeyValueStore(database_url=database_url)
    if store is not None:
        return JsonFileStore(store)
    raise _fail("no storage configured; pass --store or --database-url (or set DATABASE_URL)")


def _build_config(**overrides: str | None) -> SummaryConfig:
    try:
        return SummaryConfig.from_env(**overrides)
    except FinanceSummaryError as e:
        raise _fail(str(e)) from e


def _render(summary: DashboardSummary) -> None:
    if summary.user is not None and summary.user.name:
        console.print(f"Olá, [bold]{escape(summary.user.name)}[/bold]")

    cards = Table(title="Resumo", show_header=True)
    cards.add_column("")
    cards.add_column("Valor", justify="right")
    cards.add_column("Última transação")
    for card in summary.highlights:
        style = {"up": "green", "down": "red"}.get(card.kind)
        cards.add_row(card.title, card.amount, card.last_transaction, style=style)
    console.print(cards)

    listing = Table(title="Transações", show_header=True)
    for col in ("Nome", "Valor", "Categoria", "Data"):
        listing.add_column(col, justify="right" if col == "Valor" else "left")
    for tx in summary.transactions:
        name = str(tx.extra.get("name", tx.id))
        amount = tx.amount if tx.type == "positive" else f"- {tx.amount}"
        listing.add_row(escape(name), amount, escape(tx.category or ""), tx.date)
    console.print(listing)

    if summary.skipped_records:
        err_console.print(f"[yellow]Skipped {summary.skipped_records} invalid record(s).[/yellow]")


@app.command("show")
def show_cmd(
    user_id: Annotated[str, typer.Argument(help="Identifier of the signed-in user")],
    *,
    store: StoreOption = None,
    database_url: DatabaseUrlOption = None,
    namespace: NamespaceOption = None,
    locale: Annotated[str | None, typer.Option(help="Display locale, e.g. pt-BR.")] = None,
    currency: Annotated[str | None, typer.Option(help="ISO 4217 currency code.")] = None,
    timezone: Annotated[str | None, typer.Option(help="IANA timezone for dates.")] = None,
    skip_invalid: Annotated[
        bool, typer.Option("--skip-invalid", help="Drop invalid records instead of failing.")
    ] = False,
    name: Annotated[str | None, typer.Option(help="Display name shown in the greeting.")] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print the summary as JSON.")] = False,
) -> None:
    """Show the dashboard summary for USER_ID."""

    config = _build_config(
        locale=locale,
        currency=currency,
        timezone=timezone,
        namespace=namespace,
        on_invalid="skip" if skip_invalid else None,
    )
    kv = _open_store(store, database_url)
    identity = UserIdentity(id=user_id, name=name)

    try:
        summary = asyncio.run(load_summary(kv, identity, config))
    except FinanceSummaryError as e:
        raise _fail(str(e)) from e
    except (OSError, ValueError, SQLAlchemyError) as e:
        raise _fail(f"failed to read storage: {e}") from e

    if as_json:
        typer.echo(json.dumps(summary.as_dict(), ensure_ascii=False, indent=2))
        return
    _render(summary)


@app.command("import")
def import_cmd(
    user_id: Annotated[str, typer.Argument(help="Identifier of the user to store records for")],
    records_path: Annotated[
        Path, typer.Argument(help="JSON file holding an array of records", dir_okay=False)
    ],
    *,
    store: StoreOption = None,
    database_url: DatabaseUrlOption = None,
    namespace: NamespaceOption = None,
) -> None:
    """Validate RECORDS_PATH and store it under USER_ID's key."""

    config = _build_config(namespace=namespace)
    try:
        payload = records_path.read_text(encoding="utf-8")
    except OSError as e:
        raise _fail(f"cannot read {records_path}: {e}") from e

    try:
        parsed = parse_records(payload, tz=config.tzinfo)
    except FinanceSummaryError as e:
        raise _fail(str(e)) from e

    kv = _open_store(store, database_url)
    if isinstance(kv, SqlKeyValueStore):
        kv.create_schema()
    key = storage_key(user_id, config.namespace)
    asyncio.run(kv.set(key, payload))
    console.print(f"Stored {len(parsed.records)} record(s) under [cyan]{key}[/cyan]")


@app.callback()
def _root(
    log_level: Annotated[
        str | None, typer.Option(help="Log level (defaults to FINANCE_SUMMARY_LOG_LEVEL or INFO).")
    ] = None,
) -> None:
    """Load ``.env`` from the working directory and configure logging."""

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    try:
        configure_logging(log_level)
    except FinanceSummaryError as e:
        raise _fail(str(e)) from e


def main() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
