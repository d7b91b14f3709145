from __future__ import annotations

import json
import logging
from typing import Any, NoReturn, Optional

import typer
import uvicorn

from didtools.config import get_settings
from didtools.did import create_did_key, create_did_web
from didtools.document import create_did_document, create_did_key_document
from didtools.errors import INVALID_FORMAT, DIDError
from didtools.grammar import normalize_did, parse_did, validate_did

app = typer.Typer(help="didtools: did:key / did:web creation, parsing and validation")


def _echo_json(data: Any) -> None:
    typer.echo(json.dumps(data, indent=2, ensure_ascii=False))


def _fail(exc: DIDError) -> NoReturn:
    typer.echo(f"Error: {exc.message}", err=True)
    raise typer.Exit(1)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output to stderr"),
) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@app.command()
def serve(
    host: str | None = typer.Option(None, help="Host interface to bind"),
    port: int | None = typer.Option(None, help="Port to bind"),
    reload: bool | None = typer.Option(None, help="Enable auto-reload (development only)"),
    log_level: str | None = typer.Option(None, help="Log level for the server"),
) -> None:
    settings = get_settings()
    uvicorn.run(
        "didtools.api:create_app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload if reload is not None else settings.reload,
        log_level=log_level or settings.log_level,
        factory=True,
    )


@app.command()
def key(
    public_key: str = typer.Argument(..., help="Raw public key as hex (optionally 0x-prefixed)"),
    key_type: Optional[str] = typer.Option(
        None, "--key-type", "-t", help="ed25519-pub, secp256k1-pub or x25519-pub"
    ),
) -> None:
    """Create a did:key from a hex-encoded public key."""
    try:
        typer.echo(create_did_key(public_key, key_type or get_settings().default_key_type))
    except DIDError as e:
        _fail(e)


@app.command()
def web(
    domain: str = typer.Argument(..., help="Domain name, e.g. example.com"),
    path: Optional[str] = typer.Option(None, help="Optional path, e.g. users/alice"),
) -> None:
    """Create a did:web from a domain and optional path."""
    try:
        typer.echo(create_did_web(domain, path))
    except DIDError as e:
        _fail(e)


@app.command()
def parse(did: str = typer.Argument(..., help="DID URL to parse")) -> None:
    """Print the components of a DID URL as JSON. Exits 1 if it does not parse."""
    result = parse_did(did)
    _echo_json(result.to_dict())
    if not result.is_valid:
        raise typer.Exit(1)


@app.command()
def validate(did: str = typer.Argument(..., help="DID to validate")) -> None:
    """Print the validation result as JSON. Exits 1 if the DID is invalid."""
    result = validate_did(did)
    _echo_json(result.to_dict())
    if not result.is_valid:
        raise typer.Exit(1)


@app.command()
def normalize(did: str = typer.Argument(..., help="DID URL to normalize")) -> None:
    try:
        typer.echo(normalize_did(did))
    except DIDError as e:
        _fail(e)


@app.command()
def document(
    did: str = typer.Argument(..., help="DID the document describes"),
    controller: Optional[str] = typer.Option(None, help="Controller DID (defaults to the DID)"),
    service: Optional[list[str]] = typer.Option(
        None, help="Service as ID=TYPE=ENDPOINT, e.g. '#agent=AgentService=https://example.com'"
    ),
    plain_json: bool = typer.Option(False, "--json", help="Plain application/did+json (no @context)"),
) -> None:
    """Print a DID Document. did:key DIDs are expanded to their key document."""
    try:
        if did.startswith("did:key:") and not service and controller is None and not plain_json:
            doc = create_did_key_document(did)
        else:
            doc = create_did_document(
                did,
                controller=controller,
                service=[_parse_service(s) for s in service or []],
                media_type="application/did+json" if plain_json else None,
            )
    except DIDError as e:
        _fail(e)
    _echo_json(doc.to_dict())


def _parse_service(value: str) -> dict[str, str]:
    parts = value.split("=", 2)
    if len(parts) != 3 or not all(parts):
        raise DIDError(f"Service must be ID=TYPE=ENDPOINT, got '{value}'", INVALID_FORMAT)
    service_id, service_type, endpoint = parts
    return {"id": service_id, "type": service_type, "serviceEndpoint": endpoint}
