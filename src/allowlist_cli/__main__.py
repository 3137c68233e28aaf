from __future__ import annotations
import os
import json
import pathlib
from typing import List, Optional
import typer
from rich import print

from allowlist_api.addresses import LeafEncoding, generate_placeholders
from allowlist_api.allowlist import (
    ADVISORY,
    ALPHA_SALE,
    SALE_LISTS,
    artifact_path,
    build_sale_roots,
    export_allowlist,
    load_addresses,
    load_allowlist,
    make_attestation,
)
from allowlist_api.crypto import ed25519_generate
from allowlist_api.errors import (
    EmptyTreeError,
    InvalidAddressError,
    ProofMismatchError,
)
from allowlist_api.logutil import setup_logging
from allowlist_api.settings import settings

app = typer.Typer(add_completion=False, no_args_is_help=True)


@app.callback()
def main(log_level: str = typer.Option(settings.log_level, help="Logging level")):
    setup_logging(log_level)


def _fail(msg: str) -> None:
    print(f"[red]{msg}[/red]")
    raise typer.Exit(code=1)


def _placeholders(path: Optional[str]) -> Optional[List[str]]:
    if not path:
        return None
    return load_addresses(path)


@app.command()
def build_roots(
    advisory: str = typer.Option(settings.advisory_list_path, help="Advisory list JSON"),
    alpha_sale: str = typer.Option(settings.alpha_sale_list_path, help="Alpha sale list JSON"),
    advisory_placeholders: Optional[str] = typer.Option(
        settings.advisory_placeholder_path, help="Placeholder list the advisory list is written over"
    ),
    alpha_sale_placeholders: Optional[str] = typer.Option(
        settings.alpha_sale_placeholder_path, help="Placeholder list the alpha sale list is written over"
    ),
    out_dir: str = typer.Option(settings.output_dir, help="Directory for {root, leaves} artifacts"),
    encoding: LeafEncoding = typer.Option(settings.leaf_encoding, help="Leaf byte layout"),
    sign: bool = typer.Option(False, help="Also write a signed root attestation per list"),
):
    """Build both sale allow-lists and export their roots and leaves."""
    try:
        lists = build_sale_roots(
            load_addresses(advisory),
            load_addresses(alpha_sale),
            _placeholders(advisory_placeholders),
            _placeholders(alpha_sale_placeholders),
            encoding=encoding,
            duplicate_odd=settings.duplicate_odd,
            check=settings.self_check,
        )
    except (EmptyTreeError, InvalidAddressError, ProofMismatchError) as e:
        _fail(str(e))
    except (OSError, ValueError) as e:
        _fail(f"could not read list: {e}")

    for name in SALE_LISTS:
        allowlist = lists[name]
        out = export_allowlist(allowlist, artifact_path(out_dir, name))
        print(f"[cyan]{name}[/cyan] root: {allowlist.hex_root} ({len(allowlist.tree)} leaves)")
        print(f"[green]Wrote {out}[/green]")
        if sign:
            sk = pathlib.Path(settings.signing_key_path).read_bytes()
            pk = pathlib.Path(settings.signing_pubkey_path).read_bytes()
            att = make_attestation(allowlist, sk, pk)
            att_out = out.with_name(f"{name}-root.attestation.json")
            att_out.write_text(json.dumps(att.model_dump(), indent=2))
            print(f"[green]Wrote attestation to {att_out}[/green]")


@app.command()
def proof(
    address: str,
    list_name: str = typer.Option(ALPHA_SALE, "--list", help=f"{ADVISORY} or {ALPHA_SALE}"),
    artifact: Optional[str] = typer.Option(None, help="Artifact path (overrides --list)"),
    out_dir: str = typer.Option(settings.output_dir),
    encoding: LeafEncoding = typer.Option(settings.leaf_encoding),
):
    """Print the Merkle proof for ADDRESS as a JSON array."""
    path = artifact or artifact_path(out_dir, list_name)
    try:
        allowlist = load_allowlist(
            path, name=list_name, encoding=encoding, duplicate_odd=settings.duplicate_odd
        )
        hex_proof = allowlist.proof(address)
        member = allowlist.is_member(address)
    except (ValueError, OSError) as e:
        _fail(str(e))
    if not member:
        print(f"[yellow]{address} is not on the {allowlist.name} list[/yellow]")
    typer.echo(json.dumps({"root": allowlist.hex_root, "proof": hex_proof}))


@app.command()
def verify(
    address: str,
    root: str,
    proof_hashes: List[str] = typer.Argument(None, help="Sibling hashes, leaf to root"),
    encoding: LeafEncoding = typer.Option(settings.leaf_encoding),
):
    """Check a proof the way the sale contract does."""
    from allowlist_sdk.verify import verify_membership

    ok = verify_membership(address, proof_hashes or [], root, encoding)
    print({"proof_valid": ok})
    if not ok:
        raise typer.Exit(code=1)


@app.command()
def gen_placeholders(
    count: int = typer.Option(settings.alpha_sale_placeholder_size, help="Number of addresses"),
    out: str = typer.Option("./lists/placeholders.json", help="Output JSON path"),
):
    """Write COUNT random addresses used to pad a list to a fixed size."""
    addresses = generate_placeholders(count)
    if len(set(addresses)) != len(addresses):
        _fail("placeholder collision, run again")
    os.makedirs(os.path.dirname(out) or ".", exist_ok=True)
    pathlib.Path(out).write_text(json.dumps(addresses))
    print(f"[green]Wrote {count} placeholder addresses to {out}[/green]")


@app.command()
def gen_keys(out_dir: str = typer.Option("./keys", help="Directory to write keypair")):
    """Generate the Ed25519 keypair used to sign root attestations."""
    os.makedirs(out_dir, exist_ok=True)
    sk, pk = ed25519_generate()
    (pathlib.Path(out_dir) / "ed25519_private.key").write_bytes(sk)
    (pathlib.Path(out_dir) / "ed25519_public.key").write_bytes(pk)
    print(f"[green]Wrote keys to {out_dir}[/green]")


@app.command()
def verify_attestation(path: str):
    from allowlist_sdk.verify import verify_attestation as _verify

    obj = json.loads(pathlib.Path(path).read_text())
    print({"signature_valid": _verify(obj)})


if __name__ == "__main__":
    app()
