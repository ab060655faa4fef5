"""
CLI entry point for the instruction decoder.

Usage:
    ixdecoder decode TRANSACTION_ACCOUNT
    ixdecoder proposal MULTISIG INDEX --json
    ixdecoder instruction 11111111111111111111111111111111 020000000065cd1d00000000 -a FROM:sw -a TO:w
    ixdecoder schema path/to/idl.json
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .config import DecoderConfig
from .decoder import DecoderFactory, InstructionDispatcher
from .errors import DecoderError, SchemaError
from .formatters import shorten_address
from .logging_setup import configure_logging
from .models import AccountKey, DecodedInstruction, DecodedTransaction
from .schema import AnchorInstructionCoder, SchemaFormat, SchemaRegistry, is_anchor_compatible

console = Console()
logger = logging.getLogger(__name__)


def build_registry(schema_dir: Optional[str]) -> SchemaRegistry:
    """Registry with every schema found in schema_dir."""
    registry = SchemaRegistry()
    if schema_dir:
        entries = registry.load_directory(schema_dir)
        logger.info("Loaded %d schemas from %s", len(entries), schema_dir)
    return registry


def parse_account(value: str) -> AccountKey:
    """Parse PUBKEY[:FLAGS] where FLAGS holds s (signer) and/or w (writable)."""
    pubkey, _, flags = value.partition(":")
    return AccountKey(pubkey=pubkey, is_signer="s" in flags, is_writable="w" in flags)


def print_instruction(ix: DecodedInstruction, index: Optional[int] = None) -> None:
    """Render one decoded instruction."""
    header = f"[bold cyan]{ix.instruction_title or ix.instruction_name}[/bold cyan]"
    if index is not None:
        header = f"[dim]#{index}[/dim] {header}"

    lines = [header, f"[dim]Program: {ix.program_name} ({shorten_address(ix.program_id)})[/dim]"]
    if ix.human_readable_summary:
        lines.append(f"\n{ix.human_readable_summary}")
    console.print(Panel("\n".join(lines)))

    if ix.accounts:
        table = Table(title="Accounts")
        table.add_column("Name", style="cyan")
        table.add_column("Address")
        table.add_column("Signer", justify="center")
        table.add_column("Writable", justify="center")
        for acc in ix.accounts:
            table.add_row(
                acc.name,
                acc.address,
                "✓" if acc.is_signer else "",
                "✓" if acc.is_writable else "",
            )
        console.print(table)

    if ix.args:
        table = Table(title="Arguments")
        table.add_column("Field", style="cyan")
        table.add_column("Value")
        for key, value in ix.args.items():
            if isinstance(value, (dict, list)):
                value = json.dumps(value, indent=2)
            table.add_row(key, str(value))
        console.print(table)
    console.print()


def print_transaction(tx: DecodedTransaction, as_json: bool) -> int:
    if as_json:
        print(json.dumps(tx.to_dict(), indent=2))
        return 1 if tx.error else 0

    if tx.error:
        console.print(f"[red]✗ {tx.error}[/red]")
        return 1

    console.print()
    if tx.fee_payer:
        console.print(f"[dim]Fee payer: {tx.fee_payer}[/dim]")
    if tx.signers:
        console.print(f"[dim]Signers: {', '.join(tx.signers)}[/dim]")
    if tx.compute_units is not None:
        console.print(f"[dim]Compute unit limit: {tx.compute_units:,}[/dim]")
    console.print(f"[green]✓ Decoded {len(tx.instructions)} instruction(s)[/green]\n")

    for i, ix in enumerate(tx.instructions):
        print_instruction(ix, i)
    return 0


def run_decode(args: argparse.Namespace, config: DecoderConfig) -> int:
    """Decode a multisig transaction account."""
    registry = build_registry(config.schema_dir)
    decoder = DecoderFactory(registry, config).get()
    tx = asyncio.run(decoder.decode(args.address))
    return print_transaction(tx, args.json)


def run_proposal(args: argparse.Namespace, config: DecoderConfig) -> int:
    """Decode the transaction behind a multisig proposal index."""
    if args.index < 0:
        console.print("[red]Error: transaction index must not be negative[/red]")
        return 1
    registry = build_registry(config.schema_dir)
    decoder = DecoderFactory(registry, config).get()
    tx = asyncio.run(decoder.decode_proposal(args.multisig, args.index))
    return print_transaction(tx, args.json)


def run_instruction(args: argparse.Namespace, config: DecoderConfig) -> int:
    """Decode a single instruction from hex."""
    try:
        data = bytes.fromhex(args.data)
    except ValueError:
        console.print(f"[red]Error: instruction data is not valid hex: {args.data}[/red]")
        return 1

    registry = build_registry(config.schema_dir)
    dispatcher = InstructionDispatcher(registry, native_symbol=config.native_symbol)
    accounts: List[AccountKey] = [parse_account(a) for a in args.account or []]
    ix = dispatcher.parse_instruction(args.program_id, data, accounts)

    if args.json:
        print(json.dumps(ix.to_dict(), indent=2))
    else:
        print_instruction(ix)
    return 0


def run_schema(args: argparse.Namespace, config: DecoderConfig) -> int:
    """Inspect a schema file: detected format and instruction list."""
    registry = SchemaRegistry()
    entry = registry.register_file(args.file, program_id=args.program_id)

    if entry.format == SchemaFormat.CODAMA and entry.parser:
        instructions = entry.parser.get_all_instructions()
    elif is_anchor_compatible(entry.format):
        instructions = AnchorInstructionCoder.compile(entry.raw_schema).instructions
    else:
        instructions = []

    if args.json:
        print(json.dumps({
            "programId": entry.program_id,
            "name": entry.name,
            "format": entry.format.value,
            "instructions": [
                {
                    "name": ix.name,
                    "discriminator": ix.discriminator.hex() if ix.discriminator else None,
                    "accounts": ix.account_names,
                    "arguments": [arg.name for arg in ix.arguments],
                }
                for ix in instructions
            ],
        }, indent=2))
        return 0

    console.print(Panel(
        f"[bold cyan]{entry.name}[/bold cyan]\n\n"
        f"[dim]Program: {entry.program_id}[/dim]\n"
        f"[dim]Format: {entry.format.value}[/dim]",
        title="[bold]Schema[/bold]",
    ))

    if not instructions:
        console.print("[yellow]No decodable instructions in this schema[/yellow]")
        return 0

    table = Table(title=f"Instructions ({len(instructions)})")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Discriminator")
    table.add_column("Accounts", justify="right")
    table.add_column("Arguments")
    for ix in instructions:
        table.add_row(
            str(ix.index),
            ix.name,
            ix.discriminator.hex() if ix.discriminator else "-",
            str(len(ix.accounts)),
            ", ".join(arg.name for arg in ix.arguments),
        )
    console.print(table)
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog="ixdecoder",
        description="Decode Solana multisig transactions and program instructions",
    )
    parser.add_argument("--rpc-url", type=str, help="RPC endpoint (default: IXDECODER_RPC_URL)")
    parser.add_argument("--schemas", type=str, help="Directory of *.json schemas to register")
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: IXDECODER_LOG_LEVEL or WARNING)",
    )
    parser.add_argument("--json", action="store_true", help="Print JSON instead of tables")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    decode_parser = subparsers.add_parser("decode", help="Decode a multisig transaction account")
    decode_parser.add_argument("address", type=str, help="Transaction account address")

    proposal_parser = subparsers.add_parser("proposal", help="Decode a multisig proposal by index")
    proposal_parser.add_argument("multisig", type=str, help="Multisig account address")
    proposal_parser.add_argument("index", type=int, help="Transaction index")

    ix_parser = subparsers.add_parser("instruction", help="Decode one instruction from hex")
    ix_parser.add_argument("program_id", type=str, help="Program id")
    ix_parser.add_argument("data", type=str, help="Instruction data as hex")
    ix_parser.add_argument(
        "--account", "-a",
        action="append",
        help="Account as PUBKEY[:s][w], repeat in instruction order",
    )

    schema_parser = subparsers.add_parser("schema", help="Inspect a schema file")
    schema_parser.add_argument("file", type=str, help="Path to Codama or Anchor JSON")
    schema_parser.add_argument("--program-id", type=str, help="Program id if the file has none")

    return parser


COMMANDS = {
    "decode": run_decode,
    "proposal": run_proposal,
    "instruction": run_instruction,
    "schema": run_schema,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    command = COMMANDS.get(args.command)
    if command is None:
        parser.print_help()
        return 0

    config = DecoderConfig.from_env()
    if args.rpc_url:
        config.rpc_url = args.rpc_url
    if args.schemas:
        config.schema_dir = args.schemas
    if args.log_level:
        config.log_level = args.log_level
    configure_logging(config.log_level)

    try:
        return command(args, config)
    except SchemaError as e:
        console.print(f"[red]Schema error: {e}[/red]")
        return 1
    except DecoderError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1


if __name__ == "__main__":
    sys.exit(main())
