import codecs
import os
import sys
from concurrent.futures import ThreadPoolExecutor
from typing import Callable

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from keccak256_io import (
    DEFAULT_CHUNK_SIZE,
    HashSourceError,
    keccak256_file,
    keccak256_raw,
    keccak256_string,
)

console = Console()
err_console = Console(stderr=True)

USAGE = """usage: keccak256 [-f|--file] [-x|--hex] INPUT...

Prints the Keccak-256 digest of each INPUT as lowercase hex.

  -f, --file   treat each INPUT as a file path
  -x, --hex    treat each INPUT as hex-encoded bytes (0x prefix optional)
  -h, --help   show this message

environment:
  KECCAK_CHUNK_SIZE  bytes per file read (default 8192)
  KECCAK_WORKERS     threads used when hashing several inputs (default 1)
  KECCAK_ENCODING    encoding of text inputs (default utf-8)"""


def _get_positive_int(name: str, default: int) -> int:
    value_str = os.getenv(name, None)
    if not value_str:
        return default

    try:
        value = int(value_str)
    except ValueError:
        raise ValueError(f"expected {name} to be an integer, got {value_str!r}")

    if value <= 0:
        raise ValueError(f"expected {name} to be positive, got {value}")

    return value


def get_chunk_size() -> int:
    return _get_positive_int("KECCAK_CHUNK_SIZE", DEFAULT_CHUNK_SIZE)


def get_workers() -> int:
    return _get_positive_int("KECCAK_WORKERS", 1)


def get_encoding() -> str:
    encoding = os.getenv("KECCAK_ENCODING", "utf-8")
    try:
        codecs.lookup(encoding)
    except LookupError:
        raise ValueError(f"unknown KECCAK_ENCODING {encoding!r}")

    return encoding


def hex_to_bytes(hexstr: str) -> bytes:
    hexstr = hexstr[2:] if hexstr.startswith("0x") else hexstr
    try:
        return bytes.fromhex(hexstr)
    except ValueError:
        raise ValueError(f"not a hex string: {hexstr!r}")


def parse_args(argv: list[str]) -> tuple[str, list[str]]:
    """
    Splits the command line into an input mode ("text", "file" or "hex") and inputs.

    Raises:
        SystemExit: on -h/--help (status 0) or bad usage (status 2)
    """
    mode = "text"
    inputs = []
    for i, arg in enumerate(argv):
        if arg == "--":
            inputs.extend(argv[i + 1:])
            break
        if arg in ("-h", "--help"):
            console.print(USAGE, highlight=False, markup=False)
            sys.exit(0)
        elif arg in ("-f", "--file", "-x", "--hex"):
            new_mode = "file" if arg in ("-f", "--file") else "hex"
            if mode != "text" and mode != new_mode:
                err_console.print("error: --file and --hex are mutually exclusive")
                err_console.print(USAGE, highlight=False, markup=False)
                sys.exit(2)
            mode = new_mode
        elif arg.startswith("-") and len(arg) > 1:
            err_console.print(f"error: unknown option {arg}", markup=False)
            err_console.print(USAGE, highlight=False, markup=False)
            sys.exit(2)
        else:
            inputs.append(arg)

    if not inputs:
        err_console.print(USAGE, highlight=False, markup=False)
        sys.exit(2)

    return mode, inputs


def make_hasher(mode: str) -> Callable[[str], str]:
    if mode == "file":
        chunk_size = get_chunk_size()
        return lambda path: keccak256_file(path, chunk_size)

    if mode == "hex":
        return lambda hexstr: keccak256_raw(hex_to_bytes(hexstr))

    # undecodable argv bytes arrive as lone surrogates, hash them as given
    encoding = get_encoding()
    return lambda text: keccak256_string(text, encoding, "surrogateescape")


def hash_all(hasher: Callable[[str], str], inputs: list[str], workers: int) -> list[str]:
    """Hashes every input, in order. Several workers hash on a thread pool."""
    if not inputs:
        return []

    if workers > len(inputs):
        if workers > 1:
            err_console.print(f"warn: only {len(inputs)} input(s), using {len(inputs)} worker(s)")
        workers = len(inputs)

    if workers == 1:
        return [hasher(x) for x in inputs]

    with ThreadPoolExecutor(max_workers=workers) as executor:
        return list(executor.map(hasher, inputs))


def generate_table(inputs: list[str], digests: list[str]) -> Table:
    table = Table()
    table.add_column("input")
    table.add_column("keccak256", min_width=64, no_wrap=True)

    for x, digest in zip(inputs, digests):
        table.add_row(escape(x), digest)

    return table


def main(argv: list[str] | None = None):
    mode, inputs = parse_args(sys.argv[1:] if argv is None else argv)

    try:
        hasher = make_hasher(mode)
        digests = hash_all(hasher, inputs, get_workers())
    except (ValueError, HashSourceError) as e:
        err_console.print(f"error: {e}", highlight=False, markup=False)
        sys.exit(1)
    except KeyboardInterrupt:
        err_console.print("[red]Interrupted by user.[/red]")
        sys.exit(1)

    if len(digests) == 1:
        console.print(digests[0], highlight=False)
    else:
        console.print(generate_table(inputs, digests))


if __name__ == "__main__":
    main()
