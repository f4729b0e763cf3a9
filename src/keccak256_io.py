from os import PathLike

from keccak256_numba import keccak256

# Read files in chunks of this many bytes
DEFAULT_CHUNK_SIZE = 8192


class HashSourceError(RuntimeError):
    """Raised when the bytes to hash could not be obtained"""

    def __init__(self, path, cause: OSError):
        super().__init__(f"could not read {path}: {cause.strerror or cause}")
        self.path = path


def to_hex(digest: bytes) -> str:
    """Lowercase hex, two digits per byte, no prefix"""
    return digest.hex()


def keccak256_string(text: str, encoding: str = "utf-8", errors: str = "strict") -> str:
    return to_hex(keccak256(text.encode(encoding, errors)))


def keccak256_raw(data: bytes) -> str:
    return to_hex(keccak256(data))


def read_file(path: str | PathLike, chunk_size: int = DEFAULT_CHUNK_SIZE) -> bytes:
    """
    Reads a whole file, chunk by chunk.

    Args:
        path (str | PathLike): The file to read
        chunk_size (int): The number of bytes to read at a time

    Returns:
        bytes: The file contents

    Raises:
        HashSourceError: if the file cannot be opened or read
    """
    if not isinstance(chunk_size, int) or chunk_size <= 0:
        raise ValueError(f"expected chunk_size to be a positive integer, got {chunk_size!r}")

    content = bytearray()
    try:
        with open(path, "rb") as f:
            while chunk := f.read(chunk_size):
                content += chunk
    except OSError as e:
        raise HashSourceError(path, e) from e

    return bytes(content)


def keccak256_file(path: str | PathLike, chunk_size: int = DEFAULT_CHUNK_SIZE) -> str:
    """
    Hex Keccak-256 of a file's contents. Nothing is hashed unless the read succeeds.
    """
    return to_hex(keccak256(read_file(path, chunk_size)))
