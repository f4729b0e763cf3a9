"""Keccak-256 (original 0x01 padding, as used by Ethereum) in functional style"""

from numba import njit
from numpy import ascontiguousarray, empty, frombuffer, ndarray, uint8, uint64, zeros

from keccakf import STATE_LANES, _keccak_f

# Fixed rate for Keccak-256
RATE = 136
RATE_WORDS = RATE // 8
BIT_LENGTH = 256
DIGEST_SIZE = BIT_LENGTH // 8

# Domain separation byte (0x06 would be NIST SHA3-256)
_DSBYTE = 0x01


@njit(nogil=True)
def _xor_block(state, block, offset):
    """
    XORs one rate-sized block into the state, packing bytes into lanes little-endian.

    Args:
        state (ndarray): The 25 uint64 lanes of the sponge state
        block (ndarray): Bytes holding the block
        offset (int): Index of the block's first byte in `block`
    """
    for w in range(RATE_WORDS):
        lane = uint64(0)
        base = offset + w * 8
        for k in range(8):
            lane |= uint64(block[base + k]) << uint64(k * 8)
        state[w] ^= lane


@njit(nogil=True)
def _absorb(state, data):
    """
    Absorbs every full block of the input and permutes after each one.

    Args:
        state (ndarray): The state array of the sponge construction
        data (ndarray): The input bytes

    Returns:
        int: Offset of the unabsorbed tail
    """
    full = len(data) // RATE
    for b in range(full):
        _xor_block(state, data, b * RATE)
        _keccak_f(state)

    return full * RATE


@njit(nogil=True)
def _pad(state, data, offset):
    """
    Pads the tail into a final block, absorbs it and permutes.

    The tail is 0 to RATE - 1 bytes long, so the final block always exists,
    and a tail of RATE - 1 bytes puts both padding bits in its last byte (0x81).

    Args:
        state (ndarray): The state array of the sponge construction
        data (ndarray): The input bytes
        offset (int): Offset of the tail in `data`
    """
    block = zeros(RATE, dtype=uint8)
    rem = len(data) - offset
    block[:rem] = data[offset:]
    block[rem] ^= _DSBYTE
    block[RATE - 1] ^= 0x80

    _xor_block(state, block, 0)
    _keccak_f(state)


@njit(nogil=True)
def _squeeze(state):
    """
    Reads the digest from the first lanes of the state, little-endian.

    Args:
        state (ndarray): The state array of the sponge construction

    Returns:
        ndarray: The hash output
    """
    output_bytes = empty(DIGEST_SIZE, dtype=uint8)
    for i in range(DIGEST_SIZE):
        output_bytes[i] = (state[i // 8] >> uint64((i % 8) * 8)) & uint64(0xFF)

    return output_bytes


@njit(nogil=True)
def _keccak256(data):
    state = zeros(STATE_LANES, dtype=uint64)

    # Absorb full blocks
    offset = _absorb(state, data)

    # Pad the remainder, always one more permutation
    _pad(state, data, offset)

    # Squeeze the hash
    return _squeeze(state)


def _as_uint8(data) -> ndarray:
    if isinstance(data, str):
        raise TypeError("expected a bytes-like object, encode str input first")

    if isinstance(data, ndarray):
        if data.dtype != uint8:
            raise TypeError(f"expected a uint8 array, got {data.dtype}")
        return ascontiguousarray(data).reshape(-1)

    view = memoryview(data)
    if not view.c_contiguous:
        return frombuffer(view.tobytes(), dtype=uint8)

    return frombuffer(view, dtype=uint8)


def keccak256(data: bytes) -> bytes:
    """
    Compute the Keccak-256 hash of the input data.

    Args:
        data (bytes): The input data to hash. bytearray, memoryview and
            uint8 numpy arrays are accepted as well.

    Returns:
        bytes: The 32-byte hash of the input data.
    """
    return _keccak256(_as_uint8(data)).tobytes()
