"""Keccak-f[1600] permutation in Python, jitted with numba"""

from numba import njit
from numpy import array, ndarray, uint64, zeros

# Number of lanes in the 5x5 state
STATE_LANES = 25

# Number of Keccak rounds
NUM_ROUNDS = 24

# Keccak round constants (iota)
KECCAKF_RNDC = array([
  0x0000000000000001, 0x0000000000008082, 0x800000000000808a,
  0x8000000080008000, 0x000000000000808b, 0x0000000080000001,
  0x8000000080008081, 0x8000000000008009, 0x000000000000008a,
  0x0000000000000088, 0x0000000080008009, 0x000000008000000a,
  0x000000008000808b, 0x800000000000008b, 0x8000000000008089,
  0x8000000000008003, 0x8000000000008002, 0x8000000000000080,
  0x000000000000800a, 0x800000008000000a, 0x8000000080008081,
  0x8000000000008080, 0x0000000080000001, 0x8000000080008008],
  dtype=uint64)

# Rotation offsets (rho), in the order lanes are visited by pi
KECCAKF_ROTC = array([
  1,  3,  6,  10, 15, 21, 28, 36, 45, 55, 2,  14,
  27, 41, 56, 8,  25, 43, 62, 18, 39, 61, 20, 44])

# Lane destinations (pi), starting from lane 1
KECCAKF_PILN = array([
  10, 7,  11, 17, 18, 3, 5,  16, 8,  21, 24, 4,
  15, 23, 19, 13, 12, 2, 20, 14, 22, 9,  6,  1])


@njit(nogil=True)
def _rol(x, s):
    """
    Rotates x left by s

    Args:
        x (int): The 64-bit value to rotate
        s (int): The number of bits to rotate by, 1 <= s <= 63

    Returns:
        int: The rotated value
    """
    return (uint64(x) << uint64(s)) | (uint64(x) >> uint64(64 - s))


@njit(nogil=True)
def _theta(state, bc):
    for i in range(5):
        bc[i] = state[i] ^ state[i + 5] ^ state[i + 10] ^ state[i + 15] ^ state[i + 20]

    for i in range(5):
        t = bc[(i + 4) % 5] ^ _rol(bc[(i + 1) % 5], 1)
        for j in range(0, STATE_LANES, 5):
            state[j + i] ^= t


@njit(nogil=True)
def _rho_pi(state):
    # each step moves the lane displaced by the previous one
    t = state[1]
    for i in range(len(KECCAKF_PILN)):
        j = KECCAKF_PILN[i]
        saved = state[j]
        state[j] = _rol(t, KECCAKF_ROTC[i])
        t = saved


@njit(nogil=True)
def _chi(state, bc):
    for j in range(0, STATE_LANES, 5):
        for i in range(5):
            bc[i] = state[j + i]
        for i in range(5):
            state[j + i] ^= (~bc[(i + 1) % 5]) & bc[(i + 2) % 5]


@njit(nogil=True)
def _keccak_f(state):
    """
    The keccak_f permutation function

    Args:
        state (ndarray): The 25 uint64 lanes of the sponge state, indexed x + 5*y

    Returns:
        ndarray: The same array, permuted in place
    """
    # Scratch for column parities and chi rows
    bc = zeros(5, dtype=uint64)

    for rnd in range(NUM_ROUNDS):
        _theta(state, bc)
        _rho_pi(state)
        _chi(state, bc)

        # Iota
        state[0] ^= KECCAKF_RNDC[rnd]

    return state


def permute(state: ndarray) -> ndarray:
    """
    Apply Keccak-f[1600] to a state in place.

    Args:
        state (ndarray): 25 lanes of dtype uint64

    Returns:
        ndarray: The permuted state (the same object)
    """
    if not isinstance(state, ndarray):
        raise ValueError(f"expected state to be a numpy array, got {type(state).__name__}")
    if state.dtype != uint64 or state.shape != (STATE_LANES,):
        raise ValueError(
            f"expected state to be {STATE_LANES} uint64 lanes, got {state.shape} {state.dtype}"
        )

    _keccak_f(state)
    return state
