"""Contract input encoding.

Wager (input type 1): 5 bytes, uint8 direction (UP=1, DOWN=0), uint32 LE round id.
Claim (input type 2): 4 bytes, uint32 LE round id.
"""

import struct

from src.tr_common.enums import Direction

WAGER_INPUT_TYPE = 1
CLAIM_INPUT_TYPE = 2

_WAGER = struct.Struct("<BI")
_CLAIM = struct.Struct("<I")


def encode_wager_input(direction: Direction, round_id: int) -> bytes:
    return _WAGER.pack(1 if direction is Direction.UP else 0, round_id)


def decode_wager_input(data: bytes) -> tuple[Direction, int]:
    flag, round_id = _WAGER.unpack(data)
    return (Direction.UP if flag == 1 else Direction.DOWN), round_id


def encode_claim_input(round_id: int) -> bytes:
    return _CLAIM.pack(round_id)


def decode_claim_input(data: bytes) -> int:
    (round_id,) = _CLAIM.unpack(data)
    return round_id
