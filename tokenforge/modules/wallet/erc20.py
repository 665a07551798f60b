"""ABI encoding for the two ERC-20 entry points a multisend needs."""
from eth_abi import decode, encode
from eth_utils import function_signature_to_4byte_selector, to_checksum_address

TRANSFER_SIGNATURE = "transfer(address,uint256)"
BALANCE_OF_SIGNATURE = "balanceOf(address)"

TRANSFER_SELECTOR = function_signature_to_4byte_selector(TRANSFER_SIGNATURE)
BALANCE_OF_SELECTOR = function_signature_to_4byte_selector(BALANCE_OF_SIGNATURE)


def encode_transfer(to: str, amount: int) -> str:
    payload = TRANSFER_SELECTOR + encode(["address", "uint256"], [to_checksum_address(to), amount])
    return "0x" + payload.hex()


def encode_balance_of(owner: str) -> str:
    payload = BALANCE_OF_SELECTOR + encode(["address"], [to_checksum_address(owner)])
    return "0x" + payload.hex()


def decode_uint256(data: bytes) -> int:
    return decode(["uint256"], bytes(data))[0]
