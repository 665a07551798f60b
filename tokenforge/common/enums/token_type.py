import enum


class TokenType(str, enum.Enum):
    NATIVE = "native"
    ERC20 = "erc20"
