import secrets


DID_METHOD = "mynft"


def generate_simple_did() -> str:
    """Random decentralized identifier recorded alongside each mint"""
    return f"did:{DID_METHOD}:{secrets.token_hex(16)}"


def parse_token_id(value: str | int) -> int:
    """
    Parse a token id given as an integer or an ASCII decimal string

    Raises:
        ValueError: If the value is not a non-negative integer
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid token id: {value!r}")
    if isinstance(value, int):
        token_id = value
    else:
        text = str(value).strip()
        if not (text.isascii() and text.isdigit()):
            raise ValueError(f"Invalid token id: {value!r}")
        token_id = int(text)
    if token_id < 0:
        raise ValueError(f"Invalid token id: {value!r}")
    return token_id
