"""
Custom Assertions for API Testing

Provides reusable assertion functions for validating EVM and mint response data.
"""

import re


def assert_valid_evm_address(address: str):
    """Assert that a string is a 0x-prefixed 20-byte hex address"""
    assert re.match(r"^0x[0-9a-fA-F]{40}$", address), f"Invalid address: {address}"


def assert_valid_transaction_hash(tx_hash: str):
    """Assert that a string is a valid transaction hash"""
    assert len(tx_hash) == 66, f"Transaction hash must be 66 characters, got {len(tx_hash)}"
    assert re.match(r"^0x[0-9a-f]{64}$", tx_hash), f"Invalid transaction hash format: {tx_hash}"


def assert_valid_did(identifier: str):
    """Assert that a string is a did:mynft identifier"""
    assert re.match(r"^did:mynft:[0-9a-f]{32}$", identifier), f"Invalid DID: {identifier}"


def assert_successful_response(response, expected_keys: list[str] | None = None):
    """Assert that an API response is successful and contains expected keys"""
    assert response.status_code == 200, f"Expected 200, got {response.status_code}: {response.text}"

    data = response.json()

    if expected_keys:
        for key in expected_keys:
            assert key in data, f"Missing key '{key}' in response: {data.keys()}"

    return data


def assert_error_response(response, expected_status: int, expected_error_code: str | None = None):
    """Assert that an API response is an error with expected status and category"""
    assert response.status_code == expected_status, (
        f"Expected {expected_status}, got {response.status_code}: {response.text}"
    )

    data = response.json()
    assert data.get("success") is False, f"Error response missing success=false: {data}"
    assert "error" in data, f"Error response missing 'error' field: {data}"

    if expected_error_code:
        assert data["error_code"] == expected_error_code, (
            f"Expected error_code {expected_error_code}, got: {data['error_code']}"
        )

    return data


def assert_valid_mint_response(data: dict, already_minted: bool):
    """Assert that a single mint response has valid structure"""
    required_keys = ["success", "already_minted", "token_id", "owner"]
    for key in required_keys:
        assert key in data, f"Missing key '{key}' in mint response"

    assert data["success"] is True
    assert data["already_minted"] is already_minted
    assert data["token_id"].isdigit(), f"token_id must be a decimal string: {data['token_id']}"
    assert_valid_evm_address(data["owner"])

    if already_minted:
        assert data["transaction_hash"] is None, "Existing mint must not report a transaction"
    else:
        assert_valid_transaction_hash(data["transaction_hash"])
        assert_valid_did(data["issued_identifier"])
