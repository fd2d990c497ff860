"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
ReserveProof, a product of Garudex Labs

Leaf encoding for account balances.

Each account is committed as the text leaf "(id,value)": a literal open
parenthesis, the account id, a comma, the balance and a closing parenthesis,
with no whitespace. This module is the only place that knows that format.
"""

import re
from dataclasses import dataclass
from typing import Iterable, List, Tuple, Type, Union

from reserveproof.exceptions import InvalidAccountIdError, LeafParseError, ReserveProofError

_LEAF_PATTERN = re.compile(r"\((-?[0-9]+),([0-9]+)\)")
_ACCOUNT_ID_PATTERN = re.compile(r"-?[0-9]+")

# Longest digit run accepted for an id or balance
MAX_INTEGER_DIGITS = 4300


@dataclass(frozen=True)
class Account:
    """
    An account whose balance is committed to the reserve root.

    Attributes:
        id: Account identifier
        balance: Balance in the smallest currency unit
    """
    id: int
    balance: int


def _to_int(digits: str, error: Type[ReserveProofError]) -> int:
    if len(digits.lstrip("-")) > MAX_INTEGER_DIGITS:
        raise error(f"Number has more than {MAX_INTEGER_DIGITS} digits")
    try:
        return int(digits)
    except ValueError as e:
        raise error(f"Number {digits[:32]!r} cannot be converted: {e}") from e


def encode_leaf(account_id: int, value: int) -> str:
    """
    Encode an identifier and its value as a leaf.

    Example:
        >>> encode_leaf(7, 7777)
        '(7,7777)'
    """
    return f"({account_id},{value})"


def account_leaf(account: Account) -> str:
    """Encode an account as its leaf."""
    return encode_leaf(account.id, account.balance)


def account_leaves(accounts: Iterable[Account]) -> List[str]:
    """Encode accounts as leaves, preserving order."""
    return [account_leaf(account) for account in accounts]


def parse_leaf(leaf: Union[str, bytes]) -> Tuple[int, int]:
    """
    Decode a leaf into (id, value).

    Args:
        leaf: Leaf text (bytes are decoded as UTF-8)

    Returns:
        Tuple of (account id, value)

    Raises:
        LeafParseError: If the leaf does not match "(id,value)"
    """
    if isinstance(leaf, bytes):
        try:
            leaf = leaf.decode("utf-8")
        except UnicodeDecodeError as e:
            raise LeafParseError(f"Leaf is not valid UTF-8: {e}") from e

    match = _LEAF_PATTERN.fullmatch(leaf)
    if match is None:
        raise LeafParseError(f"Leaf {leaf!r} does not match the '(id,value)' format")

    return _to_int(match.group(1), LeafParseError), _to_int(match.group(2), LeafParseError)


def extract_balance(leaf: Union[str, bytes]) -> int:
    """
    Extract the balance from a leaf.

    Example:
        >>> extract_balance("(7,7777)")
        7777

    Raises:
        LeafParseError: If the leaf does not match "(id,value)"
    """
    return parse_leaf(leaf)[1]


def parse_account_id(raw: str) -> int:
    """
    Parse an account identifier from request input.

    Only an optional minus sign followed by decimal digits is accepted;
    "12abc", "1.5" and "" are rejected.

    Raises:
        InvalidAccountIdError: If `raw` is not a decimal integer or has more
            than MAX_INTEGER_DIGITS digits
    """
    if raw is None or not _ACCOUNT_ID_PATTERN.fullmatch(raw):
        raise InvalidAccountIdError(f"Account ID must be a number, got {raw!r}")
    return _to_int(raw, InvalidAccountIdError)
