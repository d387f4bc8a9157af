"""
Small helpers shared by connectors, providers and the stack assembler.
"""

import base64
import copy
import re
from typing import Any, Dict, List, Union

SECRET_NAME_PATTERN = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')

_PATH_TOKEN = re.compile(r'([^.\[\]]+)|\[(\d+)\]')


def is_valid_secret_name(name: str) -> bool:
    """Check a secret name against the identifier pattern (letters, digits, underscore)."""
    return isinstance(name, str) and bool(SECRET_NAME_PATTERN.match(name))


def mask_value(value: Any, length: int = 4) -> str:
    """Mask a secret value for logging, keeping at most `length` leading characters."""
    length = int(length)
    if length < 0:
        raise ValueError("Length must be a non-negative integer")
    text = value if isinstance(value, str) else str(value)
    if len(text) <= length:
        return '*' * length
    return text[:length] + '*' * (len(text) - length)


def encode_value(value: str) -> str:
    """Base64-encode a string the way Kubernetes expects in Secret.data."""
    return base64.b64encode(value.encode('utf-8')).decode('ascii')


def decode_value(encoded: str) -> str:
    return base64.b64decode(encoded.encode('ascii')).decode('utf-8')


def censor_secret_payload(manifest: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of a manifest with every data/stringData value replaced by '***'."""
    censored = copy.deepcopy(manifest)
    for field in ('data', 'stringData'):
        if isinstance(censored.get(field), dict):
            censored[field] = {key: '***' for key in censored[field]}
    return censored


def parse_path(path: str) -> List[Union[str, int]]:
    """Split a dotted path such as 'spec.containers[0].env' into tokens."""
    tokens: List[Union[str, int]] = []
    for name, index in _PATH_TOKEN.findall(path):
        tokens.append(int(index) if index else name)
    if not tokens:
        raise ValueError(f"Invalid path: '{path}'")
    return tokens


def get_at_path(obj: Any, path: str, default: Any = None) -> Any:
    """Read the value at a dotted path, returning `default` when any segment is missing."""
    current = obj
    for token in parse_path(path):
        try:
            current = current[token]
        except (KeyError, IndexError, TypeError):
            return default
    return current


def set_at_path(obj: Dict[str, Any], path: str, value: Any) -> None:
    """Set `value` at a dotted path, creating dicts and lists along the way.

    When both the existing value and `value` are lists, `value` is appended to
    the existing list instead of replacing it.
    """
    tokens = parse_path(path)
    current: Any = obj
    for position, token in enumerate(tokens[:-1]):
        next_token = tokens[position + 1]
        container = [] if isinstance(next_token, int) else {}
        if isinstance(token, int):
            while len(current) <= token:
                current.append({} if not isinstance(next_token, int) else [])
            if current[token] is None:
                current[token] = container
            current = current[token]
        else:
            if current.get(token) is None:
                current[token] = container
            current = current[token]

    last = tokens[-1]
    if isinstance(last, int):
        while len(current) <= last:
            current.append(None)
        current[last] = value
        return
    existing = current.get(last)
    if isinstance(existing, list) and isinstance(value, list):
        existing.extend(value)
    else:
        current[last] = value
