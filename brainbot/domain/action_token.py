"""Callback token codec — compact ``verb:id[:param]`` strings.

A token is the only state a pressed button carries back to us, so every
multi-step flow encodes "which entry" (and the chosen option) here.
Pure Python, no framework dependencies.
"""

from typing import Dict, Optional

from brainbot.domain.models import ActionToken

DELIMITER = ":"

# Platform cap on callback payloads, in bytes
MAX_TOKEN_BYTES = 64

# verb -> whether a param is required
VERBS: Dict[str, bool] = {
    "done": False,   # mark entry finished
    "recat": True,   # archive + recreate under param category
    "snzp": False,   # snooze pick: offer durations
    "snz": True,     # snooze apply: param = days
    "edtp": False,   # edit pick: offer statuses
    "est": True,     # edit apply: param = status
}


class ActionTokenError(ValueError):
    """Raised for tokens that cannot be encoded or decoded."""
    pass


def encode(verb: str, entry_id: str, param: Optional[str] = None) -> str:
    """Build a callback token, rejecting anything decode() could not recover."""
    if verb not in VERBS:
        raise ActionTokenError(f"Unknown verb: {verb!r}")
    if not entry_id or DELIMITER in entry_id:
        raise ActionTokenError(f"Invalid entry id: {entry_id!r}")
    if VERBS[verb] and param is None:
        raise ActionTokenError(f"Verb {verb!r} requires a parameter")
    if not VERBS[verb] and param is not None:
        raise ActionTokenError(f"Verb {verb!r} takes no parameter")

    parts = [verb, entry_id]
    if param is not None:
        if not param or DELIMITER in param:
            raise ActionTokenError(f"Invalid parameter: {param!r}")
        parts.append(param)

    token = DELIMITER.join(parts)
    if len(token.encode("utf-8")) > MAX_TOKEN_BYTES:
        raise ActionTokenError(
            f"Token exceeds {MAX_TOKEN_BYTES} bytes: {token!r}"
        )
    return token


def decode(token: str) -> ActionToken:
    """Split a token into verb, id and param (at most 3 parts).

    The param is kept verbatim, never split again.
    """
    if not token:
        raise ActionTokenError("Empty token")
    parts = token.split(DELIMITER, 2)
    verb = parts[0]
    if verb not in VERBS:
        raise ActionTokenError(f"Unknown verb: {verb!r}")
    if len(parts) < 2 or not parts[1]:
        raise ActionTokenError(f"Missing entry id: {token!r}")
    param = parts[2] if len(parts) == 3 else None
    if VERBS[verb] and not param:
        raise ActionTokenError(f"Verb {verb!r} requires a parameter: {token!r}")
    return ActionToken(verb=verb, entry_id=parts[1], param=param)
