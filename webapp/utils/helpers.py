import jsonpickle
from jsonpickle.backend import JSONBackend
from datetime import datetime, timezone
from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from webapp.types.models import Condition

_canonical_backend = JSONBackend()
_canonical_backend.set_encoder_options("json", ensure_ascii=False)
_canonical_backend.set_encoder_options("simplejson", ensure_ascii=False)


def now() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def is_blank(value: Optional[str]) -> bool:
    """True for None, empty or whitespace-only strings."""
    return value is None or not value.strip()


def sort_dict_keys(d):
    """Recursively sort dictionary keys and handle nested structures.

    Args:
        d: Data structure (dict, list, or primitive type)

    Returns:
        Sorted version of the data structure
    """
    if isinstance(d, dict):
        return {
            key: sort_dict_keys(value)
            for key, value in sorted(d.items())
        }
    elif isinstance(d, list):
        return [sort_dict_keys(item) for item in d]
    else:
        return d


def canonicalize_dict(data) -> str:
    """
    Returns a canonical JSON representation of a dictionary.

    Keys are sorted recursively, separators carry no whitespace and non-ASCII
    characters are written as-is, so the representation stays the same
    regardless of insertion order.
    """
    return jsonpickle.dumps(
        sort_dict_keys(data),
        unpicklable=False,
        separators=(",", ":"),
        backend=_canonical_backend,
    )


def upsert_condition(conds: List["Condition"], newc: "Condition") -> List["Condition"]:
    """Merge `newc` into `conds` by type.

    An entry of the same type is replaced in place, otherwise `newc` is
    appended. lastTransitionTime only moves when the status flips.
    """
    conds = list(conds or [])
    for i, c in enumerate(conds):
        if c.type == newc.type:
            ltt = getattr(c, "last_transition_time", None) or now()
            if c.status != newc.status:
                ltt = now()
            conds[i] = newc.copy(last_transition_time=ltt)
            break
    else:
        conds.append(newc.copy(last_transition_time=now()))
    return conds
