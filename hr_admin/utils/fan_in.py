import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, List, Mapping, Optional, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    data: T


@dataclass(frozen=True)
class Err:
    reason: str


SourceResult = Union[Ok, Err]


def gather_sources(
        sources: Mapping[str, Callable[[], Any]],
        on_error: Optional[Callable[[], None]] = None,
) -> Dict[str, SourceResult]:
    """
    Runs every source and tags its outcome, so one broken source does not
    hide the others. ``on_error`` runs after each failure (e.g. a session
    rollback) before the next source is tried.
    """
    results: Dict[str, SourceResult] = {}
    for name, fetch in sources.items():
        try:
            results[name] = Ok(fetch())
        except Exception as exc:
            logger.error("Source %s failed: %s", name, exc)
            results[name] = Err(str(exc))
            if on_error is not None:
                on_error()
    return results


def merge_ok(results: Mapping[str, SourceResult]) -> List[Any]:
    """Concatenates the list payloads of successful sources, in source order."""
    merged: List[Any] = []
    for res in results.values():
        if isinstance(res, Ok):
            merged.extend(res.data)
    return merged


def errors_of(results: Mapping[str, SourceResult]) -> Dict[str, str]:
    return {name: res.reason for name, res in results.items() if isinstance(res, Err)}
