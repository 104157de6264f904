# imgtoy/pipeline.py
from __future__ import annotations

"""
Effect contract, effect chains, and a per-surface batch runner.

An Effect turns one Surface into another. A Pipeline applies a fixed list of
effects in order. run_batch() pushes many independent surfaces through one
pipeline on a thread pool; a failure on one surface never touches the others.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Protocol, Sequence, Tuple, runtime_checkable

from .surface import Surface
from .utils import debug_log, error


@runtime_checkable
class Effect(Protocol):
    name: str

    def apply(self, surface: Surface) -> Surface: ...

    def describe(self) -> List[Tuple[str, Any]]: ...


@dataclass(frozen=True)
class Pipeline:
    effects: Tuple[Effect, ...] = ()

    def __post_init__(self) -> None:
        effects = tuple(self.effects)
        for effect in effects:
            if not isinstance(effect, Effect):
                raise TypeError(f"{effect!r} does not implement apply()/describe()")
        object.__setattr__(self, "effects", effects)

    @classmethod
    def of(cls, *effects: Effect) -> "Pipeline":
        return cls(tuple(effects))

    def apply(self, surface: Surface) -> Surface:
        for effect in self.effects:
            surface = effect.apply(surface)
        return surface

    def describe(self) -> List[Tuple[str, List[Tuple[str, Any]]]]:
        return [(effect.name, effect.describe()) for effect in self.effects]

    def __len__(self) -> int:
        return len(self.effects)


@dataclass(frozen=True)
class BatchResult:
    """Outcome for one surface: exactly one of surface / error is set."""

    index: int
    surface: Optional[Surface] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _run_one(pipeline: Pipeline, index: int, surface: Surface, debug: bool) -> BatchResult:
    try:
        out = pipeline.apply(surface)
    except Exception as exc:
        error(f"surface #{index}: {type(exc).__name__}: {exc}")
        return BatchResult(index, None, exc)
    if debug:
        debug_log(f"surface #{index} done  {out.width}x{out.height}")
    return BatchResult(index, out, None)


def run_batch(
    pipeline: Pipeline,
    surfaces: Iterable[Surface],
    workers: int = 1,
    debug: bool = False,
) -> List[BatchResult]:
    """
    Apply pipeline to every surface; results keep input order.

    A surface whose chain raises yields a BatchResult with the error and no
    partial output. workers <= 1 runs inline.
    """
    items: Sequence[Surface] = list(surfaces)
    if workers <= 1 or len(items) <= 1:
        return [_run_one(pipeline, i, s, debug) for i, s in enumerate(items)]

    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(_run_one, pipeline, i, s, debug) for i, s in enumerate(items)]
        return [f.result() for f in futures]


__all__ = ["Effect", "Pipeline", "BatchResult", "run_batch"]
