"""Coverage-driven generation engine.

Every layer follows the same loop: keep building new terms while some
pool member (or auxiliary symbol) has not yet been used ``min_refs``
times as an operand. :class:`CoverageMap` does the bookkeeping and
:class:`CoverageLayer` runs the loop, including the stall detection that
guarantees termination.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Generic, Iterable, List, Optional, Sequence, TypeVar

from fuzzsmt.constants import STALL_LIMIT
from fuzzsmt.core.errors import GenerationError
from fuzzsmt.core.expr import Expr
from fuzzsmt.core.session import GenerationSession
from fuzzsmt.core.terms import Term

log = logging.getLogger(__name__)

T = TypeVar("T")


def _item_id(item) -> int:
    return item.id


class CoverageMap(Generic[T]):
    """Remaining reference requirement per item, keyed by stable id.

    Items whose requirement reaches zero are dropped, so the map is empty
    exactly when every tracked item has been used ``min_refs`` times.
    """

    def __init__(
        self,
        items: Iterable[T],
        min_refs: int,
        key: Callable[[T], int] = _item_id,
    ) -> None:
        if min_refs < 1:
            raise GenerationError(f"minimum number of references must be >= 1, got {min_refs}")
        self._key = key
        self._remaining: Dict[int, int] = {}
        self._items: Dict[int, T] = {}
        for item in items:
            ident = key(item)
            if ident not in self._items:
                self._items[ident] = item
                self._remaining[ident] = min_refs

    def __len__(self) -> int:
        return len(self._remaining)

    def __bool__(self) -> bool:
        return bool(self._remaining)

    def __contains__(self, item) -> bool:
        return self._key(item) in self._remaining

    def remaining(self, item: T) -> int:
        return self._remaining.get(self._key(item), 0)

    def outstanding(self) -> int:
        """Sum of all remaining requirements."""
        return sum(self._remaining.values())

    def pending(self) -> List[T]:
        """Unsatisfied items in insertion order."""
        return [self._items[ident] for ident in self._remaining]

    def use(self, item: T) -> bool:
        """Count one use of *item*. Returns True if that made progress."""
        ident = self._key(item)
        left = self._remaining.get(ident)
        if left is None:
            return False
        if left <= 1:
            del self._remaining[ident]
        else:
            self._remaining[ident] = left - 1
        return True


class CoverageLayer:
    """Skeleton of one coverage-driven generation pass.

    Subclasses register their maps with :meth:`track` in ``__init__`` and
    implement :meth:`step`, which builds and binds exactly one new term.
    Within a step, operands come from :meth:`pick` and each use is
    recorded with :meth:`use`.

    After ``STALL_LIMIT`` consecutive steps without progress the layer
    switches to forcing mode: :meth:`pick` then always draws from the
    pending items and subclasses choose kinds that consume them. A forced
    step that still makes no progress raises ``GenerationError``.
    """

    name = "layer"

    def __init__(self, session: GenerationSession, min_refs: int, *, no_blowup: bool = True) -> None:
        if min_refs < 1:
            raise GenerationError(f"minimum number of references must be >= 1, got {min_refs}")
        self.session = session
        self.min_refs = min_refs
        self.no_blowup = no_blowup
        self.forcing = False
        self.generated: List[Term] = []
        self._maps: List[CoverageMap] = []

    # --- Bookkeeping ---

    def track(self, items: Iterable[T]) -> CoverageMap[T]:
        cov: CoverageMap[T] = CoverageMap(items, self.min_refs)
        self._maps.append(cov)
        return cov

    def outstanding(self) -> int:
        return sum(cov.outstanding() for cov in self._maps)

    def done(self) -> bool:
        return not any(self._maps)

    def use(self, *terms) -> None:
        """Record one use of each operand in every map that tracks it."""
        for term in terms:
            for cov in self._maps:
                cov.use(term)

    # --- Choices ---

    def pick(self, pool: Sequence[T], cov: Optional[CoverageMap[T]] = None, *, bias: bool = True) -> T:
        """Draw an operand from *pool*.

        With *bias* set, a coin flip draws from the unsatisfied items of
        *cov* instead. In forcing mode the unsatisfied items are always
        preferred.
        """
        if cov:
            pending = [item for item in cov.pending() if item in pool] if self.forcing else None
            if pending:
                return self.session.choice(pending)
            if not self.forcing and bias and self.session.biased():
                return self.session.choice(cov.pending())
        return self.session.choice(pool, f"{self.name} pool")

    def bind(self, expr: Expr, name: Optional[str] = None) -> Term:
        term = self.session.bind(expr, name)
        self.generated.append(term)
        return term

    # --- Loop ---

    def step(self) -> None:
        raise NotImplementedError

    def run(self) -> List[Term]:
        """Step until every tracked requirement is met; return the new terms."""
        stalled = 0
        steps = 0
        while not self.done():
            before = self.outstanding()
            self.step()
            steps += 1
            if self.outstanding() < before:
                stalled = 0
                self.forcing = False
                continue
            if self.forcing:
                raise GenerationError(
                    f"{self.name}: forced step made no progress, "
                    f"{before} references outstanding"
                )
            stalled += 1
            if stalled >= STALL_LIMIT:
                log.debug("%s: no progress for %d steps, forcing", self.name, stalled)
                self.forcing = True
        log.debug("%s: %d steps, %d new terms", self.name, steps, len(self.generated))
        return self.generated
