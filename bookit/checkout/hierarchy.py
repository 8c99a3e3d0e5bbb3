"""Parent/child resolution over ``Bookable.related_bookable_ids``.

The edge list is read once per tenant into an adjacency map (bookable ->
children) and a reverse index (bookable -> parents). Both traversals are
breadth-first with a visited set and a depth budget, so cyclic edge data
terminates and every bookable appears at most once. The start bookable is
never part of its own result.
"""

import logging
from collections import deque
from collections.abc import Iterable

from bookit.config import settings
from bookit.models.bookable import Bookable
from bookit.repositories.resources import ResourceRepository

logger = logging.getLogger(__name__)


class HierarchyResolver:
    def __init__(self, bookables: Iterable[Bookable]) -> None:
        self._by_id: dict[str, Bookable] = {}
        self._children: dict[str, list[str]] = {}
        self._parents: dict[str, list[str]] = {}

        for bookable in bookables:
            self._by_id[bookable.id] = bookable

        for bookable in self._by_id.values():
            for child_id in dict.fromkeys(bookable.related_bookable_ids or []):
                self._children.setdefault(bookable.id, []).append(child_id)
                self._parents.setdefault(child_id, []).append(bookable.id)

    @classmethod
    async def for_tenant(cls, repository: ResourceRepository, tenant_id: str) -> "HierarchyResolver":
        return cls(await repository.get_bookables(tenant_id))

    def get(self, bookable_id: str) -> Bookable | None:
        return self._by_id.get(bookable_id)

    def descendants(self, bookable_id: str, max_depth: int | None = None) -> list[Bookable]:
        """Children, grandchildren, ... up to ``max_depth`` levels below ``bookable_id``."""
        if max_depth is None:
            max_depth = settings.hierarchy_max_descendant_depth
        return self._walk(bookable_id, self._children, max_depth)

    def ancestors(self, bookable_id: str, max_depth: int | None = None) -> list[Bookable]:
        """Parents, grandparents, ... up to ``max_depth`` levels above ``bookable_id``."""
        if max_depth is None:
            max_depth = settings.hierarchy_max_ancestor_depth
        return self._walk(bookable_id, self._parents, max_depth)

    def _walk(self, start_id: str, edges: dict[str, list[str]], max_depth: int) -> list[Bookable]:
        visited = {start_id}
        found: list[Bookable] = []
        queue = deque([(start_id, 0)])

        while queue:
            current_id, depth = queue.popleft()
            if depth >= max_depth:
                continue
            for next_id in edges.get(current_id, []):
                if next_id in visited:
                    continue
                visited.add(next_id)
                bookable = self._by_id.get(next_id)
                if bookable is None:
                    # Dangling reference, nothing to traverse from here
                    logger.debug("Skipping unknown related bookable %s", next_id)
                    continue
                found.append(bookable)
                queue.append((next_id, depth + 1))

        return found
