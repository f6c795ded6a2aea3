"""Organization tree snapshot and closure resolution.

The closure set of a principal is the set of organization ids it may act
within: every organization for an Owner, otherwise its own organization and
all transitive descendants.
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Iterable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.db.models import Organization
from taskhub.rbac.exceptions import InvalidConfigurationError
from taskhub.rbac.principal import Principal
from taskhub.rbac.roles import RoleLevel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrganizationNode:
    id: UUID
    name: str
    parent_id: UUID | None = None


class OrganizationTree:
    """In-memory adjacency view of the organization forest.

    Built from a single query so the closure walk never goes back to the
    database per node.
    """

    def __init__(self, nodes: Iterable[OrganizationNode]):
        self._nodes: dict[UUID, OrganizationNode] = {}
        self._children: dict[UUID, list[UUID]] = {}
        for node in nodes:
            self._nodes[node.id] = node
            self._children.setdefault(node.id, [])
        for node in self._nodes.values():
            if node.parent_id is not None:
                self._children.setdefault(node.parent_id, []).append(node.id)

    @classmethod
    async def load(cls, session: AsyncSession) -> "OrganizationTree":
        result = await session.execute(
            select(Organization.id, Organization.name, Organization.parent_id)
        )
        return cls(
            OrganizationNode(id=row.id, name=row.name, parent_id=row.parent_id)
            for row in result.all()
        )

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, org_id: object) -> bool:
        return org_id in self._nodes

    def get_node(self, org_id: UUID) -> OrganizationNode | None:
        return self._nodes.get(org_id)

    def get_children(self, org_id: UUID) -> list[OrganizationNode]:
        """Direct children only."""
        return [self._nodes[child_id] for child_id in self._children.get(org_id, [])]

    def all_ids(self) -> set[UUID]:
        return set(self._nodes)

    def descendants_and_self(self, org_id: UUID) -> set[UUID]:
        """Breadth-first walk from ``org_id`` over child links.

        Raises:
            InvalidConfigurationError: If a node is reached twice (cycle) or
                the walk exceeds the number of nodes in the tree.
        """
        visited: set[UUID] = {org_id}
        queue: deque[UUID] = deque([org_id])
        steps = 0
        while queue:
            current = queue.popleft()
            steps += 1
            if steps > len(self._nodes):
                raise InvalidConfigurationError(
                    f"Organization walk from {org_id} exceeded {len(self._nodes)} nodes"
                )
            for child_id in self._children.get(current, []):
                if child_id in visited:
                    raise InvalidConfigurationError(
                        f"Cycle detected in organization tree at {child_id}"
                    )
                visited.add(child_id)
                queue.append(child_id)
        return visited


class OrganizationClosureResolver:
    """Computes the organization ids a principal may operate within.

    One resolver lives for one request: the tree snapshot and the computed
    sets are cached on the instance and never shared across requests, since
    the organization structure can change between them.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self._tree: OrganizationTree | None = None
        self._cache: dict[Principal, frozenset[UUID]] = {}

    async def tree(self) -> OrganizationTree:
        if self._tree is None:
            self._tree = await OrganizationTree.load(self.session)
        return self._tree

    async def resolve(self, principal: Principal) -> frozenset[UUID]:
        cached = self._cache.get(principal)
        if cached is not None:
            return cached

        tree = await self.tree()
        if principal.role_level == RoleLevel.OWNER:
            closure = frozenset(tree.all_ids())
        elif principal.organization_id not in tree:
            # Unknown home organization: own org only, never everything.
            logger.warning(
                "Principal %s references unknown organization %s",
                principal.user_id,
                principal.organization_id,
            )
            closure = frozenset({principal.organization_id})
        else:
            closure = frozenset(tree.descendants_and_self(principal.organization_id))

        self._cache[principal] = closure
        return closure

    async def contains(self, principal: Principal, org_id: UUID) -> bool:
        return org_id in await self.resolve(principal)
