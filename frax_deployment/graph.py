from collections import OrderedDict, defaultdict, deque
from typing import Dict, Iterable, List, Set

from frax_deployment.errors import TopologyError


class DependencyGraph:
    """
    Directed acyclic graph of named nodes, where an edge (a -> b) means
    that 'a' must be handled before 'b'.

    Nodes keep their insertion order, which is used to break ties so that the
    resulting order is deterministic.
    """

    def __init__(self):
        self._dependencies: Dict[str, Set[str]] = OrderedDict()

    def add_node(self, node: str, depends_on: Iterable[str] = ()) -> None:
        dependencies = self._dependencies.setdefault(node, set())
        dependencies.update(depends_on)

    def add_edge(self, before: str, after: str) -> None:
        if after not in self._dependencies:
            raise TopologyError(f"Unknown node '{after}'.")
        self._dependencies[after].add(before)

    def dependencies(self, node: str) -> Set[str]:
        return set(self._dependencies[node])

    def __contains__(self, node: str) -> bool:
        return node in self._dependencies

    def __len__(self) -> int:
        return len(self._dependencies)

    def _validate(self) -> None:
        for node, dependencies in self._dependencies.items():
            unknown = dependencies - set(self._dependencies)
            if unknown:
                raise TopologyError(
                    f"'{node}' depends on undeclared node(s): {', '.join(sorted(unknown))}."
                )
            if node in dependencies:
                raise TopologyError(f"'{node}' depends on itself.")

    def order(self) -> List[str]:
        """Returns every node in dependency order; fails fast on cycles."""
        self._validate()

        indegree = {node: len(deps) for node, deps in self._dependencies.items()}
        dependents = defaultdict(list)
        for node, dependencies in self._dependencies.items():
            for dependency in dependencies:
                dependents[dependency].append(node)

        position = {node: index for index, node in enumerate(self._dependencies)}
        queue = deque(node for node, degree in indegree.items() if degree == 0)
        ordered = list()
        while queue:
            current = queue.popleft()
            ordered.append(current)
            released = list()
            for dependent in dependents[current]:
                indegree[dependent] -= 1
                if indegree[dependent] == 0:
                    released.append(dependent)
            queue.extend(sorted(released, key=position.get))

        if len(ordered) != len(self._dependencies):
            cyclic = [node for node in self._dependencies if indegree[node] > 0]
            raise TopologyError(f"Dependency cycle detected between: {', '.join(cyclic)}.")
        return ordered
