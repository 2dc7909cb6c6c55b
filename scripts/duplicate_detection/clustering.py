"""
Union-find over item positions.

The forest is a plain list of parent indexes; find_root and union operate
on that list directly.
"""

from typing import Dict, Iterable, List, Tuple


def make_parents(size: int) -> List[int]:
    """Every position starts as its own root."""
    return list(range(size))


def find_root(parents: List[int], x: int) -> int:
    """Return the root of x, pointing every visited node at the root."""
    root = x
    while parents[root] != root:
        root = parents[root]
    while parents[x] != root:
        parents[x], x = root, parents[x]
    return root


def union(parents: List[int], a: int, b: int) -> bool:
    """Merge the sets holding a and b. Returns True if they were separate."""
    root_a = find_root(parents, a)
    root_b = find_root(parents, b)
    if root_a == root_b:
        return False
    parents[root_b] = root_a
    return True


def cluster_indices(size: int, edges: Iterable[Tuple[int, int]]) -> List[List[int]]:
    """
    Connected components of size >= 2.

    Members keep their original order and components are ordered by their
    first member. Singletons are dropped.
    """
    parents = make_parents(size)
    for a, b in edges:
        union(parents, a, b)

    components: Dict[int, List[int]] = {}
    for index in range(size):
        components.setdefault(find_root(parents, index), []).append(index)

    return [members for members in components.values() if len(members) >= 2]
