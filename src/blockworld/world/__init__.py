"""World state: two-layer block grids.

Architecture Note:
    world/ is the stateful layer. Unlike core/ (immutable values), a World
    owns mutable grids whose cells are replaced in place.
"""

from blockworld.world.world import DEFAULT_BORDER_BLOCK, Grid, World, make_grid

__all__ = [
    "World",
    "Grid",
    "make_grid",
    "DEFAULT_BORDER_BLOCK",
]
