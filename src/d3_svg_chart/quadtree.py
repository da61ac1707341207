import logging
import math
from collections import namedtuple

from .scales import _identity, default_x, default_y

logger = logging.getLogger(__name__)

ProjectedPoint = namedtuple("ProjectedPoint", ["x", "y", "datum"])


class QuadNode:
    """Region ``[x0, y0, x1, y1]`` of the tree.

    A node is empty, a leaf holding one ``ProjectedPoint``, or internal with
    four children ``(nw, ne, sw, se)`` split at the region midpoint.
    """

    __slots__ = ("x0", "y0", "x1", "y1", "xm", "ym", "leaf", "children")

    def __init__(self, x0, y0, x1, y1):
        self.x0 = x0
        self.y0 = y0
        self.x1 = x1
        self.y1 = y1
        self.xm = (x0 + x1) / 2
        self.ym = (y0 + y1) / 2
        self.leaf = None
        self.children = None

    @property
    def empty(self):
        return self.leaf is None and self.children is None

    @property
    def divisible(self):
        # false once float resolution is exhausted on both axes, or for nan bounds
        return self.x0 < self.xm < self.x1 or self.y0 < self.ym < self.y1

    def child_for(self, x, y):
        nw, ne, sw, se = self.children
        if x < self.xm:
            return nw if y < self.ym else sw
        return ne if y < self.ym else se

    def subdivide(self):
        x0, y0, x1, y1, xm, ym = self.x0, self.y0, self.x1, self.y1, self.xm, self.ym
        self.children = (
            QuadNode(x0, y0, xm, ym),
            QuadNode(xm, y0, x1, ym),
            QuadNode(x0, ym, xm, y1),
            QuadNode(xm, ym, x1, y1),
        )
        displaced, self.leaf = self.leaf, None
        self.child_for(displaced.x, displaced.y).leaf = displaced

    def add(self, point):
        """Insert ``point`` below this node; return False if it was discarded as coincident."""
        node = self
        while True:
            if node.empty:
                node.leaf = point
                return True
            leaf = node.leaf
            if leaf is not None:
                if leaf.x == point.x and leaf.y == point.y:
                    return False
                if not node.divisible:
                    return False
                node.subdivide()
            node = node.child_for(point.x, point.y)

    def leaves(self):
        stack = [self]
        while stack:
            node = stack.pop()
            if node.leaf is not None:
                yield node.leaf
            elif node.children is not None:
                stack.extend(reversed(node.children))


def _is_nan(value):
    # nan is the only value unequal to itself, whatever its numeric type
    return value != value


def build_tree(data, x, y, x_scale, y_scale):
    points = []
    skipped = 0
    for i, d in enumerate(data):
        px = x_scale(x(d, i))
        py = y_scale(y(d, i))
        if _is_nan(px) or _is_nan(py):
            skipped += 1
            continue
        points.append(ProjectedPoint(px, py, d))

    if points:
        x0 = min(p.x for p in points)
        y0 = min(p.y for p in points)
        x1 = max(p.x for p in points)
        y1 = max(p.y for p in points)
    else:
        x0 = y0 = x1 = y1 = 0.0

    root = QuadNode(x0, y0, x1, y1)
    stored = 0
    for p in points:
        if root.add(p):
            stored += 1

    logger.debug(
        "Built quadtree: %d indexed, %d coincident, %d skipped (nan)",
        stored,
        len(points) - stored,
        skipped,
    )
    return root, stored


class SpatialIndex:
    """Nearest-item lookup over a dataset projected through a pair of scales.

    The quadtree is built on the first ``find`` and cached until ``update`` (or
    ``invalidate``) discards it, so repeated queries against an unchanged chart
    only pay for the traversal.

    Example
    -------
    >>> from d3_svg_chart import SpatialIndex, scale_linear
    >>> index = SpatialIndex([{"x": 1, "y": 2}, {"x": 3, "y": 4}])
    >>> index.update(None, None, scale_linear((0, 4), (0, 100)), scale_linear((0, 4), (100, 0)))
    >>> index.find(205, 290, 800, 600, radius=20)
    {'x': 1, 'y': 2}
    """

    def __init__(self, data, x=None, y=None, x_scale=None, y_scale=None):
        self.data = data
        self.x = x or default_x
        self.y = y or default_y
        self.x_scale = x_scale or _identity
        self.y_scale = y_scale or _identity
        self._root = None
        self._size = 0
        self.visited = 0

    def update(self, x, y, x_scale, y_scale):
        self.x = x or default_x
        self.y = y or default_y
        self.x_scale = x_scale or _identity
        self.y_scale = y_scale or _identity
        self._root = None

    def invalidate(self):
        self._root = None

    def _ensure_built(self):
        if self._root is None:
            self._root, self._size = build_tree(
                self.data, self.x, self.y, self.x_scale, self.y_scale
            )
        return self._root

    @property
    def root(self):
        return self._ensure_built()

    @property
    def size(self):
        self._ensure_built()
        return self._size

    def find_point(self, left, top, width, height, radius=math.inf):
        """Like ``find`` but return the matching ``ProjectedPoint`` (or None)."""
        kx = width / 100
        ky = height / 100

        closest = None
        min_d_squared = math.inf
        visited = 0
        stack = [self.root]

        while stack:
            node = stack.pop()
            visited += 1
            if node.empty:
                continue

            left0 = node.x0 * kx
            left1 = node.x1 * kx
            top0 = node.y0 * ky
            top1 = node.y1 * ky
            if (
                left < min(left0, left1) - radius
                or left > max(left0, left1) + radius
                or top < min(top0, top1) - radius
                or top > max(top0, top1) + radius
            ):
                continue

            leaf = node.leaf
            if leaf is not None:
                dl = leaf.x * kx - left
                dt = leaf.y * ky - top
                d_squared = dl * dl + dt * dt
                if d_squared < min_d_squared:
                    closest = leaf
                    min_d_squared = d_squared
            else:
                stack.extend(node.children)

        self.visited = visited
        if min_d_squared < radius * radius:
            return closest
        return None

    def find(self, left, top, width, height, radius=math.inf):
        """Return the datum nearest to pixel ``(left, top)`` within ``radius``, or None.

        Node regions live in 0..100 units and are stretched onto a ``width`` x
        ``height`` pixel viewport before comparing. Ties between equidistant
        points go to the first leaf reached when children are pushed
        nw, ne, sw, se and popped last-in first-out.
        """
        point = self.find_point(left, top, width, height, radius)
        return None if point is None else point.datum
