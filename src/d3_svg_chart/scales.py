import math
from collections import namedtuple
from collections.abc import Mapping


def _divide(num, den):
    """Float division that returns inf/nan for a zero denominator instead of raising."""
    num = float(num)
    den = float(den)
    if den != 0.0:
        return num / den
    if num == 0.0 or math.isnan(num):
        return math.nan
    # signed zero decides the direction, as in IEEE arithmetic
    return math.copysign(math.inf, num) * math.copysign(1.0, den)


class LinearScale:
    """Immutable affine mapping from ``domain`` onto ``range``, like d3.scaleLinear.

    Calling the scale (or ``apply``) maps a value forward; ``invert`` returns a
    new scale mapping back. A zero-length domain is not rejected: the mapping
    simply produces non-finite values.
    """

    __slots__ = ("_domain", "_range", "_slope")

    def __init__(self, domain=(0.0, 1.0), range_=(0.0, 1.0)):
        if len(domain) != 2:
            raise ValueError("LinearScale domain expects two values")
        if len(range_) != 2:
            raise ValueError("LinearScale range expects two values")
        self._domain = (float(domain[0]), float(domain[1]))
        self._range = (float(range_[0]), float(range_[1]))
        self._slope = _divide(
            self._range[1] - self._range[0], self._domain[1] - self._domain[0]
        )

    @property
    def domain(self):
        return self._domain

    @property
    def range(self):
        return self._range

    def apply(self, value):
        return self._range[0] + (float(value) - self._domain[0]) * self._slope

    def __call__(self, value):
        return self.apply(value)

    def invert(self):
        return LinearScale(self._range, self._domain)

    inverse = invert

    def __repr__(self):
        return f"LinearScale(domain={self._domain!r}, range_={self._range!r})"


def create_scale(domain=(0.0, 1.0), range_=(0.0, 1.0)):
    return LinearScale(domain, range_)


scale_linear = create_scale


def _identity(value):
    return value


def _read_coordinate(d, key, position):
    if isinstance(d, Mapping):
        return d[key]
    if hasattr(d, key):
        return getattr(d, key)
    if isinstance(d, (list, tuple)):
        return d[position]
    raise TypeError(f"Cannot read {key!r} from {type(d).__name__} datum")


def default_x(d, i=None):
    """Default x accessor: ``d["x"]``, ``d.x`` or ``d[0]``."""
    return _read_coordinate(d, "x", 0)


def default_y(d, i=None):
    """Default y accessor: ``d["y"]``, ``d.y`` or ``d[1]``."""
    return _read_coordinate(d, "y", 1)


Pointer = namedtuple("Pointer", ["x", "y", "left", "top"])


class ChartScales(
    namedtuple(
        "ChartScales",
        ["x1", "y1", "x2", "y2", "x_scale", "y_scale", "x_scale_inverse", "y_scale_inverse"],
    )
):
    """Scales of a chart whose drawing area spans 0..100 on both axes.

    ``y_scale`` maps onto ``[100, 0]`` so larger values sit higher on screen.
    """

    __slots__ = ()

    def pointer(self, left, top, width, height):
        """Translate a pixel position inside a ``width`` x ``height`` viewport into domain coordinates."""
        x = self.x_scale_inverse(_divide(100.0 * left, width))
        y = self.y_scale_inverse(_divide(100.0 * top, height))
        return Pointer(x=x, y=y, left=left, top=top)


def get_scales(x1=0, y1=0, x2=1, y2=1):
    x_scale = create_scale((x1, x2), (0, 100))
    y_scale = create_scale((y1, y2), (100, 0))
    return ChartScales(
        x1=x1,
        y1=y1,
        x2=x2,
        y2=y2,
        x_scale=x_scale,
        y_scale=y_scale,
        x_scale_inverse=x_scale.invert(),
        y_scale_inverse=y_scale.invert(),
    )
