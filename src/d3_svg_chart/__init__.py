# pip install lxml cssselect
import math
import weakref
from functools import lru_cache

from lxml import etree
from lxml.cssselect import CSSSelector
from cssselect import GenericTranslator

from .quadtree import ProjectedPoint, QuadNode, SpatialIndex
from .scales import (
    ChartScales,
    LinearScale,
    Pointer,
    create_scale,
    default_x,
    default_y,
    get_scales,
    scale_linear,
)
from .ticks import generate_ticks, tick_increment

SVG_NS = "http://www.w3.org/2000/svg"
NSMAP = {None: SVG_NS}

__all__ = [
    "ChartSVG",
    "ChartScales",
    "LinearScale",
    "MiniD3SVG",
    "Pointer",
    "ProjectedPoint",
    "QuadNode",
    "SVG_NS",
    "Selection",
    "SpatialIndex",
    "create_scale",
    "default_x",
    "default_y",
    "generate_ticks",
    "get_scales",
    "scale_linear",
    "tick_increment",
]


class _SVGDefaultNamespaceTranslator(GenericTranslator):
    """Resolve bare element selectors (``line``) inside the SVG namespace."""

    def __init__(self, default_prefix="svg"):
        super().__init__()
        self._default_prefix = default_prefix

    def xpath_element(self, selector):
        if (
            self._default_prefix
            and selector.namespace is None
            and selector.element is not None
        ):
            selector = selector.__class__(self._default_prefix, selector.element)
        return super().xpath_element(selector)


_SVG_NAMESPACE_PREFIX = "svg"
_SVG_CSS_TRANSLATOR = _SVGDefaultNamespaceTranslator(default_prefix=_SVG_NAMESPACE_PREFIX)
_SVG_CSS_NAMESPACES = {_SVG_NAMESPACE_PREFIX: SVG_NS}


@lru_cache(maxsize=128)
def _svg_css_selector(css):
    return CSSSelector(
        css,
        translator=_SVG_CSS_TRANSLATOR,
        namespaces=_SVG_CSS_NAMESPACES,
    )


def _normalize_attr_name(name):
    """Turn python keyword names (stroke_width) into SVG attribute names (stroke-width)."""
    return name.replace("_", "-")


def _el(tag, **attrs):
    el = etree.Element(f"{{{SVG_NS}}}{tag}", nsmap=NSMAP)
    for k, v in attrs.items():
        if v is None:
            continue
        el.set(_normalize_attr_name(k), str(v))
    return el


def _hex_components(color):
    if not isinstance(color, str):
        return None
    c = color.strip().lstrip("#")
    if len(c) == 3:
        c = "".join(ch * 2 for ch in c)
    if len(c) != 6:
        return None
    try:
        return tuple(int(c[i : i + 2], 16) for i in (0, 2, 4))
    except ValueError:
        return None


def _darker_hex(color, factor=0.7):
    comps = _hex_components(color)
    if not comps:
        return color
    darker = tuple(max(0, min(255, int(c * factor))) for c in comps)
    return "#%02x%02x%02x" % darker


def _fmt(value):
    """Compact number formatting for path data (``20`` rather than ``20.0``)."""
    value = float(value)
    if math.isfinite(value) and value == int(value):
        return str(int(value))
    return repr(value)


class Selection:
    _data_binding = {}

    def __init__(self, elements):
        self.elements = list(elements)

    def __len__(self):
        return len(self.elements)

    @classmethod
    def _get_data(cls, el):
        binding = cls._data_binding.get(id(el))
        if binding and binding[0] is el:
            return binding[1]
        return None

    @classmethod
    def _set_data(cls, el, value):
        cls._data_binding[id(el)] = (el, value)

    def _resolve(self, value, idx, el):
        if callable(value):
            return value(Selection._get_data(el), idx, el)
        return value

    def append(self, tag, **attrs):
        """Append one ``tag`` child to every selected element; the children inherit bound data."""
        kids = []
        for el in self.elements:
            child = _el(tag, **attrs)
            el.append(child)
            Selection._set_data(child, Selection._get_data(el))
            kids.append(child)
        return Selection(kids)

    def join(self, tag, data_iterable, **attrs):
        """Append one ``tag`` child per datum under the first element and bind each datum."""
        if not self.elements:
            return Selection([])
        parent = self.elements[0]
        kids = []
        for datum in data_iterable:
            child = _el(tag, **attrs)
            parent.append(child)
            Selection._set_data(child, datum)
            kids.append(child)
        return Selection(kids)

    def attr(self, name, value=None):
        """Set ``name`` on every element (returns self); with no value, read it from the first element."""
        attr_name = _normalize_attr_name(name)
        if value is None:
            return self.elements[0].get(attr_name) if self.elements else None
        for idx, el in enumerate(self.elements):
            val = self._resolve(value, idx, el)
            if val is None:
                continue
            el.set(attr_name, str(val))
        return self

    def attrs(self, **kvs):
        for k, v in kvs.items():
            self.attr(k, v)
        return self

    def style(self, **kvs):
        """Merge declarations into the inline ``style`` attribute."""
        for idx, el in enumerate(self.elements):
            current = {}
            for pair in (el.get("style") or "").split(";"):
                if pair.strip():
                    k, _, v = pair.partition(":")
                    current[k.strip()] = v.strip()
            for k, v in kvs.items():
                val = self._resolve(v, idx, el)
                if val is None:
                    continue
                current[_normalize_attr_name(k)] = str(val)
            el.set("style", ";".join(f"{k}:{v}" for k, v in current.items()))
        return self

    def text(self, s):
        for idx, el in enumerate(self.elements):
            val = self._resolve(s, idx, el)
            if val is None:
                continue
            el.text = str(val)
        return self

    def datum(self, value=None):
        if value is None:
            return Selection._get_data(self.elements[0]) if self.elements else None
        for idx, el in enumerate(self.elements):
            current = Selection._get_data(el)
            new_val = value(current, idx, el) if callable(value) else value
            Selection._set_data(el, new_val)
        return self

    def data(self, data_iterable=None):
        """Bind one datum per element (lengths must match), or list the bound data."""
        if data_iterable is None:
            return [Selection._get_data(el) for el in self.elements]
        data_list = list(data_iterable)
        if len(data_list) != len(self.elements):
            raise ValueError(
                "Selection.data requires len(data) == number of selected elements"
            )
        for el, datum in zip(self.elements, data_list):
            Selection._set_data(el, datum)
        return self

    def select(self, css):
        """First match under each element, carrying the parent's datum."""
        sel = _svg_css_selector(css)
        found = []
        for el in self.elements:
            matches = sel(el)
            if not matches:
                continue
            match = matches[0]
            Selection._set_data(match, Selection._get_data(el))
            found.append(match)
        return Selection(found)

    def select_all(self, css):
        sel = _svg_css_selector(css)
        found = []
        for el in self.elements:
            found.extend(sel(el))
        return Selection(found)

    def remove(self):
        for el in self.elements:
            parent = el.getparent()
            if parent is not None:
                parent.remove(el)
            Selection._data_binding.pop(id(el), None)
        return self


class MiniD3SVG:
    def __init__(self, width=800, height=600, viewBox=None, bg=None, preserve_aspect_ratio=None):
        self.root = _el("svg", width=width, height=height)
        if viewBox:
            self.root.set("viewBox", viewBox)
        if preserve_aspect_ratio:
            self.root.set("preserveAspectRatio", preserve_aspect_ratio)
        if bg:
            self.root.append(_el("rect", x="0", y="0", width="100%", height="100%", fill=bg))

    def select(self, css):
        found = _svg_css_selector(css)(self.root)
        return Selection(found[:1])

    def select_all(self, css):
        return Selection(_svg_css_selector(css)(self.root))

    def append(self, tag, **attrs):
        child = _el(tag, **attrs)
        self.root.append(child)
        return Selection([child])

    def add_style(self, css_text, **attrs):
        style_attrs = {"type": "text/css"}
        style_attrs.update({_normalize_attr_name(k): v for k, v in attrs.items()})
        style_el = _el("style", **style_attrs)
        style_el.text = css_text
        self.root.insert(0, style_el)
        return Selection([style_el])

    def to_string(self, pretty=True):
        return etree.tostring(self.root, pretty_print=pretty, encoding="unicode")

    def save(self, path, pretty=True):
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.to_string(pretty=pretty))


class ChartSVG:
    """Chart drawing area whose content lives in a 0..100 viewBox stretched over the pixel size.

    Data coordinates go through ``ChartScales`` (x onto 0..100 left to right,
    y onto 100..0 top to bottom), so gridlines, paths and markers line up
    with the nearest-point queries of ``SpatialIndex``.

    Example
    -------
    >>> chart = ChartSVG(x1=0, x2=10, y1=0, y2=50, width=400, height=200)
    >>> chart.grid(count=5, stroke="#ddd")
    >>> data = [{"x": i, "y": i * i / 2} for i in range(11)]
    >>> chart.line(data, stroke="#1f77b4", fill="none")
    >>> index = chart.quadtree(data)
    >>> chart.highlight(index, left=120, top=150, radius=30)
    >>> chart.save("chart.svg")
    """

    def __init__(self, x1=0, y1=0, x2=1, y2=1, width=800, height=600, bg=None, clip=False):
        if width <= 0 or height <= 0:
            raise ValueError("ChartSVG width and height must be positive")
        self._width = width
        self._height = height
        self.scales = get_scales(x1, y1, x2, y2)
        self.svg = MiniD3SVG(
            width=width,
            height=height,
            viewBox="0 0 100 100",
            bg=bg,
            preserve_aspect_ratio="none",
        )
        self.svg.root.set("overflow", "hidden" if clip else "visible")
        self._indexes = weakref.WeakSet()

        self._grid_layer = self.svg.append("g", **{"class": "grid"})
        self._mark_layer = self.svg.append("g", **{"class": "marks"})
        self._highlight_layer = self.svg.append("g", **{"class": "highlight"})

    @property
    def width(self):
        return self._width

    @property
    def height(self):
        return self._height

    # ------------------------------------------------------------------
    def set_domain(self, x1=0, y1=0, x2=1, y2=1):
        """Swap in new extents; indexes from ``quadtree()`` are re-projected on their next query."""
        self.scales = get_scales(x1, y1, x2, y2)
        for index in list(self._indexes):
            index.update(index.x, index.y, self.scales.x_scale, self.scales.y_scale)
        return self.scales

    def pointer(self, left, top):
        return self.scales.pointer(left, top, self._width, self._height)

    # ------------------------------------------------------------------
    def grid(self, vertical=False, count=None, ticks=None, **attrs):
        """Draw one line per tick: horizontal rules over y, or vertical rules over x."""
        s = self.scales
        if ticks is None:
            if vertical:
                ticks = generate_ticks(s.x1, s.x2, 5 if count is None else count)
            else:
                ticks = generate_ticks(s.y1, s.y2, 5 if count is None else count)
        attrs.setdefault("stroke", "#e0e0e0")
        attrs.setdefault("vector_effect", "non-scaling-stroke")
        css_class = "grid-x" if vertical else "grid-y"
        group = self._grid_layer.append("g", **{"class": css_class})
        lines = group.join("line", ticks, **attrs)
        if vertical:
            lines.attr("x1", lambda t, *_: s.x_scale(t)).attr("x2", lambda t, *_: s.x_scale(t))
            lines.attrs(y1=0, y2=100)
        else:
            lines.attr("y1", lambda t, *_: s.y_scale(t)).attr("y2", lambda t, *_: s.y_scale(t))
            lines.attrs(x1=0, x2=100)
        return lines

    def _project(self, data, x, y):
        _x = x or default_x
        _y = y or default_y
        s = self.scales
        return [(s.x_scale(_x(d, i)), s.y_scale(_y(d, i))) for i, d in enumerate(data)]

    def _path(self, d, css_class, attrs):
        attrs.setdefault("fill", "none")
        attrs.setdefault("stroke", "#4C78A8")
        attrs.setdefault("vector_effect", "non-scaling-stroke")
        return self._mark_layer.append("path", d=d, **{"class": css_class}, **attrs)

    def line(self, data, x=None, y=None, **attrs):
        points = self._project(data, x, y)
        d = ("M" + "L".join(f"{_fmt(px)},{_fmt(py)}" for px, py in points)) if points else ""
        return self._path(d, "line", attrs).datum(list(data))

    def polygon(self, data, x=None, y=None, **attrs):
        points = self._project(data, x, y)
        d = ("M" + "L".join(f"{_fmt(px)},{_fmt(py)}" for px, py in points) + "Z") if points else ""
        return self._path(d, "polygon", attrs).datum(list(data))

    def area(self, data, floor=0, x=None, y=None, **attrs):
        """Polygon between the series and a horizontal baseline at ``floor``."""
        data = list(data)
        _x = x or default_x
        _y = y or default_y
        outline = []
        if data:
            outline.append((_x(data[0], 0), floor))
            outline.extend((_x(d, i), _y(d, i)) for i, d in enumerate(data))
            outline.append((_x(data[-1], len(data) - 1), floor))
        attrs.setdefault("fill", "#4C78A8")
        attrs.setdefault("stroke", "none")
        sel = self.polygon(outline, x=lambda p, i: p[0], y=lambda p, i: p[1], **attrs)
        sel.attr("class", "area")
        return sel.datum(data)

    def scatter(self, data, x=None, y=None, **attrs):
        # zero-length arcs render as dots with round line caps
        points = self._project(data, x, y)
        d = " ".join(
            f"M{_fmt(px)} {_fmt(py)} A0 0 0 0 1 {_fmt(px + 0.0001)} {_fmt(py + 0.0001)}"
            for px, py in points
        )
        attrs.setdefault("stroke_linecap", "round")
        attrs.setdefault("stroke_width", 6)
        return self._path(d, "scatter", attrs).datum(list(data))

    def circle(self, x, y, **attrs):
        s = self.scales
        return self._mark_layer.append("circle", cx=s.x_scale(x), cy=s.y_scale(y), **attrs)

    def rect(self, x1=0, y1=0, x2=1, y2=1, **attrs):
        s = self.scales
        left, right = s.x_scale(x1), s.x_scale(x2)
        top, bottom = s.y_scale(y1), s.y_scale(y2)
        return self._mark_layer.append(
            "rect",
            x=min(left, right),
            y=min(top, bottom),
            width=abs(right - left),
            height=abs(bottom - top),
            **attrs,
        )

    def columns(self, data, width=1, x=None, y=None, **attrs):
        """One rect per datum spanning ``x +/- width / 2`` horizontally and ``0..y`` vertically."""
        _x = x or default_x
        _y = y or default_y
        attrs.setdefault("class", "column")
        boxes = []
        for i, d in enumerate(data):
            cx = _x(d, i)
            box = self.rect(cx - width / 2, 0, cx + width / 2, _y(d, i), **attrs)
            boxes.extend(box.datum(d).elements)
        return Selection(boxes)

    def bars(self, data, height=1, x=None, y=None, **attrs):
        """One rect per datum spanning ``0..x`` horizontally and ``y +/- height / 2`` vertically."""
        _x = x or default_x
        _y = y or default_y
        attrs.setdefault("class", "bar")
        boxes = []
        for i, d in enumerate(data):
            cy = _y(d, i)
            box = self.rect(0, cy - height / 2, _x(d, i), cy + height / 2, **attrs)
            boxes.extend(box.datum(d).elements)
        return Selection(boxes)

    # ------------------------------------------------------------------
    def quadtree(self, data, x=None, y=None):
        index = SpatialIndex(data, x, y, self.scales.x_scale, self.scales.y_scale)
        self._indexes.add(index)
        return index

    def nearest(self, index, left, top, radius=math.inf):
        return index.find(left, top, self._width, self._height, radius)

    def highlight(self, index, left, top, radius=math.inf, r=1.5, fill="#d62728", **attrs):
        """Mark the item nearest to pixel ``(left, top)`` and return it (None draws nothing)."""
        self._highlight_layer.select_all("circle").remove()
        point = index.find_point(left, top, self._width, self._height, radius)
        if point is None:
            return None
        attrs.setdefault("stroke", _darker_hex(fill))
        attrs.setdefault("vector_effect", "non-scaling-stroke")
        marker = self._highlight_layer.append(
            "circle", cx=point.x, cy=point.y, r=r, fill=fill, **attrs
        )
        marker.datum(point.datum)
        return point.datum

    # ------------------------------------------------------------------
    def add_style(self, css_text, **attrs):
        return self.svg.add_style(css_text, **attrs)

    def to_string(self, pretty=True):
        return self.svg.to_string(pretty=pretty)

    def save(self, path, pretty=True):
        self.svg.save(path, pretty=pretty)
