"""Highlight the series point nearest to a pointer position.

Pointer coordinates are pixels relative to the chart's top-left corner, as a
mouse-move handler would report them.
"""

from d3_svg_chart import ChartSVG


SERIES = {
    "north": [(1950, 61.2), (1970, 67.5), (1990, 71.9), (2010, 76.8), (2020, 78.1)],
    "south": [(1950, 42.0), (1970, 51.3), (1990, 60.4), (2010, 68.9), (2020, 72.6)],
}


def main():
    points = [
        {"x": year, "y": value, "series": name}
        for name, rows in SERIES.items()
        for year, value in rows
    ]
    xs = [p["x"] for p in points]
    ys = [p["y"] for p in points]

    chart = ChartSVG(
        x1=min(xs), x2=max(xs), y1=min(ys), y2=max(ys), width=600, height=300, bg="#fafafa"
    )
    chart.grid(count=5)
    chart.grid(vertical=True, count=5)
    for name, rows in SERIES.items():
        chart.line(rows, stroke="#999")

    index = chart.quadtree(points)
    for left, top in [(10, 20), (300, 150), (590, 40)]:
        pointer = chart.pointer(left, top)
        closest = chart.highlight(index, left, top, radius=60)
        print(f"pointer ({pointer.x:.1f}, {pointer.y:.1f}) -> {closest}")

    chart.save("nearest_point.svg")


if __name__ == "__main__":
    main()
