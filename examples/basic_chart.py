"""Minimal line chart with gridlines using ChartSVG."""

import math

from d3_svg_chart import ChartSVG


def main():
    data = [{"x": i / 4, "y": math.sin(i / 4)} for i in range(41)]

    chart = ChartSVG(x1=0, x2=10, y1=-1.2, y2=1.2, width=480, height=240, bg="#fff")
    chart.grid(count=5, stroke="#eee")
    chart.grid(vertical=True, count=10, stroke="#eee")
    chart.area(data, floor=-1.2, fill="#1f77b4", opacity=0.15)
    chart.line(data, stroke="#1f77b4", stroke_width=2)
    chart.scatter(data, stroke="#1f77b4")

    chart.save("basic_chart.svg")


if __name__ == "__main__":
    main()
