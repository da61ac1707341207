# Adapted from https://github.com/d3/d3-array/blob/main/src/ticks.js
# ISC License https://github.com/d3/d3-array/blob/main/LICENSE
import math

_E10 = math.sqrt(50)
_E5 = math.sqrt(10)
_E2 = math.sqrt(2)


def tick_increment(start, stop, count):
    """Return the nice step between ticks covering ``[start, stop]``.

    Steps of one or more are returned as is (``1``, ``2``, ``5`` times a power
    of ten). Sub-unit steps are encoded as a negative reciprocal: ``-5`` means a
    step of ``0.2``. Zero counts and empty spans give a non-finite result.
    """
    count = max(0, count)
    span = float(stop) - float(start)
    if count == 0:
        raw = math.nan if span == 0 or math.isnan(span) else math.copysign(math.inf, span)
    else:
        raw = span / count
    if math.isinf(raw):
        return raw
    if not raw > 0:
        return math.nan

    power = math.floor(math.log10(raw))
    error = raw / math.pow(10, power)
    if error >= _E10:
        factor = 10
    elif error >= _E5:
        factor = 5
    elif error >= _E2:
        factor = 2
    else:
        factor = 1

    if power >= 0:
        return factor * math.pow(10, power)
    return -math.pow(10, -power) / factor


def generate_ticks(start, stop, count=5):
    """Nicely rounded, evenly spaced values spanning ``[start, stop]``.

    The result follows the direction of the input, so ``generate_ticks(10, 0)``
    is descending. An empty list is returned when no sensible step exists.
    """
    if start == stop and count > 0:
        return [start]

    reverse = stop < start
    if reverse:
        start, stop = stop, start

    step = tick_increment(start, stop, count)
    if step == 0 or not math.isfinite(step):
        return []

    if step > 0:
        lo = math.ceil(start / step)
        hi = math.floor(stop / step)
        ticks = [(lo + i) * step for i in range(max(0, hi - lo + 1))]
    else:
        lo = math.floor(start * step)
        hi = math.ceil(stop * step)
        ticks = [(lo - i) / step for i in range(max(0, lo - hi + 1))]

    if reverse:
        ticks.reverse()
    return ticks
