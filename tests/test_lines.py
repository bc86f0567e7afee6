import pytest

from cheapruler.core.geometry import Point, as_line
from cheapruler.core.ruler import CheapRuler
from cheapruler.core.units import DistanceUnit

# A straight line along the equator with one-degree segments.
EQUATOR_LINE = as_line([(0.0, 0.0), (1.0, 0.0), (2.0, 0.0), (3.0, 0.0)])

# Reference case for the closest point on a line.
POL_LINE = as_line([(-77.031669, 38.878605), (-77.029609, 38.881946)])
POL_POINT = Point(-77.034076, 38.882017)


@pytest.fixture
def ruler_km() -> CheapRuler:
    return CheapRuler(32.8351, DistanceUnit.KILOMETERS)


@pytest.fixture
def equator_ruler() -> CheapRuler:
    return CheapRuler(0.0, DistanceUnit.KILOMETERS)


def flat(points):
    return [c for p in points for c in (p.x, p.y)]


def test_line_distance_of_degenerate_lines(ruler_km):
    assert ruler_km.line_distance([]) == 0.0
    assert ruler_km.line_distance([Point(1.0, 2.0)]) == 0.0


def test_line_distance_sums_segments(equator_ruler):
    assert equator_ruler.line_distance(EQUATOR_LINE) == pytest.approx(3 * equator_ruler.kx)


def test_line_distance_in_meters():
    ruler = CheapRuler(50.458, DistanceUnit.METERS)
    line = as_line([(-67.031, 50.458), (-67.031, 50.534), (-66.929, 50.534), (-66.929, 50.458)])
    km = ruler.clone_with_unit(DistanceUnit.KILOMETERS).line_distance(line)
    assert ruler.line_distance(line) == pytest.approx(km * 1000.0, rel=1e-12)


def test_along_interpolates_inside_a_segment(equator_ruler):
    d = equator_ruler.distance(EQUATOR_LINE[0], EQUATOR_LINE[1])
    p = equator_ruler.along(EQUATOR_LINE, 1.5 * d)
    assert flat([p]) == pytest.approx([1.5, 0.0])


def test_along_empty_line_is_none(ruler_km):
    assert ruler_km.along([], 0.0) is None
    assert ruler_km.along([], 10.0) is None


def test_along_with_dist_at_or_below_zero_returns_first_point(ruler_km):
    assert ruler_km.along(POL_LINE, -5.0) == POL_LINE[0]
    assert ruler_km.along(POL_LINE, 0.0) == POL_LINE[0]


def test_along_with_dist_greater_than_length_returns_last_point(ruler_km):
    assert ruler_km.along(POL_LINE, 1000.0) == POL_LINE[-1]
    assert ruler_km.along(POL_LINE, ruler_km.line_distance(POL_LINE)) == POL_LINE[-1]
    assert ruler_km.along([Point(1.0, 1.0)], 5.0) == Point(1.0, 1.0)


def test_along_skips_zero_length_segments(equator_ruler):
    line = as_line([(0.0, 0.0), (0.0, 0.0), (1.0, 0.0)])
    d = equator_ruler.distance(line[1], line[2])
    p = equator_ruler.along(line, 0.5 * d)
    assert flat([p]) == pytest.approx([0.5, 0.0])


def test_point_on_line(ruler_km):
    result = ruler_km.point_on_line(POL_LINE, POL_POINT)

    assert result.point.x == pytest.approx(-77.03052689033436, rel=1e-6)
    assert result.point.y == pytest.approx(38.880457324462576, rel=1e-6)
    assert result.index == 0
    assert result.t == pytest.approx(0.5544221677861756, rel=1e-6)


def test_point_on_line_clamps_t(ruler_km):
    assert ruler_km.point_on_line(POL_LINE, Point(-80.0, 38.0)).t == 0.0
    assert ruler_km.point_on_line(POL_LINE, Point(-75.0, 38.0)).t == 1.0


def test_point_on_line_without_segments_is_none(ruler_km):
    assert ruler_km.point_on_line([], POL_POINT) is None
    assert ruler_km.point_on_line([POL_LINE[0]], POL_POINT) is None


def test_point_on_line_zero_length_segment(ruler_km):
    line = as_line([(1.0, 1.0), (1.0, 1.0)])
    result = ruler_km.point_on_line(line, Point(2.0, 2.0))

    assert result.point == Point(1.0, 1.0)
    assert result.index == 0
    assert result.t == 0.0


def test_point_on_line_index_and_t_stay_in_range(equator_ruler):
    queries = [Point(-1.0, 0.5), Point(0.3, -0.2), Point(1.5, 0.1), Point(2.9, 3.0), Point(10.0, 0.0)]
    for q in queries:
        result = equator_ruler.point_on_line(EQUATOR_LINE, q)
        assert 0.0 <= result.t <= 1.0
        assert 0 <= result.index <= len(EQUATOR_LINE) - 2

    assert equator_ruler.point_on_line(EQUATOR_LINE, Point(10.0, 0.0)).index == 2
    assert equator_ruler.point_on_line(EQUATOR_LINE, Point(1.5, 0.1)).index == 1


def test_point_to_segment_distance(ruler_km):
    distance = ruler_km.point_to_segment_distance(POL_POINT, POL_LINE[0], POL_LINE[1])
    assert distance == pytest.approx(0.37461484020420416, rel=1e-6)


def test_point_to_segment_distance_clamps_to_endpoints(equator_ruler):
    start, end = Point(0.0, 0.0), Point(1.0, 0.0)
    beyond = Point(2.0, 0.0)
    assert equator_ruler.point_to_segment_distance(beyond, start, end) == pytest.approx(
        equator_ruler.distance(beyond, end)
    )
    assert equator_ruler.point_to_segment_distance(beyond, start, start) == pytest.approx(
        equator_ruler.distance(beyond, start)
    )


def test_line_slice(equator_ruler):
    part = equator_ruler.line_slice(Point(0.5, 0.1), Point(2.5, -0.1), EQUATOR_LINE)
    assert flat(part) == pytest.approx([0.5, 0.0, 1.0, 0.0, 2.0, 0.0, 2.5, 0.0])


def test_line_slice_reverse_follows_line_direction(equator_ruler):
    forward = equator_ruler.line_slice(Point(0.5, 0.1), Point(2.5, -0.1), EQUATOR_LINE)
    backward = equator_ruler.line_slice(Point(2.5, -0.1), Point(0.5, 0.1), EQUATOR_LINE)
    assert flat(backward) == pytest.approx(flat(forward))


def test_line_slice_within_one_segment(equator_ruler):
    part = equator_ruler.line_slice(Point(0.25, 0.1), Point(0.75, -0.1), EQUATOR_LINE)
    assert flat(part) == pytest.approx([0.25, 0.0, 0.75, 0.0])


def test_line_slice_does_not_repeat_a_vertex_anchor(equator_ruler):
    part = equator_ruler.line_slice(Point(1.0, 0.1), Point(2.0, 0.0), EQUATOR_LINE)
    assert flat(part) == pytest.approx([1.0, 0.0, 2.0, 0.0])


def test_line_slice_length_matches_anchor_distances(ruler_km):
    line = as_line([(-67.031, 50.458), (-67.031, 50.534), (-66.929, 50.534), (-66.929, 50.458)])
    dist = ruler_km.line_distance(line)
    start = ruler_km.along(line, dist * 0.3)
    stop = ruler_km.along(line, dist * 0.7)

    part = ruler_km.line_slice(start, stop, line)

    assert ruler_km.line_distance(part) == pytest.approx(dist * 0.4, rel=1e-6)


def test_line_slice_of_degenerate_lines(ruler_km):
    assert ruler_km.line_slice(Point(0.0, 0.0), Point(1.0, 1.0), []) == []
    assert ruler_km.line_slice(Point(0.0, 0.0), Point(1.0, 1.0), [Point(0.5, 0.5)]) == []


def test_line_slice_along(equator_ruler):
    d = equator_ruler.distance(EQUATOR_LINE[0], EQUATOR_LINE[1])
    part = equator_ruler.line_slice_along(0.5 * d, 1.5 * d, EQUATOR_LINE)
    assert flat(part) == pytest.approx([0.5, 0.0, 1.0, 0.0, 1.5, 0.0])


def test_line_slice_along_past_the_end_keeps_the_tail(equator_ruler):
    d = equator_ruler.distance(EQUATOR_LINE[0], EQUATOR_LINE[1])
    part = equator_ruler.line_slice_along(2.5 * d, 10 * d, EQUATOR_LINE)
    assert flat(part) == pytest.approx([2.5, 0.0, 3.0, 0.0])


def test_line_slice_along_matches_line_slice(ruler_km):
    line = as_line([(-67.031, 50.458), (-67.031, 50.534), (-66.929, 50.534), (-66.929, 50.458)])
    dist = ruler_km.line_distance(line)

    by_distance = ruler_km.line_slice_along(dist * 0.3, dist * 0.7, line)
    by_points = ruler_km.line_slice(ruler_km.along(line, dist * 0.3), ruler_km.along(line, dist * 0.7), line)

    assert ruler_km.line_distance(by_distance) == pytest.approx(ruler_km.line_distance(by_points), rel=1e-6)


def test_line_slice_along_empty(ruler_km):
    assert ruler_km.line_slice_along(0.0, 0.0, []) == []
    assert ruler_km.line_distance(ruler_km.line_slice_along(0.0, 0.0, [])) == 0.0


def test_line_slice_along_zero_length_first_segment(equator_ruler):
    line = as_line([(0.0, 0.0), (0.0, 0.0), (1.0, 0.0)])
    d = equator_ruler.distance(line[1], line[2])

    part = equator_ruler.line_slice_along(-1.0, 0.5 * d, line)

    assert part[0] == Point(0.0, 0.0)
    assert flat(part[-1:]) == pytest.approx([0.5, 0.0])
