from daytrip.geo import distance_km, eta_minutes
from daytrip.planners.route_optimizer import (
    compare_routes,
    evaluate_route,
    optimize_route,
    sum_route_legs,
)
from daytrip.schemas import Coordinate, Location, TravelMode, Venue

ARCH = Venue(name="Gateway Arch", lat=38.627, lng=-90.199, area="Downtown")
CITY_MUSEUM = Venue(name="City Museum", lat=38.630, lng=-90.195)
UNION_STATION = Venue(name="Union Station", lat=38.620, lng=-90.210)
HOTEL = Location(lat=38.6305, lng=-90.1952)


def _coord(venue: Venue) -> Coordinate:
    return Coordinate(lat=venue.lat, lng=venue.lng)


def _names(venues):
    return [v.name for v in venues]


def test_nearer_stops_are_visited_before_the_farthest():
    result = optimize_route([ARCH, CITY_MUSEUM, UNION_STATION], mode=TravelMode.WALK)

    assert _names(result.optimized_order) == ["Gateway Arch", "City Museum", "Union Station"]
    expected_km = distance_km(_coord(ARCH), _coord(CITY_MUSEUM)) + distance_km(
        _coord(CITY_MUSEUM), _coord(UNION_STATION)
    )
    assert result.total_distance_km == round(expected_km, 2)


def test_optimized_totals_follow_the_chosen_order_not_the_input_order():
    result = optimize_route([ARCH, UNION_STATION, CITY_MUSEUM], mode=TravelMode.WALK)

    assert _names(result.optimized_order) == ["Gateway Arch", "City Museum", "Union Station"]
    assert _names(result.original_order) == ["Gateway Arch", "Union Station", "City Museum"]

    legs = [
        distance_km(_coord(ARCH), _coord(CITY_MUSEUM)),
        distance_km(_coord(CITY_MUSEUM), _coord(UNION_STATION)),
    ]
    assert result.total_distance_km == round(sum(legs), 2)
    assert result.total_time_minutes == sum(eta_minutes(TravelMode.WALK, km) for km in legs)

    input_order_km = distance_km(_coord(ARCH), _coord(UNION_STATION)) + distance_km(
        _coord(UNION_STATION), _coord(CITY_MUSEUM)
    )
    assert result.total_distance_km < round(input_order_km, 2)


def test_start_point_picks_the_nearest_stop_first():
    result = optimize_route([UNION_STATION, ARCH, CITY_MUSEUM], start_point=HOTEL)

    assert _names(result.optimized_order) == ["City Museum", "Gateway Arch", "Union Station"]
    first_leg = distance_km(Coordinate(lat=HOTEL.lat, lng=HOTEL.lng), _coord(CITY_MUSEUM))
    assert result.total_distance_km > round(first_leg, 2)


def test_small_inputs_are_returned_unchanged_with_zero_totals():
    for venues in ([], [ARCH], [UNION_STATION, ARCH]):
        result = optimize_route(venues, start_point=HOTEL)
        assert result.optimized_order == result.original_order == venues
        assert result.total_time_minutes == 0
        assert result.total_distance_km == 0


def test_two_located_stops_plus_unlocated_is_still_a_no_op():
    venues = [UNION_STATION, Venue(name="Mystery Bar"), ARCH]

    result = optimize_route(venues)

    assert result.optimized_order == venues
    assert result.total_time_minutes == 0


def test_unlocated_stops_are_excluded_without_error():
    ghost = Venue(name="Pop-up Market", lat=None, lng=None)
    half = Venue(name="Food Truck", lat=38.62)
    venues = [ARCH, ghost, UNION_STATION, half, CITY_MUSEUM]

    result = optimize_route(venues)

    assert sorted(_names(result.optimized_order)) == sorted(
        ["Gateway Arch", "Union Station", "City Museum"]
    )
    assert result.original_order == venues


def test_optimized_order_is_a_permutation_of_located_stops():
    twin = Venue(name="Gateway Arch", lat=38.6245, lng=-90.186)
    venues = [
        ARCH,
        UNION_STATION,
        twin,
        Venue(name="Soulard Market", lat=38.6106, lng=-90.2064),
        CITY_MUSEUM,
        Venue(name="Busch Stadium", lat=38.6226, lng=-90.1928),
    ]

    result = optimize_route(venues, mode="drive")

    assert len(result.optimized_order) == len(venues)
    assert sorted(map(id, result.optimized_order)) == sorted(map(id, venues))
    assert result.optimized_order[0] is ARCH


def test_optimizer_is_deterministic_across_clones():
    venues = [
        ARCH,
        Venue(name="Soulard Market", lat=38.6106, lng=-90.2064),
        UNION_STATION,
        CITY_MUSEUM,
        Venue(name="Busch Stadium", lat=38.6226, lng=-90.1928),
    ]
    clones = [Venue.model_validate(v.model_dump(by_alias=True)) for v in venues]

    first = optimize_route(venues, start_point=HOTEL, mode=TravelMode.DRIVE)
    second = optimize_route(clones, start_point=HOTEL, mode=TravelMode.DRIVE)

    assert _names(first.optimized_order) == _names(second.optimized_order)
    assert first.total_time_minutes == second.total_time_minutes
    assert first.total_distance_km == second.total_distance_km


def test_equidistant_stops_keep_input_order():
    center = Venue(name="Hub", lat=0.0, lng=0.0)
    east = Venue(name="East", lat=0.0, lng=0.01)
    west = Venue(name="West", lat=0.0, lng=-0.01)

    result = optimize_route([center, east, west])

    assert _names(result.optimized_order) == ["Hub", "East", "West"]


def test_evaluator_reproduces_optimizer_totals():
    venues = [
        UNION_STATION,
        Venue(name="Soulard Market", lat=38.6106, lng=-90.2064),
        ARCH,
        Venue(name="Busch Stadium", lat=38.6226, lng=-90.1928),
        CITY_MUSEUM,
    ]
    for start in (None, HOTEL):
        for mode in (TravelMode.WALK, TravelMode.DRIVE):
            result = optimize_route(venues, start_point=start, mode=mode)
            totals = evaluate_route(result.optimized_order, start_point=start, mode=mode)
            assert totals.total_time_minutes == result.total_time_minutes
            assert totals.total_distance_km == result.total_distance_km


def test_evaluator_includes_start_leg_and_skips_unlocated():
    venues = [ARCH, Venue(name="Somewhere"), CITY_MUSEUM]

    without_start = evaluate_route(venues)
    with_start = evaluate_route(venues, start_point=UNION_STATION)

    assert without_start.total_distance_km == round(distance_km(_coord(ARCH), _coord(CITY_MUSEUM)), 2)
    assert with_start.total_distance_km > without_start.total_distance_km
    assert evaluate_route([]).total_time_minutes == 0


def test_sum_route_legs_handles_repeated_points():
    here = _coord(ARCH)
    totals = sum_route_legs([here, here, here], TravelMode.WALK)
    assert totals.total_time_minutes == 0
    assert totals.total_distance_km == 0


def test_compare_reports_savings_against_the_input_order():
    comparison = compare_routes([ARCH, UNION_STATION, CITY_MUSEUM], mode=TravelMode.WALK)

    assert comparison.improved
    assert comparison.minutes_saved == (
        comparison.original.total_time_minutes - comparison.optimized.total_time_minutes
    )
    assert comparison.minutes_saved > 0
    assert comparison.km_saved > 0


def test_compare_on_an_already_good_order_saves_nothing():
    comparison = compare_routes([ARCH, CITY_MUSEUM, UNION_STATION])

    assert not comparison.improved
    assert comparison.minutes_saved == 0
    assert comparison.km_saved == 0
    assert comparison.original == comparison.optimized


def test_compare_on_a_no_op_route_uses_real_totals():
    comparison = compare_routes([ARCH, CITY_MUSEUM], start_point=HOTEL)

    assert comparison.optimized_order == [ARCH, CITY_MUSEUM]
    assert comparison.original.total_distance_km > 0
    assert comparison.original == comparison.optimized
    assert comparison.minutes_saved == 0
