import pytest

from physio_app.constants import CarouselMove
from physio_app.services.carousel import ExerciseCarousel


def test_next_wraps_to_first():
    carousel = ExerciseCarousel(["a", "b", "c"], index=2)
    assert carousel.next() == 0
    assert carousel.current == "a"


def test_previous_wraps_to_last():
    carousel = ExerciseCarousel(["a", "b", "c"])
    assert carousel.previous() == 2
    assert carousel.current == "c"


def test_full_cycle_returns_to_start():
    carousel = ExerciseCarousel(["a", "b", "c", "d"], index=1)
    for _ in range(4):
        carousel.next()
    assert carousel.index == 1


@pytest.mark.parametrize("target,expected", [(0, 0), (2, 2), (3, 0), (7, 1), (-1, 2)])
def test_go_to_stays_in_range(target, expected):
    carousel = ExerciseCarousel(["a", "b", "c"])
    assert carousel.go_to(target) == expected
    assert 0 <= carousel.index < len(carousel)


def test_initial_index_is_wrapped():
    assert ExerciseCarousel(["a", "b"], index=5).index == 1


def test_empty_list_has_no_current():
    carousel = ExerciseCarousel([])
    assert carousel.current is None
    assert carousel.next() == 0
    assert carousel.previous() == 0
    assert carousel.go_to(3) == 0
    assert carousel.dots() == []


def test_move_dispatch():
    carousel = ExerciseCarousel(["a", "b", "c"])
    assert carousel.move(CarouselMove.NEXT) == 1
    assert carousel.move(CarouselMove.PREV) == 0
    assert carousel.move(None) == 0


def test_dots_flag_active_slide():
    carousel = ExerciseCarousel(["a", "b", "c"], index=1)
    assert carousel.dots() == [(0, False), (1, True), (2, False)]
