from typing import Generic, List, Optional, Sequence, TypeVar

from physio_app.constants import CarouselMove

T = TypeVar("T")


class ExerciseCarousel(Generic[T]):
    """Wrap-around cursor over a fixed list of exercises.

    The index always stays in [0, len) for a non-empty list. With an empty
    list every move leaves it at 0 and there is no current exercise.
    """

    def __init__(self, exercises: Sequence[T], index: int = 0):
        self._exercises: List[T] = list(exercises)
        self.index = self._wrap(index)

    def __len__(self) -> int:
        return len(self._exercises)

    def _wrap(self, index: int) -> int:
        if not self._exercises:
            return 0
        return index % len(self._exercises)

    @property
    def current(self) -> Optional[T]:
        if not self._exercises:
            return None
        return self._exercises[self.index]

    def next(self) -> int:
        self.index = self._wrap(self.index + 1)
        return self.index

    def previous(self) -> int:
        self.index = self._wrap(self.index - 1)
        return self.index

    def go_to(self, index: int) -> int:
        self.index = self._wrap(index)
        return self.index

    def move(self, direction: CarouselMove | None) -> int:
        if direction == CarouselMove.NEXT:
            return self.next()
        if direction == CarouselMove.PREV:
            return self.previous()
        return self.index

    def dots(self) -> List[tuple[int, bool]]:
        return [(i, i == self.index) for i in range(len(self._exercises))]
