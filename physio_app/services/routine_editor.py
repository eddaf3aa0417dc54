from typing import Iterable, List, Optional, Protocol


class ExerciseNotFound(LookupError):
    """No exercise in the catalog carries the requested title."""

    def __init__(self, title: str):
        super().__init__(f"Exercise not found: {title}")
        self.title = title


class _CatalogEntry(Protocol):
    id: str
    title: str


def find_exercise_by_title(catalog: Iterable[_CatalogEntry], title: str) -> Optional[_CatalogEntry]:
    """First catalog entry whose title matches exactly."""
    return next((e for e in catalog if e.title == title), None)


class RoutineEditor:
    """Local editing session over a patient's routine.

    `saved` mirrors the last value read from (or written to) the database,
    `working` is the list being edited. Nothing here touches the database:
    callers persist the list returned by save() and feed fresh server
    values back through reload().
    """

    def __init__(self, saved: Iterable[str] = ()):
        self.saved: List[str] = list(saved)
        self.working: List[str] = list(self.saved)
        self.editing = False

    def begin(self) -> List[str]:
        self.working = list(self.saved)
        self.editing = True
        return self.working

    def toggle(self) -> bool:
        if self.editing:
            self.cancel()
        else:
            self.begin()
        return self.editing

    def add(self, title: str, catalog: Iterable[_CatalogEntry]) -> str:
        """Append the id of the exercise titled `title`; returns that id."""
        exercise = find_exercise_by_title(catalog, title)
        if exercise is None:
            raise ExerciseNotFound(title)
        self.working = [*self.working, str(exercise.id)]
        return str(exercise.id)

    def remove(self, index: int) -> str:
        """Drop the entry at `index`, keeping the others in order."""
        if index < 0 or index >= len(self.working):
            raise IndexError(f"Routine index out of range: {index}")
        removed = self.working[index]
        self.working = [eid for i, eid in enumerate(self.working) if i != index]
        return removed

    def save(self) -> List[str]:
        self.saved = list(self.working)
        self.editing = False
        return list(self.saved)

    def cancel(self) -> List[str]:
        self.working = list(self.saved)
        self.editing = False
        return self.working

    def reload(self, saved: Iterable[str]) -> None:
        """Take a new server value; an idle editor follows it."""
        self.saved = list(saved)
        if not self.editing:
            self.working = list(self.saved)
