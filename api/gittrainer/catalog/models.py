"""Static training catalog entities.

The catalog is defined in code and shipped with the learner client. Module and
exercise ids are the opaque strings the progress API stores.
"""

from dataclasses import dataclass, field
from enum import Enum


class Difficulty(str, Enum):
    """Module difficulty levels."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


@dataclass(frozen=True)
class Step:
    """One command of a step-by-step exercise."""

    instruction: str
    solution: str


@dataclass(frozen=True)
class Exercise:
    """A task within a module, single-answer or step-by-step."""

    id: str
    question: str
    description: str
    solution: str
    hints: tuple[str, ...] = ()
    steps: tuple[Step, ...] = ()

    @property
    def is_step_by_step(self) -> bool:
        return bool(self.steps)

    @property
    def step_count(self) -> int:
        return len(self.steps)


@dataclass(frozen=True)
class Module:
    """Catalog-defined unit of content and exercises."""

    id: str
    title: str
    description: str
    content: str
    difficulty: Difficulty
    estimated_time: str
    exercises: tuple[Exercise, ...] = ()
    prerequisites: tuple[str, ...] = ()

    @property
    def exercise_ids(self) -> list[str]:
        return [e.id for e in self.exercises]


@dataclass
class Catalog:
    """Ordered collection of training modules."""

    modules: list[Module] = field(default_factory=list)

    def __post_init__(self) -> None:
        self._by_id = {m.id: m for m in self.modules}

    def __iter__(self):
        return iter(self.modules)

    def __len__(self) -> int:
        return len(self.modules)

    def get(self, module_id: str) -> Module | None:
        return self._by_id.get(module_id)

    def index_of(self, module_id: str) -> int:
        for index, module in enumerate(self.modules):
            if module.id == module_id:
                return index
        return -1

    def next_module(self, module_id: str) -> Module | None:
        """Module to open after ``module_id`` is completed.

        The first other module listing it as a prerequisite wins, otherwise the
        following module in catalog order. ``None`` means back to the module
        list.
        """
        for module in self.modules:
            if module.id != module_id and module_id in module.prerequisites:
                return module

        index = self.index_of(module_id)
        if index < 0 or index + 1 >= len(self.modules):
            return None
        return self.modules[index + 1]

    def prerequisites_met(self, module_id: str, completed_ids: set[str]) -> bool:
        module = self.get(module_id)
        if module is None:
            return False
        return all(p in completed_ids for p in module.prerequisites)
