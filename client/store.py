"""In-memory entity arena backing the dashboard views."""

from typing import Generic, Iterable, Iterator, Optional, TypeVar

from pydantic import BaseModel

from core.ordering import move_index

E = TypeVar("E", bound=BaseModel)


class EntityStore(Generic[E]):
    """
    Ordered ``id -> entity`` map.

    A fetch replaces the whole collection; mutations address entities by id.
    Entities are immutable pydantic models, so a snapshot is a shallow copy.
    """

    def __init__(self, entities: Iterable[E] = ()):
        self._items: dict[str, E] = {}
        self.replace_all(entities)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._items

    def __iter__(self) -> Iterator[E]:
        return iter(list(self._items.values()))

    def replace_all(self, entities: Iterable[E]) -> None:
        self._items = {entity.id: entity for entity in entities}

    def get(self, entity_id: str) -> Optional[E]:
        return self._items.get(entity_id)

    def put(self, entity: E) -> None:
        """Insert or replace; replacing keeps the entity's position."""
        self._items[entity.id] = entity

    def remove(self, entity_id: str) -> Optional[E]:
        return self._items.pop(entity_id, None)

    def values(self) -> list[E]:
        return list(self._items.values())

    def ids(self) -> list[str]:
        return list(self._items)

    def snapshot(self) -> dict[str, E]:
        return dict(self._items)

    def restore(self, snapshot: dict[str, E], entity_id: Optional[str] = None) -> None:
        """
        Roll back to ``snapshot``.

        With ``entity_id`` only that entity is restored, so unrelated changes
        made since the snapshot survive.
        """
        if entity_id is None:
            self._items = dict(snapshot)
            return
        previous = snapshot.get(entity_id)
        if previous is None:
            self._items.pop(entity_id, None)
        else:
            self._items[entity_id] = previous

    def index_of(self, predicate) -> int:
        """Position of the first entity matching ``predicate``, or -1."""
        for index, entity in enumerate(self._items.values()):
            if predicate(entity):
                return index
        return -1

    def move(self, from_index: int, to_index: int) -> None:
        """Relocate one entity within the arena's iteration order."""
        entities = move_index(list(self._items.values()), from_index, to_index)
        self._items = {item.id: item for item in entities}
