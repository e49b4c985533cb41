"""
Board Defence Event Types

Defines the events the simulation emits for presentation collaborators
(UI, audio, effects) and the in-process bus that delivers them.

Events are immutable pydantic models. Delivery is synchronous and
multi-subscriber: publish() returns after every handler has run, within
the tick that emitted the event.
"""

from collections import defaultdict
from typing import Callable, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict

from boarddefence.logging import emit_record, get_logger
from models.enums import DefenderType, EnemyType, GameState
from models.primitives import Cell

log = get_logger('events')

E = TypeVar('E', bound='GameEvent')
Handler = Callable[['GameEvent'], None]


class GameEvent(BaseModel):
    """Base class for all simulation events."""

    model_config = ConfigDict(frozen=True)  # Events are immutable once created

    @property
    def name(self) -> str:
        return type(self).__name__


# -----------------------------------------------------------------------------
# Game state events
# -----------------------------------------------------------------------------

class GameStateChanged(GameEvent):
    new_state: GameState
    previous_state: GameState


class GameStarted(GameEvent):
    pass


class GamePaused(GameEvent):
    pass


class GameResumed(GameEvent):
    pass


class Victory(GameEvent):
    pass


class GameOver(GameEvent):
    pass


# -----------------------------------------------------------------------------
# Level and wave events
# -----------------------------------------------------------------------------

class LevelStarted(GameEvent):
    level: int


class LevelCompleted(GameEvent):
    level: int


class AllEnemiesDefeated(GameEvent):
    level: int


class WaveStarted(GameEvent):
    level: int


class WaveCompleted(GameEvent):
    level: int


# -----------------------------------------------------------------------------
# Board and defender events
# -----------------------------------------------------------------------------

class DefenderPlaced(GameEvent):
    cell: Cell
    defender_type: DefenderType
    defender_id: int


class DefenderRemoved(GameEvent):
    cell: Cell
    defender_id: int


class AttackPerformed(GameEvent):
    """A defender at `cell` fired at the enemy `target_id`."""
    cell: Cell
    damage: int
    defender_id: int
    target_id: int
    target_cell: Cell


class BoardCleared(GameEvent):
    pass


# -----------------------------------------------------------------------------
# Enemy events
# -----------------------------------------------------------------------------

class EnemySpawned(GameEvent):
    cell: Cell
    enemy_type: EnemyType
    enemy_id: int


class EnemyDamaged(GameEvent):
    cell: Cell
    amount: int
    enemy_id: int
    remaining_health: int


class EnemyDied(GameEvent):
    cell: Cell
    enemy_id: int


class EnemyReachedBase(GameEvent):
    enemy_id: int
    column: int


class EventBus:
    """
    Typed publish/subscribe event queue owned by a simulation context.

    Handlers subscribe to one concrete event class, or to every event via
    subscribe_all(). Handlers run in subscription order. A handler added or
    removed during a publish takes effect from the next publish.

    Usage:
        bus = EventBus()
        bus.subscribe(EnemyDied, lambda e: print(e.cell))
        bus.publish(EnemyDied(cell=Cell(column=0, row=3), enemy_id=1))
    """

    def __init__(self):
        self._handlers: Dict[Type[GameEvent], List[Handler]] = defaultdict(list)
        self._wildcard: List[Handler] = []
        self._published = 0

    @property
    def published_count(self) -> int:
        """Number of events published so far."""
        return self._published

    def subscribe(self, event_type: Type[E], handler: Callable[[E], None]) -> Callable[[], None]:
        """Register a handler for one event class.

        Returns:
            A callable that removes the subscription
        """
        self._handlers[event_type].append(handler)
        return lambda: self.unsubscribe(event_type, handler)

    def subscribe_all(self, handler: Handler) -> Callable[[], None]:
        """Register a handler that receives every event."""
        self._wildcard.append(handler)
        return lambda: self._remove(self._wildcard, handler)

    def unsubscribe(self, event_type: Type[GameEvent], handler: Handler) -> None:
        """Remove a handler; unknown handlers are ignored."""
        self._remove(self._handlers.get(event_type, []), handler)

    @staticmethod
    def _remove(handlers: List[Handler], handler: Handler) -> None:
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, event: GameEvent) -> None:
        """Deliver an event to its subscribers synchronously."""
        self._published += 1
        payload = event.model_dump(mode='json')
        log.trace("%s %s", event.name, payload)
        emit_record('events', {'type': event.name, **payload})

        for handler in list(self._handlers.get(type(event), ())):
            handler(event)
        for handler in list(self._wildcard):
            handler(event)

    def clear(self, event_type: Optional[Type[GameEvent]] = None) -> None:
        """Drop subscriptions for one event class, or all of them."""
        if event_type is None:
            self._handlers.clear()
            self._wildcard.clear()
        else:
            self._handlers.pop(event_type, None)
