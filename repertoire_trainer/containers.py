# repertoire_trainer/containers.py
"""
Defines the Dependency Injection (DI) container for the application.

This module uses the `punq` library to wire the opening store, the move
oracle, the scheduler and the practice session together. Components depend
on the Protocols in `types.py`; the container decides which implementation
stands behind each one.
"""
import random
from typing import Optional

import punq

from repertoire_trainer.config.settings import PracticeSettings, Settings, StoreSettings
from repertoire_trainer.orchestration.practice_session import PracticeSession
from repertoire_trainer.orchestration.scheduler import AsyncioScheduler
from repertoire_trainer.persistence.opening_store import JsonOpeningStore
from repertoire_trainer.services.move_oracle import ChessMoveOracle
from repertoire_trainer.types import MoveOracle, OpeningStore, Scheduler


def get_container(settings: Settings, rng: Optional[random.Random] = None) -> punq.Container:
    """
    Initializes and returns a DI container configured from `settings`.
    """
    container = punq.Container()

    # Register instances that are created outside the container's control.
    container.register(Settings, instance=settings)
    container.register(PracticeSettings, instance=settings.practice)
    container.register(StoreSettings, instance=settings.store)

    # Stateless and shared.
    container.register(MoveOracle, ChessMoveOracle, scope=punq.Scope.singleton)
    container.register(OpeningStore, factory=lambda: JsonOpeningStore(settings.store), scope=punq.Scope.singleton)
    # Each session owns its scheduler so closing one session cannot cancel another's timers.
    container.register(Scheduler, factory=lambda: AsyncioScheduler())

    container.register(
        PracticeSession,
        factory=lambda: PracticeSession(
            oracle=container.resolve(MoveOracle),
            settings=settings.practice,
            scheduler=container.resolve(Scheduler),
            rng=rng,
        ),
    )
    return container
