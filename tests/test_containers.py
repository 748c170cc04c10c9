# tests/test_containers.py
from repertoire_trainer.config.settings import Settings, StoreSettings
from repertoire_trainer.containers import get_container
from repertoire_trainer.orchestration.practice_session import PracticeSession
from repertoire_trainer.persistence.opening_store import JsonOpeningStore
from repertoire_trainer.types import MoveOracle, OpeningStore, SessionState


def test_container_wires_session_and_store(tmp_path):
    settings = Settings(store=StoreSettings(json_filepath=str(tmp_path / "openings.json")))
    container = get_container(settings)

    store = container.resolve(OpeningStore)
    session = container.resolve(PracticeSession)

    assert isinstance(store, JsonOpeningStore)
    assert store.path == tmp_path / "openings.json"
    assert container.resolve(OpeningStore) is store
    assert isinstance(container.resolve(MoveOracle), MoveOracle)
    assert session.state is SessionState.IDLE
    assert container.resolve(PracticeSession) is not session
