import pytest

from feed_engine.database.kv_store import InMemoryKeyValueStore
from feed_engine.services.interaction_store import InteractionStore

from fakes import make_video


@pytest.fixture
def kv_store():
    return InMemoryKeyValueStore()


@pytest.fixture
def interaction_store(kv_store):
    return InteractionStore(kv_store, key="interactions")


@pytest.fixture
def catalog():
    return [
        make_video("a", "Garden Horror", "Garden Horror ⚠️", "short"),
        make_video("b", "Animal Attack", "Animal Horror 🔱", "short", public_id="pub-b"),
        make_video("c", "Night Walk", "Real Horror ✴️", "long"),
        make_video("d", "Zoo Escape", "Animal Horror 🔱", "long", public_id="pub-d"),
        make_video("e", "Laughing Doll", "Comedy Horror 😂 ⚠️", "short"),
    ]
