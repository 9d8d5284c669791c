import pytest

from recipe_normalizer.storage import RecipeStorage
from recipe_normalizer.units import UnitDictionary

from .fakes import FakeSession


@pytest.fixture
def units():
    return UnitDictionary.default()


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def storage(tmp_path, session):
    return RecipeStorage(tmp_path / "uploads", session=session)
