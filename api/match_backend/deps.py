from collections.abc import Callable, Iterator

from . import database
from .services import trait_extractor
from .traits import TraitProfile


def get_db() -> Iterator:
    with database.SessionLocal() as db:
        yield db


def get_trait_extractor() -> Callable[[str | None], TraitProfile]:
    return trait_extractor.extract_traits_from_bio
