from __future__ import annotations

from typing import TypeVar

from pydantic import BaseModel, ValidationError

from .errors import ModelMismatch
from .interfaces import ConfigDocumentStore

M = TypeVar("M", bound=BaseModel)


def load_model(store: ConfigDocumentStore, name: str, model_cls: type[M]) -> M:
    """
    Load ``name`` and parse it into ``model_cls``.
    """
    doc = store.load(name)
    try:
        return model_cls.model_validate(doc)
    except ValidationError as e:
        raise ModelMismatch(model_cls.__name__, name, e.errors(include_url=False)) from e


def save_model(store: ConfigDocumentStore, name: str, model: BaseModel) -> None:
    store.save(name, model.model_dump(mode="json"))
