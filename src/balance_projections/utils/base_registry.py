from abc import ABC
from collections.abc import Iterable
from typing import Any, ClassVar, Generic, TypeVar, ValuesView

from loguru import logger

from balance_projections.utils.parsing import strip_identifier

T = TypeVar("T")


class BaseRegistry(ABC, Generic[T]):  # noqa: B024
    """Name-to-item lookup that is insensitive to case, spaces, dashes and underscores.

    Each subclass gets its own storage. An item can be registered under a canonical
    name plus any number of aliases; ``canonical_name`` maps an alias back.
    """

    items: ClassVar[dict[str, Any]] = {}
    stripped_items: ClassVar[dict[str, Any]] = {}
    canonical_names: ClassVar[dict[str, str]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls.items = {}
        cls.stripped_items = {}
        cls.canonical_names = {}

    @classmethod
    def register(cls, name: str, item: T, aliases: Iterable[str] = ()) -> None:
        cls.items[name] = item
        for key in (name, *aliases):
            stripped_name = cls._strip(key)
            if stripped_name in cls.stripped_items:
                logger.warning(f"{cls.__name__} '{stripped_name}' was already registered.")
            cls.stripped_items[stripped_name] = item
            cls.canonical_names[stripped_name] = name

    @classmethod
    def get(cls, name: str) -> T:
        stripped_name = cls._strip(name)
        if stripped_name not in cls.stripped_items:
            raise ValueError(f"{cls.__name__} '{name}' is not registered. Available: {cls.stripped_names()}")
        item: T = cls.stripped_items[stripped_name]
        return item

    @classmethod
    def canonical_name(cls, name: str) -> str:
        cls.get(name)
        return cls.canonical_names[cls._strip(name)]

    @classmethod
    def is_registered(cls, name: str) -> bool:
        return isinstance(name, str) and strip_identifier(name) in cls.stripped_items

    @classmethod
    def stripped_names(cls) -> list[str]:
        return list(cls.stripped_items.keys())

    @classmethod
    def values(cls) -> ValuesView[T]:
        return cls.items.values()

    @staticmethod
    def _strip(name: str) -> str:
        stripped_name = strip_identifier(name) if isinstance(name, str) else None
        if not stripped_name:
            raise ValueError(f"Invalid identifier: {name!r}")
        return stripped_name
