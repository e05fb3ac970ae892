"""Diacritic folding backed by ICU transliteration."""

import threading
from typing import Any, ClassVar

import icu  # type: ignore[import-untyped]


class DiacriticFolder:
    """Removes combining marks ("canción" -> "cancion") keeping base letters."""

    _ICU_TRANSFORM: ClassVar[str] = "NFD; [:Nonspacing Mark:] Remove; NFC"
    _local: ClassVar[threading.local] = threading.local()

    @classmethod
    def fold(cls, text: str) -> str:
        if text.isascii():
            return text
        return cls._transliterator().transliterate(text)

    @classmethod
    def _transliterator(cls) -> Any:
        # ICU transliterators are not shared across threads.
        transliterator = getattr(cls._local, "transliterator", None)
        if transliterator is None:
            transliterator = icu.Transliterator.createInstance(cls._ICU_TRANSFORM)
            cls._local.transliterator = transliterator
        return transliterator


def fold_diacritics(text: str) -> str:
    return DiacriticFolder.fold(text)
