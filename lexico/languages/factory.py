from lexico.config.settings import Settings
from lexico.database.repositories.language_repository import LanguageRepository
from lexico.languages.builtin import BUILTIN_PROFILES
from lexico.languages.models import LanguageProfile
from lexico.languages.registry import LanguageRegistry
from lexico.logging.logger import Log


class LanguageRegistryFactory:
    """Creates the language registry for the configured storage backend."""

    @classmethod
    def create(cls, settings: Settings) -> LanguageRegistry:
        registry = LanguageRegistry(
            cls._load_profiles(settings),
            min_confidence=settings.language_min_confidence,
            sample_chars=settings.language_detection_sample_chars,
        )
        Log.info(
            f"Language registry ready: {', '.join(registry.codes()) or 'no languages'} "
            f"(detection above {registry.min_confidence})"
        )
        return registry

    @classmethod
    def _load_profiles(cls, settings: Settings) -> list[LanguageProfile]:
        if settings.storage_backend.lower() != "postgres":
            return list(BUILTIN_PROFILES)
        profiles = LanguageRepository().load_all()
        if not profiles:
            Log.warning("idiomas table is empty, using built-in languages")
            return list(BUILTIN_PROFILES)
        Log.info(f"Loaded {len(profiles)} languages from the database")
        return profiles
