import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

from catchery import log_critical, log_warning
from pydantic import ValidationError

from duelsim.ai.rules import compile_rule
from duelsim.character.template import CharacterTemplate
from duelsim.core.constants import ApplicabilityKind
from duelsim.core.error_handling import ContentValidationError, UnknownContentError
from duelsim.core.logging import log_debug
from duelsim.core.utils import Singleton
from duelsim.curbstomp.rules import CurbstompRule
from duelsim.environment.location import LocationConditions

DATA_DIR = Path(__file__).resolve().parent.parent / "data"


class ContentRepository(metaclass=Singleton):
    """
    One-stop registry for the static content a battle is built from:
    character templates, locations and curbstomp rules.
    """

    characters: dict[str, CharacterTemplate]
    locations: dict[str, LocationConditions]
    rules: dict[str, CurbstompRule]

    def __init__(self, data_dir: Path | None = None) -> None:
        """
        Initialize the ContentRepository.

        Args:
            data_dir (Path | None):
                The directory containing data files to load. The bundled
                data is used on first use when omitted.

        """
        if data_dir:
            self.reload(data_dir)
        elif not hasattr(self, "loaded"):
            self.reload(DATA_DIR)

    def reload(self, root: Path) -> None:
        """
        (Re)load all JSON assets from disk.

        Args:
            root (Path):
                The directory containing data files to load.
        """
        self.characters = _load_json_file(
            root / "characters.json",
            self._load_characters,
            "characters",
        )
        self.locations = _load_json_file(
            root / "locations.json",
            self._load_locations,
            "locations",
        )
        self.rules = _load_json_file(
            root / "curbstomp_rules.json",
            self._load_rules,
            "curbstomp rules",
        )
        self.loaded = True

    # ============================================================================
    # LOOKUP
    # ============================================================================

    def get_character(self, character_id: str) -> CharacterTemplate:
        """Get a character template by id, raising if it is unknown."""
        template = self.characters.get(character_id)
        if template is None:
            raise UnknownContentError("character", character_id)
        return template

    def get_location(self, location_id: str) -> LocationConditions:
        """Get a location by id, raising if it is unknown."""
        location = self.locations.get(location_id)
        if location is None:
            raise UnknownContentError("location", location_id)
        return location

    def get_character_rules(self, character_id: str) -> list[CurbstompRule]:
        """Rules written for one character, alone or as part of a pair."""
        found = []
        for rule in self.rules.values():
            target = rule.applies_to
            if target.kind == ApplicabilityKind.CHARACTER and target.value == character_id:
                found.append(rule)
            elif target.kind == ApplicabilityKind.PAIR and character_id in (target.pair or ()):
                found.append(rule)
        return found

    def get_location_rules(self, location_id: str) -> list[CurbstompRule]:
        """Rules bound to a location."""
        return [
            rule
            for rule in self.rules.values()
            if rule.applies_to.kind == ApplicabilityKind.LOCATION
            and rule.applies_to.value == location_id
        ]

    def get_general_rules(self) -> list[CurbstompRule]:
        """Rules keyed on element, faction or applying to everyone."""
        general = (ApplicabilityKind.ELEMENT, ApplicabilityKind.FACTION, ApplicabilityKind.ALL)
        return [rule for rule in self.rules.values() if rule.applies_to.kind in general]

    def rules_for_battle(
        self, fighter_a_id: str, fighter_b_id: str, location_id: str
    ) -> list[CurbstompRule]:
        """Every rule that could matter for one battle, without duplicates."""
        candidates = (
            self.get_character_rules(fighter_a_id)
            + self.get_character_rules(fighter_b_id)
            + self.get_location_rules(location_id)
            + self.get_general_rules()
        )
        unique: dict[str, CurbstompRule] = {}
        for rule in candidates:
            unique.setdefault(rule.id, rule)
        return list(unique.values())

    # ============================================================================
    # REGISTRATION
    # ============================================================================

    def register_character(self, template: CharacterTemplate) -> None:
        """Adds or replaces a character template."""
        _check_ai_rules(template)
        if template.id in self.characters:
            log_warning(
                f"Replacing character '{template.id}' in ContentRepository.",
                {"character_id": template.id},
            )
        self.characters[template.id] = template

    def register_location(self, location: LocationConditions) -> None:
        """Adds or replaces a location."""
        self.locations[location.id] = location

    def register_rule(self, rule: CurbstompRule) -> None:
        """Adds or replaces a curbstomp rule."""
        self.rules[rule.id] = rule

    def unregister(self, *content_ids: str) -> None:
        """Removes characters, locations or rules by id."""
        for content_id in content_ids:
            self.characters.pop(content_id, None)
            self.locations.pop(content_id, None)
            self.rules.pop(content_id, None)

    # ============================================================================
    # LOADERS
    # ============================================================================

    @staticmethod
    def _load_characters(data: list[dict]) -> dict[str, CharacterTemplate]:
        """
        Load character templates from JSON data.

        Args:
            data (list[dict]): List of character data dictionaries.

        Returns:
            dict[str, CharacterTemplate]: Templates by id.

        Raises:
            ValueError: If duplicate ids are found.

        """
        characters: dict[str, CharacterTemplate] = {}
        for entry in data:
            template = CharacterTemplate(**entry)
            if template.id in characters:
                raise ValueError(f"Duplicate character id: {template.id}")
            _check_ai_rules(template)
            characters[template.id] = template
        return characters

    @staticmethod
    def _load_locations(data: list[dict]) -> dict[str, LocationConditions]:
        """
        Load locations from JSON data.

        Raises:
            ValueError: If duplicate ids are found.

        """
        locations: dict[str, LocationConditions] = {}
        for entry in data:
            location = LocationConditions(**entry)
            if location.id in locations:
                raise ValueError(f"Duplicate location id: {location.id}")
            locations[location.id] = location
        return locations

    @staticmethod
    def _load_rules(data: list[dict]) -> dict[str, CurbstompRule]:
        """
        Load curbstomp rules from JSON data.

        Raises:
            ValueError: If duplicate ids are found.

        """
        rules: dict[str, CurbstompRule] = {}
        for entry in data:
            rule = CurbstompRule(**entry)
            if rule.id in rules:
                raise ValueError(f"Duplicate curbstomp rule id: {rule.id}")
            rules[rule.id] = rule
        return rules


def _check_ai_rules(template: CharacterTemplate) -> None:
    """Compiles a template's AI rules once so bad conditions fail at load time."""
    for spec in template.ai_rules:
        compile_rule(spec)
        if template.get_move(spec.move) is None:
            raise ContentValidationError(
                f"AI rule '{spec.name}' of '{template.id}' selects unknown move '{spec.move}'"
            )


def _load_json_file(
    filepath: Path,
    loader_func: Callable[[list[dict]], dict[str, Any]],
    description: str,
) -> dict[str, Any]:
    """Helper to load and validate JSON files"""
    try:
        log_debug(
            f"Loading {description} using {loader_func.__name__}",
            {"path": str(filepath)},
        )
        # Validate file path
        if not filepath.exists():
            raise FileNotFoundError(f"File not found: {filepath}")
        if not filepath.is_file():
            raise ValueError(f"Not a file: {filepath}")
        # Load and validate JSON
        with open(filepath, encoding="utf-8") as f:
            data = json.load(f)
        if not data:
            raise ValueError(f"Empty data list in {filepath}")
        if not isinstance(data, list):
            raise ValueError(f"Expected list in {filepath}, got {type(data).__name__}")
        return loader_func(data)
    except (json.JSONDecodeError, FileNotFoundError, ValidationError, ValueError) as e:
        log_critical(
            f"Error loading {description}: {e}",
            {"path": str(filepath), "error": str(e)},
        )
        raise ContentValidationError(f"File {filepath} raised an error: {e}") from e
