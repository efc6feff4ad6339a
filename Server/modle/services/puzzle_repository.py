"""
Puzzle Repository

Deterministic lookup of the daily puzzle for a (language, date) pair.

Each language owns an ordered rotation of puzzles; the puzzle for a date
is ``rotation[days_since_epoch(date) % len(rotation)]`` unless an explicit
schedule entry exists for that date. Two backends are provided:

- JsonPuzzleRepository: a bundled, read-only JSON catalogue
- MongoPuzzleRepository: the ``puzzles`` collection, with every served
  (language, date) pinned in ``daily_puzzles`` so catalogue growth never
  rewrites a date that was already played
"""

import datetime
import json
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from ..config.game_settings import SUPPORTED_LANGUAGES
from ..errors import CatalogueReadOnly, NotFound
from ..models.puzzle import PuzzleDefinition
from ..utils.helpers import days_since_epoch, format_date, normalize


def select_rotation_index(day: datetime.date, count: int) -> int:
    """Index of the rotation entry used on ``day``."""
    if count <= 0:
        raise ValueError("Rotation must contain at least one puzzle")
    return days_since_epoch(day) % count


def validate_entry(language: str, entry: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Validate and clean a raw {answer, hints} catalogue entry.

    Raises:
        ValueError: If the answer or hints are missing or empty
    """
    if language not in SUPPORTED_LANGUAGES:
        raise ValueError(f"Unsupported puzzle language '{language}'")

    answer = str(entry.get('answer') or '').strip().upper()
    if not normalize(answer):
        raise ValueError(f"{language} puzzle has an empty answer")

    hints = entry.get('hints')
    if not isinstance(hints, list) or not hints:
        raise ValueError(f"{language} puzzle '{answer}' must have at least one hint")
    cleaned = [str(hint).strip() for hint in hints]
    if any(not hint for hint in cleaned):
        raise ValueError(f"{language} puzzle '{answer}' has an empty hint")

    return {'answer': answer, 'hints': cleaned, 'meta': dict(entry.get('meta') or {})}


def _definition(language: str, day: datetime.date, entry: Mapping[str, Any]) -> PuzzleDefinition:
    return PuzzleDefinition(
        language=language,
        date=format_date(day),
        answer=entry['answer'],
        hints=tuple(entry['hints']),
        meta=dict(entry.get('meta') or {}),
    )


class JsonPuzzleRepository:
    """
    Read-only puzzle catalogue loaded from JSON.

    Format::

        {"English": {"rotation": [{"answer": ..., "hints": [...]}, ...],
                     "schedule": {"2024-05-01": {"answer": ..., "hints": [...]}}}}
    """

    def __init__(self, catalogue: Mapping[str, Any]):
        self._rotations: Dict[str, List[Dict[str, Any]]] = {}
        self._schedules: Dict[str, Dict[str, Dict[str, Any]]] = {}

        for language, section in catalogue.items():
            if isinstance(section, list):
                section = {'rotation': section}
            rotation = [validate_entry(language, e) for e in section.get('rotation') or []]
            schedule = {
                day: validate_entry(language, e)
                for day, e in (section.get('schedule') or {}).items()
            }
            self._rotations[language] = rotation
            self._schedules[language] = schedule

    @classmethod
    def from_file(cls, path: str) -> 'JsonPuzzleRepository':
        """
        Load a catalogue file.

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the catalogue is malformed
        """
        with open(path, 'r', encoding='utf-8') as f:
            catalogue = json.load(f)
        if not isinstance(catalogue, dict):
            raise ValueError("Puzzle catalogue must be a JSON object keyed by language")
        return cls(catalogue)

    def get_puzzle(self, language: str, day: datetime.date) -> PuzzleDefinition:
        """
        Puzzle for (language, day).

        Raises:
            NotFound: If no puzzle is defined for the pair
        """
        scheduled = self._schedules.get(language, {}).get(format_date(day))
        if scheduled is not None:
            return _definition(language, day, scheduled)

        rotation = self._rotations.get(language)
        if not rotation:
            raise NotFound(f"No puzzles found for language: {language}",
                           language=language, date=format_date(day))
        return _definition(language, day, rotation[select_rotation_index(day, len(rotation))])

    def rotation(self, language: str) -> List[Dict[str, Any]]:
        return [dict(entry) for entry in self._rotations.get(language, [])]

    def list_puzzles(self, language: str) -> List[Dict[str, Any]]:
        """Rotation entries of a language in serving order, for the admin view."""
        return [
            {'id': None, 'language': language, 'index': index, **entry,
             'createdAt': None, 'updatedAt': None}
            for index, entry in enumerate(self.rotation(language))
        ]

    def _read_only(self, *args, **kwargs):
        raise CatalogueReadOnly(
            "The puzzle catalogue is a bundled JSON file; set PUZZLE_SOURCE=mongo to edit puzzles"
        )

    add_puzzle = update_puzzle = delete_puzzle = _read_only

    def stats(self) -> Dict[str, Any]:
        by_language = {
            language: len(self._rotations.get(language, []))
            for language in SUPPORTED_LANGUAGES
            if self._rotations.get(language)
        }
        return {
            'total': sum(by_language.values()),
            'byLanguage': by_language,
            # Bundled entries carry no creation time
            'lastAdded': {language: None for language in by_language},
        }


class MongoPuzzleRepository:
    """Puzzle catalogue stored in MongoDB."""

    def __init__(self, db):
        self.puzzles_collection = db.puzzles
        self.daily_collection = db.daily_puzzles

        # Compound index to ensure unique index per language
        self.puzzles_collection.create_index(
            [("language", ASCENDING), ("index", ASCENDING)], unique=True
        )

    def _pin_id(self, language: str, day: datetime.date) -> str:
        return f"{language}:{format_date(day)}"

    def get_puzzle(self, language: str, day: datetime.date) -> PuzzleDefinition:
        """
        Puzzle for (language, day), pinned on first lookup.

        Raises:
            NotFound: If the language has no puzzles
        """
        pin_id = self._pin_id(language, day)
        pinned = self.daily_collection.find_one({"_id": pin_id})
        if pinned:
            return _definition(language, day, pinned)

        catalogue = list(self.puzzles_collection.find({"language": language}).sort("index", ASCENDING))
        if not catalogue:
            raise NotFound(f"No puzzles found for language: {language}",
                           language=language, date=format_date(day))

        chosen = catalogue[select_rotation_index(day, len(catalogue))]
        # $setOnInsert keeps the first writer's choice when two requests race
        pinned = self.daily_collection.find_one_and_update(
            {"_id": pin_id},
            {"$setOnInsert": {
                "language": language,
                "date": format_date(day),
                "answer": chosen["answer"],
                "hints": list(chosen["hints"]),
                "meta": chosen.get("meta") or {},
                "puzzle_index": chosen["index"],
            }},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return _definition(language, day, pinned)

    def add_puzzle(self, language: str, answer: str, hints: Sequence[str],
                   meta: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Append a puzzle at the end of a language's rotation.

        Raises:
            ValueError: If the puzzle is malformed or the index is taken
        """
        entry = validate_entry(language, {'answer': answer, 'hints': list(hints), 'meta': meta})
        # Deletions leave gaps, so append after the highest index rather than the count
        last = self.puzzles_collection.find_one({"language": language}, sort=[("index", DESCENDING)])
        index = last["index"] + 1 if last else 0
        doc = {
            "language": language,
            "index": index,
            "answer": entry['answer'],
            "hints": entry['hints'],
            "meta": entry['meta'],
            "created_at": datetime.datetime.now(datetime.timezone.utc),
        }
        try:
            result = self.puzzles_collection.insert_one(doc)
        except DuplicateKeyError:
            raise ValueError(f"Duplicate puzzle index {index} for {language}")
        doc["_id"] = result.inserted_id
        return _admin_view(doc)

    def list_puzzles(self, language: str) -> List[Dict[str, Any]]:
        """Every puzzle of a language in rotation order."""
        docs = self.puzzles_collection.find({"language": language}).sort("index", ASCENDING)
        return [_admin_view(doc) for doc in docs]

    def _object_id(self, puzzle_id: str) -> ObjectId:
        try:
            return ObjectId(puzzle_id)
        except (InvalidId, TypeError):
            raise NotFound("Puzzle not found", id=puzzle_id)

    def update_puzzle(self, puzzle_id: str, answer: Optional[str] = None,
                      hints: Optional[Sequence[str]] = None,
                      meta: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Edit a catalogue entry in place. Meta is merged into the stored meta.

        Days already served keep the copy pinned in ``daily_puzzles``; the
        edit only affects days not yet looked up.

        Raises:
            NotFound: If no puzzle has the id
            ValueError: If the edited puzzle is malformed
        """
        object_id = self._object_id(puzzle_id)
        current = self.puzzles_collection.find_one({"_id": object_id})
        if not current:
            raise NotFound("Puzzle not found", id=puzzle_id)

        entry = validate_entry(current["language"], {
            'answer': answer if answer else current["answer"],
            'hints': list(hints) if hints else current["hints"],
            'meta': {**(current.get("meta") or {}), **(meta or {})},
        })
        changes = {**entry, "updated_at": datetime.datetime.now(datetime.timezone.utc)}
        updated = self.puzzles_collection.find_one_and_update(
            {"_id": object_id},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )
        if not updated:
            raise NotFound("Puzzle not found", id=puzzle_id)
        return _admin_view(updated)

    def delete_puzzle(self, puzzle_id: str) -> None:
        """
        Remove a catalogue entry. Pinned days keep their copy.

        Raises:
            NotFound: If no puzzle has the id
        """
        result = self.puzzles_collection.delete_one({"_id": self._object_id(puzzle_id)})
        if result.deleted_count == 0:
            raise NotFound("Puzzle not found", id=puzzle_id)

    def existing_answers(self, language: str) -> Iterable[str]:
        return {
            normalize(doc["answer"])
            for doc in self.puzzles_collection.find({"language": language}, {"answer": 1})
        }

    def stats(self) -> Dict[str, Any]:
        rows = list(self.puzzles_collection.aggregate([
            {"$group": {"_id": "$language", "count": {"$sum": 1},
                        "lastAdded": {"$max": "$created_at"}}},
            {"$sort": {"_id": 1}},
        ]))
        by_language = {row["_id"]: row["count"] for row in rows}
        last_added = {row["_id"]: _timestamp(row.get("lastAdded")) for row in rows}
        return {'total': sum(by_language.values()), 'byLanguage': by_language,
                'lastAdded': last_added}


def _timestamp(value: Optional[datetime.datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _admin_view(doc: Mapping[str, Any]) -> Dict[str, Any]:
    """Stored puzzle document as returned by the admin endpoints."""
    return {
        'id': str(doc["_id"]),
        'language': doc["language"],
        'index': doc.get("index"),
        'answer': doc["answer"],
        'hints': list(doc["hints"]),
        'meta': dict(doc.get("meta") or {}),
        'createdAt': _timestamp(doc.get("created_at")),
        'updatedAt': _timestamp(doc.get("updated_at")),
    }


def seed_catalogue(repository: MongoPuzzleRepository, catalogue: Mapping[str, Any]) -> Dict[str, int]:
    """
    Copy a JSON catalogue's rotations into MongoDB.

    Answers already stored for a language are skipped, so seeding twice is
    harmless.

    Returns:
        Number of puzzles inserted per language
    """
    inserted: Dict[str, int] = {}
    source = JsonPuzzleRepository(catalogue)
    for language in SUPPORTED_LANGUAGES:
        known = set(repository.existing_answers(language))
        count = 0
        for entry in source.rotation(language):
            canonical = normalize(entry['answer'])
            if canonical in known:
                continue
            repository.add_puzzle(language, entry['answer'], entry['hints'], entry.get('meta'))
            known.add(canonical)
            count += 1
        inserted[language] = count
    return inserted
