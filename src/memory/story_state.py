"""Story state models - the draft chapter record and its nested lists.

Every model here is frozen and list-like fields are tuples. A change never
mutates an instance in place; it produces a new instance via ``model_copy`` so that old snapshots held by the
UI or by an in-flight generation stay intact.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

logger = logging.getLogger(__name__)

# ========== Option Sets ==========
# Reference lists that drive the selection widgets. Story content is never
# validated against them: a custom gender or genre is a valid value.

GENDERS: list[str] = [
    "Laki-laki",
    "Perempuan",
    "Non-Binary",
    "Robot/AI",
    "Makhluk Mitos",
    "Lainnya",
]

GENRES: list[str] = [
    "Fantasi",
    "Sci-Fi",
    "Romance",
    "Horor",
    "Misteri",
    "Thriller",
    "Sejarah",
    "Komedi",
    "Drama",
    "Petualangan",
    "Isekai",
    "Slice of Life",
    "Cyberpunk",
    "Steampunk",
    "Dystopian",
]

LANGUAGES: list[str] = [
    "Bahasa Indonesia",
    "English (US)",
    "English (UK)",
    "Jawa",
    "Sunda",
    "Japanese",
    "Korean",
    "Mandarin",
    "Spanish",
    "French",
    "German",
    "Russian",
]

CHARACTER_ROLES: list[str] = ["Protagonist", "Antagonist", "Pendukung", "Mentor", "Figuran"]

# Role given to a freshly added character
DEFAULT_CHARACTER_ROLE = "Pendukung"


class Folder(BaseModel):
    """A grouping bucket for stories in the sidebar."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str


class Character(BaseModel):
    """A character of one story, owned by that story's character list."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    gender: str = ""
    age: str = ""
    age_description: str = ""
    role: str = ""  # Protagonist, Antagonist, Pendukung, ...


class DialogItem(BaseModel):
    """A dialog line of one story.

    ``speaker`` is a copy of a character name taken when the line was written.
    Renaming the character later does not touch existing lines.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    speaker: str = ""
    mood: str = ""
    body_condition: str = ""
    text: str = ""
    description: str = ""


class GenerationStage(Enum):
    """How far generation has progressed for a story."""

    EMPTY = "empty"
    PLOT_READY = "plot_ready"
    COMPLETE = "complete"


class StoryState(BaseModel):
    """One chapter draft - the aggregate root of the editor."""

    model_config = ConfigDict(frozen=True)

    # Identity
    id: str
    folder_id: str

    # Narrative metadata
    main_title: str = ""
    chapter_title: str = ""
    chapter_number: int = Field(default=1, ge=1)

    # Setting
    environment: str = ""
    environment_desc: str = ""
    location: str = ""
    location_desc: str = ""

    # Classification
    genres: tuple[str, ...] = ()  # set semantics, insertion order kept
    genre_desc: str = ""
    language: str = ""

    # Content
    characters: tuple[Character, ...] = ()
    dialogs: tuple[DialogItem, ...] = ()

    # Generation results
    generated_json: str | None = None
    generated_content: str | None = None

    @property
    def generation_stage(self) -> GenerationStage:
        """Derive the generation stage from the result fields."""
        if self.generated_json is not None and self.generated_content is not None:
            return GenerationStage.COMPLETE
        if self.generated_json is not None:
            return GenerationStage.PLOT_READY
        return GenerationStage.EMPTY

    @property
    def character_names(self) -> list[str]:
        """Names of the characters in display order, blanks skipped."""
        return [c.name for c in self.characters if c.name.strip()]

    def get_character(self, character_id: str) -> Character | None:
        """Get a character by its ID.

        Args:
            character_id: Character ID to find.

        Returns:
            Character if found, None otherwise.
        """
        for character in self.characters:
            if character.id == character_id:
                return character
        return None

    def get_dialog(self, dialog_id: str) -> DialogItem | None:
        """Get a dialog line by its ID.

        Args:
            dialog_id: Dialog ID to find.

        Returns:
            DialogItem if found, None otherwise.
        """
        for dialog in self.dialogs:
            if dialog.id == dialog_id:
                return dialog
        return None

    def apply(self, update: StoryUpdate) -> StoryState:
        """Return a copy of this story with a typed update applied.

        Only fields explicitly set on the update are written.

        Args:
            update: One of the field-group update variants.

        Returns:
            A new StoryState; this instance is left untouched.
        """
        changes = update.changes()
        if not changes:
            return self
        logger.debug("Applying %s update to story %s: %s", update.kind, self.id, list(changes))
        return self.model_copy(update=changes)

    def summary_line(self) -> str:
        """Short label used in the sidebar and logs."""
        title = self.main_title or "(Untitled)"
        return f"{title} - Ch.{self.chapter_number}"


# ============================================================================
# Typed Updates
# ============================================================================
# One variant per field group, discriminated by ``kind``. ``id`` and
# ``folder_id`` are deliberately absent: a story's identity never changes.


class _StoryUpdateBase(BaseModel):
    """Shared behaviour of the update variants."""

    model_config = ConfigDict(frozen=True)

    def changes(self) -> dict[str, Any]:
        """Collect the explicitly set, non-None fields of this update."""
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if name != "kind" and getattr(self, name) is not None
        }


class IdentityUpdate(_StoryUpdateBase):
    """Title and chapter metadata."""

    kind: Literal["identity"] = "identity"
    main_title: str | None = None
    chapter_title: str | None = None
    chapter_number: int | None = Field(default=None, ge=1)


class SettingUpdate(_StoryUpdateBase):
    """Environment and location fields."""

    kind: Literal["setting"] = "setting"
    environment: str | None = None
    environment_desc: str | None = None
    location: str | None = None
    location_desc: str | None = None


class ClassificationUpdate(_StoryUpdateBase):
    """Genres, genre description and language."""

    kind: Literal["classification"] = "classification"
    genres: tuple[str, ...] | None = None
    genre_desc: str | None = None
    language: str | None = None

    @field_validator("genres")
    @classmethod
    def dedupe_genres(cls, v: tuple[str, ...] | None) -> tuple[str, ...] | None:
        """Keep the first occurrence of each genre."""
        if v is not None and len(set(v)) != len(v):
            unique = tuple(dict.fromkeys(v))
            logger.debug("Dropping duplicate genres: %s -> %s", v, unique)
            return unique
        return v


class ContentUpdate(_StoryUpdateBase):
    """Whole-list replacement of characters or dialogs."""

    kind: Literal["content"] = "content"
    characters: tuple[Character, ...] | None = None
    dialogs: tuple[DialogItem, ...] | None = None


class GenerationUpdate(_StoryUpdateBase):
    """Generation results written back by the generation pipeline."""

    kind: Literal["generation"] = "generation"
    generated_json: str | None = None
    generated_content: str | None = None


StoryUpdate = Annotated[
    IdentityUpdate | SettingUpdate | ClassificationUpdate | ContentUpdate | GenerationUpdate,
    Field(discriminator="kind"),
]

_UPDATE_VARIANTS: tuple[type[_StoryUpdateBase], ...] = (
    IdentityUpdate,
    SettingUpdate,
    ClassificationUpdate,
    ContentUpdate,
    GenerationUpdate,
)

# field name -> update variant owning it
FIELD_GROUPS: dict[str, type[_StoryUpdateBase]] = {
    name: variant
    for variant in _UPDATE_VARIANTS
    for name in variant.model_fields
    if name != "kind"
}


def update_for_field(field: str, value: Any) -> StoryUpdate:
    """Build the typed update that sets a single story field.

    Args:
        field: StoryState field name, e.g. "main_title".
        value: New value for the field.

    Returns:
        The matching update variant, validated.

    Raises:
        ValueError: If the field is unknown or not updatable (id, folder_id),
            or if the value is invalid for the field.
    """
    variant = FIELD_GROUPS.get(field)
    if variant is None:
        raise ValueError(f"Story field '{field}' is unknown or cannot be updated")
    update: StoryUpdate = variant(**{field: value})  # type: ignore[assignment]
    return update


# ============================================================================
# Generation Response Models
# ============================================================================


class PlotBeat(BaseModel):
    """One beat of the chapter plot outline."""

    order: int = 0
    summary: str
    characters: list[str] = Field(default_factory=list)
    location: str = ""
    purpose: str = ""  # what the beat does for the chapter


class PlotOutline(BaseModel):
    """JSON plot outline returned by the first generation call.

    Passed to Ollama as the ``format`` schema so the output is constrained to it.
    """

    chapter_title: str = ""
    synopsis: str
    conflict: str = ""
    beats: list[PlotBeat] = Field(default_factory=list)
    ending_hook: str = ""

    @model_validator(mode="before")
    @classmethod
    def wrap_beat_list(cls, data: Any) -> Any:
        """Wrap a bare list of beats into an outline if needed."""
        if isinstance(data, list) and all(isinstance(item, dict) for item in data):
            logger.debug("Wrapping bare beat list (%d beats) in PlotOutline", len(data))
            return {"synopsis": "", "beats": data}
        return data
