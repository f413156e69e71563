"""Tests for the story state models and typed updates."""

import pytest
from pydantic import TypeAdapter, ValidationError

from src.memory.story_state import (
    FIELD_GROUPS,
    GENDERS,
    Character,
    ClassificationUpdate,
    ContentUpdate,
    DialogItem,
    GenerationStage,
    GenerationUpdate,
    IdentityUpdate,
    PlotOutline,
    SettingUpdate,
    StoryState,
    StoryUpdate,
    update_for_field,
)


@pytest.fixture
def story() -> StoryState:
    """Minimal story in folder f1."""
    return StoryState(id="s1", folder_id="f1", main_title="Judul", location="Default")


class TestStoryState:
    """Tests for the StoryState aggregate."""

    def test_models_are_frozen(self, story):
        """Assigning to a field raises instead of mutating."""
        with pytest.raises(ValidationError):
            story.main_title = "Other"  # type: ignore[misc]

    def test_chapter_number_must_be_positive(self):
        """Chapter numbers start at 1."""
        with pytest.raises(ValidationError):
            StoryState(id="s1", folder_id="f1", chapter_number=0)

    def test_generation_stage_empty(self, story):
        """No results means EMPTY."""
        assert story.generation_stage == GenerationStage.EMPTY

    def test_generation_stage_plot_ready(self, story):
        """Plot without narrative means PLOT_READY."""
        staged = story.model_copy(update={"generated_json": "{}"})
        assert staged.generation_stage == GenerationStage.PLOT_READY

    def test_generation_stage_complete(self, story):
        """Plot and narrative means COMPLETE."""
        staged = story.model_copy(update={"generated_json": "{}", "generated_content": "Text"})
        assert staged.generation_stage == GenerationStage.COMPLETE

    def test_character_names_skip_blanks(self, story):
        """Unnamed characters are not offered as speakers."""
        with_chars = story.model_copy(
            update={
                "characters": [
                    Character(id="c1", name="Arjuna"),
                    Character(id="c2", name="  "),
                    Character(id="c3", name="Srikandi"),
                ]
            }
        )
        assert with_chars.character_names == ["Arjuna", "Srikandi"]

    def test_get_character_and_dialog(self, story):
        """Nested records are found by id, None otherwise."""
        filled = story.model_copy(
            update={
                "characters": [Character(id="c1", name="Arjuna")],
                "dialogs": [DialogItem(id="d1", speaker="Arjuna")],
            }
        )
        assert filled.get_character("c1").name == "Arjuna"
        assert filled.get_character("missing") is None
        assert filled.get_dialog("d1").speaker == "Arjuna"
        assert filled.get_dialog("missing") is None

    def test_summary_line(self, story):
        """Summary shows title and chapter, with a placeholder for no title."""
        assert story.summary_line() == "Judul - Ch.1"
        untitled = story.model_copy(update={"main_title": ""})
        assert untitled.summary_line() == "(Untitled) - Ch.1"

    def test_custom_gender_is_accepted(self):
        """Option lists do not restrict content."""
        character = Character(id="c1", gender="Naga")
        assert character.gender == "Naga"
        assert "Naga" not in GENDERS


class TestTypedUpdates:
    """Tests for the field-group update variants."""

    def test_apply_writes_only_set_fields(self, story):
        """Fields not given to the update keep their value."""
        updated = story.apply(SettingUpdate(environment="Hutan"))
        assert updated.environment == "Hutan"
        assert updated.location == "Default"
        assert story.environment == ""

    def test_apply_without_changes_returns_same_instance(self, story):
        """An empty update is a no-op."""
        assert story.apply(IdentityUpdate()) is story

    def test_apply_can_clear_text(self, story):
        """Setting an empty string is a real change."""
        updated = story.apply(IdentityUpdate(main_title=""))
        assert updated.main_title == ""

    def test_identity_update_rejects_zero_chapter(self):
        """Chapter numbers below 1 are rejected at construction."""
        with pytest.raises(ValidationError):
            IdentityUpdate(chapter_number=0)

    def test_classification_update_dedupes_genres(self):
        """Duplicate genres keep their first position only."""
        update = ClassificationUpdate(genres=["Fantasi", "Drama", "Fantasi"])
        assert update.genres == ("Fantasi", "Drama")

    def test_discriminated_union_parses_by_kind(self):
        """A raw dict is routed to the right variant by its kind."""
        adapter = TypeAdapter(StoryUpdate)
        update = adapter.validate_python({"kind": "generation", "generated_json": "{}"})
        assert isinstance(update, GenerationUpdate)
        assert update.changes() == {"generated_json": "{}"}

    def test_identity_fields_are_not_updatable(self):
        """id and folder_id belong to no update group."""
        assert "id" not in FIELD_GROUPS
        assert "folder_id" not in FIELD_GROUPS


class TestUpdateForField:
    """Tests for update_for_field."""

    @pytest.mark.parametrize(
        ("field", "value", "variant"),
        [
            ("main_title", "Judul", IdentityUpdate),
            ("location_desc", "Gua", SettingUpdate),
            ("language", "Jawa", ClassificationUpdate),
            ("dialogs", (), ContentUpdate),
            ("generated_content", "Teks", GenerationUpdate),
        ],
    )
    def test_routes_field_to_variant(self, field, value, variant):
        """Each field maps to the update group owning it."""
        update = update_for_field(field, value)
        assert isinstance(update, variant)
        assert update.changes() == {field: value}

    def test_unknown_field_raises(self):
        """Unknown fields raise ValueError."""
        with pytest.raises(ValueError, match="unknown or cannot be updated"):
            update_for_field("nickname", "x")

    def test_folder_id_cannot_be_updated(self):
        """A story never moves folders through an update."""
        with pytest.raises(ValueError):
            update_for_field("folder_id", "f2")

    def test_invalid_value_raises_value_error(self):
        """Pydantic validation errors surface as ValueError."""
        with pytest.raises(ValueError):
            update_for_field("chapter_number", 0)


class TestPlotOutline:
    """Tests for the plot outline response model."""

    def test_parses_full_outline(self):
        """A complete outline validates from JSON."""
        outline = PlotOutline.model_validate_json(
            '{"chapter_title": "Awal", "synopsis": "S", "conflict": "C", '
            '"beats": [{"order": 1, "summary": "B1", "characters": ["Arjuna"]}], '
            '"ending_hook": "H"}'
        )
        assert outline.beats[0].characters == ["Arjuna"]
        assert outline.ending_hook == "H"

    def test_wraps_bare_beat_list(self):
        """A bare list of beats becomes an outline with empty synopsis."""
        outline = PlotOutline.model_validate([{"summary": "B1"}, {"summary": "B2"}])
        assert outline.synopsis == ""
        assert [b.summary for b in outline.beats] == ["B1", "B2"]

    def test_missing_synopsis_is_invalid(self):
        """The synopsis is required."""
        with pytest.raises(ValidationError):
            PlotOutline.model_validate({"beats": []})
