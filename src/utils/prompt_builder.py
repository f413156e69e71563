"""Prompt building utilities for the plot and narrative calls."""

from __future__ import annotations

from collections.abc import Sequence

from src.memory.story_state import Character, DialogItem, StoryState


class PromptBuilder:
    """Builds sectioned prompts from a story draft.

    Each ``add_*`` method appends one block and returns the builder so calls
    can be chained; ``build`` joins the blocks with blank lines.
    """

    def __init__(self) -> None:
        """Initialize an empty prompt builder."""
        self.sections: list[str] = []

    def add_language_requirement(self, language: str) -> PromptBuilder:
        """Add language enforcement section.

        Args:
            language: Target language for all content (e.g. "Bahasa Indonesia").
                Blank falls back to Bahasa Indonesia.

        Returns:
            Self for method chaining
        """
        language = language.strip() or "Bahasa Indonesia"
        self.sections.append(
            f"LANGUAGE: {language} - Write ALL content in {language}. "
            f"All prose, dialogue and narration must be in {language}."
        )
        return self

    def add_story_context(self, story: StoryState) -> PromptBuilder:
        """Add title, chapter and setting block.

        Empty fields are left out rather than sent as blank lines.

        Args:
            story: Story draft to describe.

        Returns:
            Self for method chaining
        """
        lines = [f"TITLE: {story.main_title or '(Untitled)'}"]
        chapter = f"CHAPTER {story.chapter_number}"
        if story.chapter_title:
            chapter += f": {story.chapter_title}"
        lines.append(chapter)

        setting = [
            ("Environment", story.environment),
            ("Atmosphere", story.environment_desc),
            ("Location", story.location),
            ("Location details", story.location_desc),
        ]
        lines.extend(f"{label}: {value}" for label, value in setting if value.strip())

        if story.genres:
            lines.append(f"Genres: {', '.join(story.genres)}")
        if story.genre_desc.strip():
            lines.append(f"Genre notes: {story.genre_desc}")

        self.sections.append("STORY CONTEXT:\n" + "\n".join(lines))
        return self

    def add_character_summary(self, characters: Sequence[Character]) -> PromptBuilder:
        """Add formatted character summary.

        Args:
            characters: Characters of the story, in display order.

        Returns:
            Self for method chaining
        """
        if not characters:
            return self

        char_lines = []
        for char in characters:
            details = ", ".join(part for part in (char.role, char.gender, char.age) if part)
            line = f"- {char.name or '(unnamed)'}"
            if details:
                line += f" ({details})"
            if char.age_description:
                line += f": {char.age_description}"
            char_lines.append(line)

        self.sections.append("CHARACTERS:\n" + "\n".join(char_lines))
        return self

    def add_dialog_notes(self, dialogs: Sequence[DialogItem]) -> PromptBuilder:
        """Add the user's dialog lines that the chapter must include.

        Args:
            dialogs: Dialog lines in chapter order.

        Returns:
            Self for method chaining
        """
        if not dialogs:
            return self

        dialog_lines = []
        for item in dialogs:
            cues = ", ".join(part for part in (item.mood, item.body_condition) if part)
            line = f"- {item.speaker or '(narrator)'}"
            if cues:
                line += f" [{cues}]"
            line += f': "{item.text}"'
            if item.description:
                line += f" ({item.description})"
            dialog_lines.append(line)

        self.sections.append("KEY DIALOG (include these lines):\n" + "\n".join(dialog_lines))
        return self

    def add_section(self, title: str, content: str) -> PromptBuilder:
        """Add a custom section with title.

        Args:
            title: Section title
            content: Section content

        Returns:
            Self for method chaining
        """
        self.sections.append(f"{title}:\n{content}")
        return self

    def build(self) -> str:
        """Combine all sections into final prompt.

        Returns:
            Complete prompt string with sections separated by double newlines
        """
        return "\n\n".join(self.sections)

    @classmethod
    def for_story(cls, story: StoryState) -> PromptBuilder:
        """Start a builder with the full context of a story."""
        return (
            cls()
            .add_story_context(story)
            .add_character_summary(story.characters)
            .add_dialog_notes(story.dialogs)
            .add_language_requirement(story.language)
        )
