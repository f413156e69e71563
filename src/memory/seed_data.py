"""Default and seed data: initial folders, the empty story template and the example story.

Nothing here is persisted. A fresh start always rebuilds the editor from
these values.
"""

import logging
from typing import Any

from src.memory.story_state import Character, DialogItem, Folder, StoryState

logger = logging.getLogger(__name__)

DEFAULT_FOLDERS: tuple[Folder, ...] = (
    Folder(id="f1", name="Novel Fantasi 2024"),
    Folder(id="f2", name="Ide Konten YouTube"),
)

# Title given to stories the user creates from a folder
NEW_STORY_TITLE = "Cerita Baru"

# Placeholder identity, replaced whenever a story is created from the template
_TEMPLATE_ID = ""

EMPTY_STORY = StoryState(
    id=_TEMPLATE_ID,
    folder_id=DEFAULT_FOLDERS[0].id,
    main_title="",
    chapter_title="",
    chapter_number=1,
    environment="",
    environment_desc="",
    location="Default",
    location_desc="",
    genres=(),
    genre_desc="",
    language="Bahasa Indonesia",
    characters=(),
    dialogs=(),
    generated_json=None,
    generated_content=None,
)

# Partial story: no id or folder_id, so a merge keeps the target's identity
EXAMPLE_STORY: dict[str, Any] = {
    "main_title": "Legenda Pedang Naga",
    "chapter_title": "Pertemuan di Hutan Kabut",
    "chapter_number": 1,
    "environment": "Hutan lebat dengan kabut tebal yang membatasi jarak pandang.",
    "environment_desc": (
        "Suasana mencekam, suara burung hantu terdengar samar. "
        "Cahaya matahari sulit menembus kanopi pohon."
    ),
    "location": "Hutan Terlarang Bagian Utara",
    "location_desc": "Area yang jarang dijamah manusia, konon tempat tinggal roh kuno.",
    "genres": ["Fantasi", "Petualangan", "Misteri"],
    "genre_desc": "Fokus pada pengembangan karakter dan world-building magis.",
    "language": "Bahasa Indonesia",
    "characters": [
        Character(
            id="c1",
            name="Arjuna",
            gender="Laki-laki",
            age="19",
            age_description="Wajah muda namun penuh luka gores, tatapan mata tajam.",
            role="Protagonist",
        )
    ],
    "dialogs": [
        DialogItem(
            id="d1",
            speaker="Arjuna",
            mood="Waspada",
            body_condition="Nafas terengah-engah, memegang gagang pedang erat",
            text="Siapa di sana? Tunjukkan wujudmu!",
            description="Arjuna mendengar suara ranting patah di belakangnya.",
        )
    ],
}


def new_story(story_id: str, folder_id: str, **overrides: Any) -> StoryState:
    """Create a story from the empty template.

    Args:
        story_id: Fresh unique story ID.
        folder_id: Folder the story belongs to.
        **overrides: Extra template fields to replace (e.g. main_title).

    Returns:
        New StoryState with the given identity.
    """
    story = EMPTY_STORY.model_copy(update={"id": story_id, "folder_id": folder_id, **overrides})
    logger.debug("Created story %s in folder %s from template", story_id, folder_id)
    return story


def apply_example(story: StoryState) -> StoryState:
    """Shallow-merge the example story into a story.

    Every field present in EXAMPLE_STORY replaces the target's value; ``id``
    and ``folder_id`` are absent from the example and therefore preserved.

    Args:
        story: Target story.

    Returns:
        New StoryState with the example content.
    """
    changes = {
        key: tuple(value) if isinstance(value, list) else value
        for key, value in EXAMPLE_STORY.items()
    }
    merged = story.model_copy(update=changes)
    logger.debug("Applied example story to %s", story.id)
    return merged
