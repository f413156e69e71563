"""Generation gateway - plot outline and narrative calls against Ollama."""

import json
import logging

import httpx
import ollama
from pydantic import ValidationError

from src.memory.story_state import PlotOutline, StoryState
from src.services.llm_client import chat_text, get_ollama_client
from src.settings import Settings
from src.utils.exceptions import MalformedResponseError, summarize_error
from src.utils.json_parser import clean_llm_text, extract_json_text
from src.utils.prompt_builder import PromptBuilder

logger = logging.getLogger(__name__)

PLOT_SYSTEM_PROMPT = (
    "You are a story architect. You outline a single chapter of a serialized story "
    "as structured JSON. Respect the given characters, setting and genres."
)

NARRATIVE_SYSTEM_PROMPT = (
    "You are a novelist. You write the full prose of one chapter from an outline, "
    "keeping every character, location and key dialog line consistent with it."
)


class GenerationService:
    """Text generation gateway.

    Both calls block until the model answers. Callers on the UI event loop
    must run them in a worker thread.
    """

    def __init__(self, settings: Settings):
        """Initialize the generation service.

        Args:
            settings: Application settings.
        """
        self.settings = settings
        logger.debug("GenerationService initialized (model=%s)", settings.model)

    def generate_plot(self, story: StoryState) -> str:
        """Generate the plot outline of a chapter.

        Args:
            story: Story snapshot to outline.

        Returns:
            The outline as pretty-printed JSON text.

        Raises:
            GenerationError: If the call fails or the model output is not a
                valid outline.
        """
        prompt = (
            PromptBuilder.for_story(story)
            .add_section(
                "TASK",
                f"Outline chapter {story.chapter_number} as 4-8 ordered beats. "
                "Each beat names the characters involved, where it happens and what it "
                "does for the chapter. End with a hook for the next chapter.",
            )
            .build()
        )

        raw = chat_text(
            self.settings,
            prompt,
            system_prompt=PLOT_SYSTEM_PROMPT,
            temperature=self.settings.plot_temperature,
            json_schema=PlotOutline.model_json_schema(),
            operation="Plot generation",
        )

        try:
            outline = PlotOutline.model_validate_json(extract_json_text(raw))
        except ValidationError as e:
            logger.warning("Plot outline failed validation: %s", summarize_error(e))
            raise MalformedResponseError("Model returned an invalid plot outline", raw) from e

        if not outline.chapter_title and story.chapter_title:
            outline = outline.model_copy(update={"chapter_title": story.chapter_title})

        logger.info("Generated plot for story %s: %d beats", story.id, len(outline.beats))
        return outline.model_dump_json(indent=2)

    def generate_narrative(self, story: StoryState, plot_json: str) -> str:
        """Generate the chapter prose from an outline.

        Args:
            story: Story snapshot the outline was made from.
            plot_json: Outline returned by ``generate_plot``.

        Returns:
            The chapter narrative, without any reasoning block the model emitted.

        Raises:
            GenerationError: If the call fails or returns nothing but reasoning.
        """
        prompt = (
            PromptBuilder.for_story(story)
            .add_section("PLOT OUTLINE", plot_json)
            .add_section(
                "TASK",
                "Write the complete chapter as flowing prose, following the outline "
                "beat by beat. Use the key dialog lines where they fit. Do not output "
                "JSON, headings or notes.",
            )
            .build()
        )

        raw = chat_text(
            self.settings,
            prompt,
            system_prompt=NARRATIVE_SYSTEM_PROMPT,
            temperature=self.settings.narrative_temperature,
            operation="Narrative generation",
        )
        narrative = clean_llm_text(raw)
        if not narrative:
            raise MalformedResponseError("Model returned no narrative besides its reasoning", raw)
        logger.info("Generated narrative for story %s: %d chars", story.id, len(narrative))
        return narrative

    def check_health(self) -> tuple[bool, str]:
        """Check that the Ollama server answers and the model is installed.

        Returns:
            Tuple of (is_healthy, message).
        """
        logger.debug("check_health called: ollama_url=%s", self.settings.ollama_url)
        try:
            client = get_ollama_client(self.settings, timeout=self.settings.health_check_timeout)
            response = client.list()
        except ollama.ResponseError as e:
            logger.warning("Ollama API error during health check: %s", e)
            return False, f"Ollama API error: {e}"
        except (ConnectionError, TimeoutError, httpx.HTTPError) as e:
            logger.warning("Cannot connect to Ollama at %s: %s", self.settings.ollama_url, e)
            return False, f"Cannot connect to Ollama: {e}"

        installed = {str(m.get("model") or m.get("name")) for m in response.get("models", [])}
        if _model_key(self.settings.model) not in {_model_key(name) for name in installed}:
            logger.info("Model %s not installed (have: %s)", self.settings.model, sorted(installed))
            return False, f"Model {self.settings.model} is not installed"

        return True, f"Ollama is running ({self.settings.model})"


def _model_key(name: str) -> str:
    """Model name with the implicit ``:latest`` tag made explicit."""
    name = name.strip()
    if ":" in name.rsplit("/", 1)[-1]:
        return name
    return f"{name}:latest"


def parse_plot(plot_json: str) -> PlotOutline | None:
    """Parse stored plot JSON for display, None if it is not an outline."""
    try:
        return PlotOutline.model_validate(json.loads(plot_json))
    except (json.JSONDecodeError, ValidationError) as e:
        logger.debug("Stored plot is not a PlotOutline: %s", summarize_error(e, 100))
        return None
