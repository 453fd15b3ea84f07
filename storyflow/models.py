"""Step payloads and the storyboard they accumulate into."""

from __future__ import annotations

import uuid
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .constants import DEFAULT_LANGUAGE, DEFAULT_SCENES, MAX_SCENES, MIN_SCENES


class WireModel(BaseModel):
    """Base for documents exchanged as camelCase JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="forbid"
    )

    def to_wire(self) -> Dict[str, Any]:
        """Dump the fields the caller actually set, camelCased."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


# ---------------------------------------------------------------------------
# Shared building blocks


class DialogueLine(WireModel):
    speaker: str
    text: str
    emotion: Optional[str] = None


class Scene(WireModel):
    """A scene of the storyboard, with the script written at step 4."""

    id: str
    act_number: int = 1
    scene_number: int = 1
    title: str = ""
    summary: str = ""
    image_prompt: str = ""
    dialogue: List[DialogueLine] = Field(default_factory=list)
    custom_image_url: Optional[str] = None
    character_ids: Optional[List[str]] = None


class Character(WireModel):
    id: str
    name: str
    description: str = ""
    voice_id: Optional[str] = None
    face_reference_url: Optional[str] = None


class ImageStyle(WireModel):
    preset: Optional[str] = None
    custom_prompt: Optional[str] = None


class BgmChoice(WireModel):
    selected: Optional[str] = None
    custom_url: Optional[str] = None
    volume: Optional[float] = Field(default=None, ge=0.0, le=1.0)


class CaptionChoice(WireModel):
    enabled: bool = False
    language: Optional[str] = None
    styles: Optional[List[str]] = None


# ---------------------------------------------------------------------------
# Step inputs


class StorySettings(WireModel):
    style: Optional[str] = None
    language: str = DEFAULT_LANGUAGE


class StoryInput(WireModel):
    """Step 1: the premise screen."""

    story_text: str = ""
    characters: str = ""
    dramatic_turning_point: str = ""
    future_vision: str = ""
    learnings: str = ""
    total_scenes: int = Field(default=DEFAULT_SCENES, ge=MIN_SCENES, le=MAX_SCENES)
    settings: StorySettings = Field(default_factory=StorySettings)

    def is_complete(self) -> bool:
        """Return ``True`` when every screen field is present and there is a story."""
        return bool(self.story_text.strip()) and set(
            type(self).model_fields
        ) <= self.model_fields_set


class SceneOutline(WireModel):
    id: Optional[str] = None
    scene_number: int
    scene_title: str = ""
    summary: str = ""


class ActOutline(WireModel):
    act_number: int
    act_title: str = ""
    scenes: List[SceneOutline] = Field(default_factory=list)


class StructureInput(WireModel):
    """Step 2: title plus acts and scenes."""

    title: str = ""
    acts: List[ActOutline] = Field(default_factory=list)


class CastInput(WireModel):
    """Step 3: characters and image style."""

    characters: List[Character] = Field(default_factory=list)
    image_style: ImageStyle = Field(default_factory=ImageStyle)


class ScriptInput(WireModel):
    """Step 4: per-scene script and image prompts."""

    scenes: List[Scene] = Field(default_factory=list)


class VoiceSetting(WireModel):
    voice_id: str


class VoiceInput(WireModel):
    """Step 5: voice per character id."""

    voice_settings: Dict[str, VoiceSetting] = Field(default_factory=dict)


class AudioCaptionInput(WireModel):
    """Step 6: background music and captions."""

    bgm: BgmChoice = Field(default_factory=BgmChoice)
    caption: CaptionChoice = Field(default_factory=CaptionChoice)


class ConfirmInput(WireModel):
    """Step 7: final metadata and confirmation."""

    title: Optional[str] = None
    description: str = ""
    tags: List[str] = Field(default_factory=list)
    confirmed: bool = True


STEP_MODELS: Dict[int, type[WireModel]] = {
    1: StoryInput,
    2: StructureInput,
    3: CastInput,
    4: ScriptInput,
    5: VoiceInput,
    6: AudioCaptionInput,
    7: ConfirmInput,
}


# ---------------------------------------------------------------------------
# Storyboard


class Act(WireModel):
    act_number: int
    title: str = ""
    scene_ids: List[str] = Field(default_factory=list)


class AudioSettings(WireModel):
    bgm: BgmChoice = Field(default_factory=BgmChoice)
    voice_overrides: Dict[str, str] = Field(default_factory=dict)


class Storyboard(WireModel):
    """Structured story data accumulated across the seven steps."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    title: str = ""
    summary: str = ""
    language: str = DEFAULT_LANGUAGE
    description: str = ""
    tags: List[str] = Field(default_factory=list)
    acts: List[Act] = Field(default_factory=list)
    characters: List[Character] = Field(default_factory=list)
    scenes: List[Scene] = Field(default_factory=list)
    audio: AudioSettings = Field(default_factory=AudioSettings)
    style: ImageStyle = Field(default_factory=ImageStyle)
    caption: CaptionChoice = Field(default_factory=CaptionChoice)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    def scene(self, scene_id: str) -> Optional[Scene]:
        for scene in self.scenes:
            if scene.id == scene_id:
                return scene
        return None
