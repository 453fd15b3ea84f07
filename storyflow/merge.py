"""Per-step merge rules for step inputs.

Each step number maps to a function typed against that step's payload
model. ``StepMerger`` validates raw documents into those models, runs the
rule and returns the camelCase document to store in the step's input slot.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional, TypeVar

from pydantic import ValidationError

from .errors import InvalidStepError, StepValidationError
from .models import (
    STEP_MODELS,
    AudioCaptionInput,
    CastInput,
    ConfirmInput,
    ScriptInput,
    StoryInput,
    StructureInput,
    VoiceInput,
    WireModel,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=WireModel)

# Scene fields a user edits by hand on the script screen.
HAND_EDITABLE_SCENE_FIELDS = ("image_prompt", "dialogue", "custom_image_url", "character_ids")


def _overlay(new: M, prior: Optional[M]) -> M:
    """Fields explicitly set on ``new`` win; unset ones are salvaged from ``prior``."""
    if prior is None:
        return new
    data = prior.model_dump(exclude_unset=True)
    data.update(new.model_dump(exclude_unset=True))
    return type(new).model_validate(data)


def merge_story_input(new: StoryInput, prior: Optional[StoryInput]) -> StoryInput:
    """A complete submission is the new snapshot; otherwise a complete prior one wins."""
    if new.is_complete():
        return new
    if prior is not None and prior.is_complete():
        return prior
    return new


def merge_structure(new: StructureInput, prior: Optional[StructureInput]) -> StructureInput:
    return _overlay(new, prior)


def merge_cast(new: CastInput, prior: Optional[CastInput]) -> CastInput:
    return _overlay(new, prior)


def merge_script(new: ScriptInput, prior: Optional[ScriptInput]) -> ScriptInput:
    """Merge scenes by id, keeping hand-edited fields from ``prior``."""
    if prior is None or "scenes" not in new.model_fields_set:
        return new
    edited = {scene.id: scene for scene in prior.scenes}
    scenes = []
    for scene in new.scenes:
        previous = edited.get(scene.id)
        if previous is None:
            scenes.append(scene)
            continue
        updates = {
            field: getattr(previous, field)
            for field in HAND_EDITABLE_SCENE_FIELDS
            if field in previous.model_fields_set
        }
        scenes.append(scene.model_copy(update=updates))
    return ScriptInput(scenes=scenes)


def merge_voices(new: VoiceInput, prior: Optional[VoiceInput]) -> VoiceInput:
    return _overlay(new, prior)


def merge_audio_caption(
    new: AudioCaptionInput, prior: Optional[AudioCaptionInput]
) -> AudioCaptionInput:
    return _overlay(new, prior)


def merge_confirmation(new: ConfirmInput, prior: Optional[ConfirmInput]) -> ConfirmInput:
    return _overlay(new, prior)


MERGE_RULES: Dict[int, Callable[[Any, Any], WireModel]] = {
    1: merge_story_input,
    2: merge_structure,
    3: merge_cast,
    4: merge_script,
    5: merge_voices,
    6: merge_audio_caption,
    7: merge_confirmation,
}


class StepMerger:
    """Validate step payloads and apply the merge rule of each step."""

    def __init__(self, rules: Optional[Dict[int, Callable[[Any, Any], WireModel]]] = None):
        self.rules = rules or MERGE_RULES

    def validate(self, step: int, data: Any) -> WireModel:
        """Validate ``data`` against the payload model of ``step``."""
        model = STEP_MODELS.get(step)
        if model is None:
            raise InvalidStepError(step)
        if data is None:
            raise StepValidationError(f"Step {step} requires a payload", step=step)
        if not isinstance(data, dict):
            raise StepValidationError(
                f"Step {step} payload must be an object, got {type(data).__name__}",
                step=step,
            )
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            raise StepValidationError(
                f"Invalid payload for step {step}: {exc}", step=step
            ) from exc

    def _prior_input(self, step: int, prior_output: Optional[dict]) -> Optional[WireModel]:
        if not prior_output:
            return None
        user_input = prior_output.get("userInput")
        if user_input is None:
            return None
        if step == 1:
            # An unusable snapshot simply does not count as a complete one.
            try:
                return StoryInput.model_validate(user_input)
            except ValidationError:
                logger.debug("Ignoring malformed step 1 snapshot")
                return None
        return self.validate(step, user_input)

    def merge(
        self, step: int, new_input: Any, prior_output: Optional[dict] = None
    ) -> Dict[str, Any]:
        """Return the document step ``step`` should store as its input."""
        rule = self.rules.get(step)
        if rule is None:
            raise InvalidStepError(step)
        new = self.validate(step, new_input)
        prior = self._prior_input(step, prior_output)
        return rule(new, prior).to_wire()
