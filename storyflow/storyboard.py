"""Fold accepted step inputs into the storyboard."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from .constants import DEFAULT_BGM_VOLUME
from .models import (
    Act,
    AudioCaptionInput,
    AudioSettings,
    BgmChoice,
    CaptionChoice,
    CastInput,
    ConfirmInput,
    ImageStyle,
    Scene,
    ScriptInput,
    StoryInput,
    Storyboard,
    StructureInput,
    VoiceInput,
    WireModel,
)

logger = logging.getLogger(__name__)


def scene_id_for(act_number: int, scene_number: int) -> str:
    return f"scene-{act_number}-{scene_number}"


def _apply_story(storyboard: Storyboard, data: StoryInput) -> Storyboard:
    return storyboard.model_copy(
        update={"summary": data.story_text, "language": data.settings.language}
    )


def _apply_structure(storyboard: Storyboard, data: StructureInput) -> Storyboard:
    existing = {scene.id: scene for scene in storyboard.scenes}
    acts: List[Act] = []
    scenes: List[Scene] = []
    for act in data.acts:
        scene_ids = []
        for outline in act.scenes:
            scene_id = outline.id or scene_id_for(act.act_number, outline.scene_number)
            scene_ids.append(scene_id)
            skeleton = existing.get(scene_id) or Scene(id=scene_id)
            scenes.append(
                skeleton.model_copy(
                    update={
                        "act_number": act.act_number,
                        "scene_number": outline.scene_number,
                        "title": outline.scene_title,
                        "summary": outline.summary,
                    }
                )
            )
        acts.append(Act(act_number=act.act_number, title=act.act_title, scene_ids=scene_ids))
    return storyboard.model_copy(update={"title": data.title, "acts": acts, "scenes": scenes})


def _apply_cast(storyboard: Storyboard, data: CastInput) -> Storyboard:
    voices = {c.id: c.voice_id for c in storyboard.characters}
    characters = []
    for character in data.characters:
        if character.voice_id is None and voices.get(character.id):
            character = character.model_copy(update={"voice_id": voices[character.id]})
        characters.append(character)
    return storyboard.model_copy(
        update={"characters": characters, "style": data.image_style.model_copy()}
    )


def _apply_script(storyboard: Storyboard, data: ScriptInput) -> Storyboard:
    placed: Dict[str, Act] = {}
    for act in storyboard.acts:
        for scene_id in act.scene_ids:
            placed[scene_id] = act
    known = {scene.id: scene for scene in storyboard.scenes}
    scenes = list(storyboard.scenes)
    for edited in data.scenes:
        act = placed.get(edited.id)
        if act is not None and edited.id in known:
            # numbering and title belong to the structure step
            skeleton = known[edited.id]
            edited = edited.model_copy(
                update={
                    "act_number": skeleton.act_number,
                    "scene_number": skeleton.scene_number,
                    "title": skeleton.title,
                }
            )
            scenes = [edited if s.id == edited.id else s for s in scenes]
        else:
            logger.debug(f"Scene {edited.id} is not part of any act")
            scenes = [s for s in scenes if s.id != edited.id] + [edited]
    return storyboard.model_copy(update={"scenes": scenes})


def _apply_voices(storyboard: Storyboard, data: VoiceInput) -> Storyboard:
    overrides = {cid: setting.voice_id for cid, setting in data.voice_settings.items()}
    characters = [
        c.model_copy(update={"voice_id": overrides[c.id]}) if c.id in overrides else c
        for c in storyboard.characters
    ]
    audio = storyboard.audio.model_copy(update={"voice_overrides": overrides})
    return storyboard.model_copy(update={"characters": characters, "audio": audio})


def _apply_audio_caption(storyboard: Storyboard, data: AudioCaptionInput) -> Storyboard:
    audio = storyboard.audio.model_copy(update={"bgm": data.bgm.model_copy()})
    return storyboard.model_copy(update={"audio": audio, "caption": data.caption.model_copy()})


def _apply_confirmation(storyboard: Storyboard, data: ConfirmInput) -> Storyboard:
    update: Dict[str, Any] = {"description": data.description, "tags": list(data.tags)}
    if data.title:
        update["title"] = data.title
    return storyboard.model_copy(update=update)


_PROJECTIONS = {
    1: _apply_story,
    2: _apply_structure,
    3: _apply_cast,
    4: _apply_script,
    5: _apply_voices,
    6: _apply_audio_caption,
    7: _apply_confirmation,
}


def apply_step(storyboard: Storyboard, step: int, data: WireModel) -> Storyboard:
    """Return a new storyboard with the accepted input of ``step`` folded in."""
    return _PROJECTIONS[step](storyboard, data)


def reset_sections(storyboard: Storyboard, steps: Iterable[int]) -> Storyboard:
    """Clear the storyboard sections owned by ``steps``."""
    steps = set(steps)
    update: Dict[str, Any] = {}
    if 2 in steps:
        update["acts"] = []
        update["scenes"] = []
    if 3 in steps:
        update["characters"] = []
        update["style"] = ImageStyle()
    if 4 in steps and 2 not in steps:
        update["scenes"] = [
            Scene(
                id=s.id,
                act_number=s.act_number,
                scene_number=s.scene_number,
                title=s.title,
                summary=s.summary,
            )
            for s in storyboard.scenes
        ]
    if 5 in steps:
        if 3 not in steps:
            update["characters"] = [
                c.model_copy(update={"voice_id": None}) for c in storyboard.characters
            ]
        update["audio"] = AudioSettings(bgm=storyboard.audio.bgm)
    if 6 in steps:
        audio = update.get("audio", storyboard.audio)
        update["audio"] = audio.model_copy(update={"bgm": BgmChoice()})
        update["caption"] = CaptionChoice()
    if 7 in steps:
        update["description"] = ""
        update["tags"] = []
    return storyboard.model_copy(update=update)


def derive_step_input(
    storyboard: Storyboard, step: int, default_bgm_url: Optional[str] = None
) -> Optional[Dict[str, Any]]:
    """Build a default input for ``step`` from what the storyboard already holds.

    Used when a step has never been seeded by the generator.
    """
    if step == 2:
        acts = []
        for act in storyboard.acts:
            outlines = []
            for scene_id in act.scene_ids:
                scene = storyboard.scene(scene_id)
                if scene is None:
                    continue
                outlines.append(
                    {
                        "id": scene.id,
                        "sceneNumber": scene.scene_number,
                        "sceneTitle": scene.title,
                        "summary": scene.summary,
                    }
                )
            acts.append({"actNumber": act.act_number, "actTitle": act.title, "scenes": outlines})
        return {"title": storyboard.title, "acts": acts}
    if step == 3:
        return CastInput(
            characters=storyboard.characters, image_style=storyboard.style
        ).to_wire()
    if step == 4:
        ordered = []
        for act in sorted(storyboard.acts, key=lambda a: a.act_number):
            for scene_id in act.scene_ids:
                scene = storyboard.scene(scene_id)
                if scene is not None:
                    ordered.append(scene)
        return ScriptInput(scenes=ordered).to_wire()
    if step == 5:
        settings = {
            c.id: {"voiceId": c.voice_id}
            for c in storyboard.characters
            if c.voice_id
        }
        return {"voiceSettings": settings}
    if step == 6:
        bgm = storyboard.audio.bgm
        if not (bgm.selected or bgm.custom_url) and default_bgm_url:
            bgm = BgmChoice(selected=default_bgm_url, volume=DEFAULT_BGM_VOLUME)
        return AudioCaptionInput(bgm=bgm, caption=storyboard.caption).to_wire()
    if step == 7:
        return ConfirmInput(
            title=storyboard.title or None,
            description=storyboard.description,
            tags=storyboard.tags,
            confirmed=False,
        ).to_wire()
    return None
