"""Compile a storyboard into the render specification."""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional

from .config import CompilerConfig
from .constants import BGM_NONE, DEFAULT_TITLE, IMAGE_STYLE_PRESETS
from .contracts import (
    AudioParams,
    Beat,
    BgmSource,
    CaptionParams,
    FormatVersion,
    ImageParams,
    ImageReference,
    ImageSource,
    RenderSpecification,
    SpeakerBinding,
    SpeechParams,
)
from .models import Storyboard
from .speakers import SpeakerResolver

logger = logging.getLogger(__name__)

ResolverFactory = Callable[[Storyboard, CompilerConfig], SpeakerResolver]


def default_resolver(storyboard: Storyboard, config: CompilerConfig) -> SpeakerResolver:
    return SpeakerResolver(
        storyboard.characters,
        voice_overrides=storyboard.audio.voice_overrides,
        fallback_voice=config.fallback_voice,
    )


class ScriptCompiler:
    """Fold a storyboard into a ``RenderSpecification``.

    Compilation is pure: the same storyboard always yields the same beats
    and the same speaker table, with speakers keyed in first-appearance
    order. A storyboard without acts or dialogue compiles to a
    specification with no beats instead of raising.
    """

    def __init__(
        self,
        config: Optional[CompilerConfig] = None,
        resolver_factory: ResolverFactory = default_resolver,
    ):
        self.config = config or CompilerConfig()
        self.resolver_factory = resolver_factory

    def compile(self, storyboard: Storyboard) -> RenderSpecification:
        lang = storyboard.language or self.config.default_language
        beats = self.flatten(storyboard)
        spec = RenderSpecification(
            mulmocast=FormatVersion(version=self.config.format_version),
            title=storyboard.title or DEFAULT_TITLE,
            lang=lang,
            beats=beats,
            speech_params=self.speech_params(storyboard, beats, lang),
            image_params=self.image_params(storyboard),
            audio_params=self.audio_params(storyboard),
            caption_params=self.caption_params(storyboard, lang),
        )
        logger.info(
            f"Compiled storyboard {storyboard.id}: {len(spec.beats)} beats, "
            f"{len(spec.speech_params.speakers)} speakers"
        )
        return spec

    # ------------------------------------------------------------------
    def flatten(self, storyboard: Storyboard) -> List[Beat]:
        """Walk acts, their scenes, then each scene's dialogue."""
        scenes = {scene.id: scene for scene in storyboard.scenes}
        beats: List[Beat] = []
        for act in sorted(storyboard.acts, key=lambda a: a.act_number):
            for scene_id in act.scene_ids:
                scene = scenes.get(scene_id)
                if scene is None:
                    logger.debug(f"Skipping unknown scene {scene_id}")
                    continue
                for line in scene.dialogue:
                    beats.append(
                        Beat(
                            text=line.text,
                            speaker=line.speaker,
                            image_prompt=scene.image_prompt,
                        )
                    )
        return beats

    def speech_params(
        self, storyboard: Storyboard, beats: List[Beat], lang: str
    ) -> SpeechParams:
        resolver = self.resolver_factory(storyboard, self.config)
        resolved = resolver.resolve_all(beat.speaker for beat in beats)
        languages = list(dict.fromkeys([lang, "en"]))
        speakers: Dict[str, SpeakerBinding] = {
            label: SpeakerBinding(
                voice_id=speaker.voice_id,
                display_name={code: speaker.display_name for code in languages},
            )
            for label, speaker in resolved.items()
        }
        return SpeechParams(provider=self.config.speech_provider, speakers=speakers)

    def style_text(self, storyboard: Storyboard) -> str:
        style = storyboard.style
        if style.custom_prompt and style.custom_prompt.strip():
            return style.custom_prompt
        if style.preset and style.preset in IMAGE_STYLE_PRESETS:
            return IMAGE_STYLE_PRESETS[style.preset]
        return self.config.default_style

    def image_params(self, storyboard: Storyboard) -> ImageParams:
        images = {
            character.name: ImageReference(
                source=ImageSource(url=character.face_reference_url)
            )
            for character in storyboard.characters
            if character.face_reference_url
        }
        return ImageParams(
            style=self.style_text(storyboard),
            model=self.config.image_model,
            images=images or None,
        )

    def audio_params(self, storyboard: Storyboard) -> Optional[AudioParams]:
        bgm = storyboard.audio.bgm
        url = bgm.custom_url or bgm.selected
        if not url or url == BGM_NONE:
            return None
        volume = bgm.volume if bgm.volume is not None else self.config.bgm_volume
        return AudioParams(bgm=BgmSource(url=url), bgm_volume=volume)

    def caption_params(self, storyboard: Storyboard, lang: str) -> Optional[CaptionParams]:
        caption = storyboard.caption
        if not caption.enabled:
            return None
        return CaptionParams(
            lang=caption.language or lang,
            styles=list(caption.styles or self.config.caption_styles),
        )
