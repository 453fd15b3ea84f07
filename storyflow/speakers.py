"""Bind free-text dialogue speaker labels to characters."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional

from .constants import FALLBACK_VOICE
from .models import Character


@dataclass(frozen=True)
class ResolvedSpeaker:
    voice_id: str
    display_name: str
    face_reference_url: Optional[str] = None
    character_id: Optional[str] = None


class SpeakerResolver:
    """Resolve speaker labels against a character list.

    Rules are tried in order and each rule is checked against every
    character before the next one is considered:

    1. the trimmed label equals the trimmed character name;
    2. one of the two contains the other (empty names never match);
    3. otherwise a fallback binding with the fallback voice.
    """

    def __init__(
        self,
        characters: Iterable[Character],
        voice_overrides: Optional[Mapping[str, str]] = None,
        fallback_voice: str = FALLBACK_VOICE,
    ):
        self.characters: List[Character] = list(characters)
        self.voice_overrides = dict(voice_overrides or {})
        self.fallback_voice = fallback_voice

    def match(self, label: str) -> Optional[Character]:
        """Return the character bound to ``label``, if any."""
        speaker = label.strip()
        if not speaker:
            return None
        named = [(c, c.name.strip()) for c in self.characters if c.name.strip()]
        for character, name in named:
            if name == speaker:
                return character
        for character, name in named:
            if name in speaker or speaker in name:
                return character
        return None

    def voice_for(self, character: Character) -> str:
        return (
            self.voice_overrides.get(character.id)
            or character.voice_id
            or self.fallback_voice
        )

    def resolve(self, label: str) -> ResolvedSpeaker:
        character = self.match(label)
        if character is None:
            return ResolvedSpeaker(voice_id=self.fallback_voice, display_name=label)
        return ResolvedSpeaker(
            voice_id=self.voice_for(character),
            display_name=label,
            face_reference_url=character.face_reference_url,
            character_id=character.id,
        )

    def resolve_all(self, labels: Iterable[str]) -> Dict[str, ResolvedSpeaker]:
        """Resolve distinct non-blank labels in first-appearance order."""
        resolved: Dict[str, ResolvedSpeaker] = {}
        for label in labels:
            if not label.strip() or label in resolved:
                continue
            resolved[label] = self.resolve(label)
        return resolved
