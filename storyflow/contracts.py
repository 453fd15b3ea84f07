"""Documents handed to callers: the render specification, step views and run status."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from .constants import FORMAT_VERSION
from .models import WireModel


class Beat(WireModel):
    """One spoken line plus the image prompt of its scene."""

    text: str
    speaker: str
    image_prompt: str = ""


class SpeakerBinding(WireModel):
    voice_id: str
    display_name: Dict[str, str] = Field(default_factory=dict)


class SpeechParams(WireModel):
    provider: str
    speakers: Dict[str, SpeakerBinding] = Field(default_factory=dict)


class ImageSource(WireModel):
    kind: Literal["url"] = "url"
    url: str


class ImageReference(WireModel):
    type: Literal["image"] = "image"
    source: ImageSource


class ImageParams(WireModel):
    style: str
    model: str
    images: Optional[Dict[str, ImageReference]] = None


class BgmSource(WireModel):
    kind: Literal["url"] = "url"
    url: str


class AudioParams(WireModel):
    bgm: BgmSource
    bgm_volume: float


class CaptionParams(WireModel):
    lang: str
    styles: List[str] = Field(default_factory=list)


class FormatVersion(WireModel):
    version: str = FORMAT_VERSION


class RenderSpecification(WireModel):
    """The compiled script consumed by the external renderer."""

    mulmocast: FormatVersion = Field(default_factory=FormatVersion, alias="$mulmocast")
    title: str
    lang: str
    beats: List[Beat] = Field(default_factory=list)
    speech_params: SpeechParams
    image_params: ImageParams
    audio_params: Optional[AudioParams] = None
    caption_params: Optional[CaptionParams] = None

    @property
    def is_empty(self) -> bool:
        """``True`` when there is nothing to render."""
        return not self.beats

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class StepView(WireModel):
    step: int
    input: Optional[Dict[str, Any]] = None
    output: Optional[Dict[str, Any]] = None
    can_edit: bool = False


class SubmitResult(WireModel):
    """Outcome of a single step submission."""

    workflow_id: str
    step: int
    current_step: int
    status: str
    suggestion: Dict[str, Any] = Field(default_factory=dict)
    script: Optional[Dict[str, Any]] = None
    render_ref: Optional[str] = None


class RunStatus(WireModel):
    """Polled status of a headless run."""

    run_id: str
    status: Literal["pending", "processing", "completed", "failed"] = "pending"
    current_step: Optional[str] = None
    progress: int = Field(default=0, ge=0, le=100)
    message: Optional[str] = None
    error: Optional[str] = None
    video_id: Optional[str] = None
    workflow_id: Optional[str] = None
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
