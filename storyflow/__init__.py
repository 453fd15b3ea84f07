"""storyflow: a seven-step story authoring pipeline and script compiler."""

from .background import HeadlessRunner
from .compiler import ScriptCompiler
from .config import StoryflowConfig, load_config
from .contracts import RenderSpecification, RunStatus, StepView, SubmitResult
from .errors import (
    GenerationAdapterError,
    InvalidStepError,
    NotActiveError,
    NotFoundError,
    StepValidationError,
    StoryflowError,
)
from .generation import BaseContentGenerator, NullContentGenerator, get_generator
from .machine import WorkflowStateMachine
from .merge import StepMerger
from .models import Storyboard
from .persistence import WorkflowRecord, get_repository
from .render import JsonFileRenderer, NullRenderer, get_renderer
from .service import WorkflowService
from .speakers import SpeakerResolver

__version__ = "0.1.0"
__all__ = [
    "BaseContentGenerator",
    "GenerationAdapterError",
    "HeadlessRunner",
    "InvalidStepError",
    "JsonFileRenderer",
    "NotActiveError",
    "NotFoundError",
    "NullContentGenerator",
    "NullRenderer",
    "RenderSpecification",
    "RunStatus",
    "ScriptCompiler",
    "SpeakerResolver",
    "StepMerger",
    "StepValidationError",
    "StepView",
    "Storyboard",
    "StoryflowConfig",
    "StoryflowError",
    "SubmitResult",
    "WorkflowRecord",
    "WorkflowService",
    "WorkflowStateMachine",
    "get_generator",
    "get_renderer",
    "get_repository",
    "load_config",
]
