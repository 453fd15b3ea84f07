import copy

import pytest

from storyflow.config import StoryflowConfig
from storyflow.generation import BaseContentGenerator, NullContentGenerator
from storyflow.models import STEP_MODELS, Storyboard
from storyflow.persistence import InMemoryWorkflowRepository
from storyflow.service import WorkflowService
from storyflow.storyboard import apply_step

STORY = {
    "storyText": "A lighthouse keeper finds a message in a bottle.",
    "characters": "The keeper and a talkative gull",
    "dramaticTurningPoint": "The letter is addressed to him",
    "futureVision": "He sails out to meet the writer",
    "learnings": "Nobody is as alone as they think",
    "totalScenes": 3,
    "settings": {"style": "gentle", "language": "en"},
}

STRUCTURE = {
    "title": "The Bottle",
    "acts": [
        {
            "actNumber": 1,
            "actTitle": "Discovery",
            "scenes": [
                {"sceneNumber": 1, "sceneTitle": "Shore", "summary": "A storm washes up a bottle"},
                {"sceneNumber": 2, "sceneTitle": "Letter", "summary": "He reads the letter"},
            ],
        },
        {
            "actNumber": 2,
            "actTitle": "Reply",
            "scenes": [
                {"sceneNumber": 1, "sceneTitle": "Answer", "summary": "He writes back"},
            ],
        },
    ],
}

CAST = {
    "characters": [
        {
            "id": "keeper",
            "name": "Keeper",
            "description": "An old lighthouse keeper",
            "faceReferenceUrl": "https://images.example.com/keeper.png",
        },
        {"id": "gull", "name": "Gull", "description": "A curious seagull"},
    ],
    "imageStyle": {"preset": "watercolor"},
}

SCRIPT = {
    "scenes": [
        {
            "id": "scene-1-1",
            "imagePrompt": "a lighthouse in a storm",
            "dialogue": [
                {"speaker": "Keeper", "text": "Another storm."},
                {"speaker": "Narrator", "text": "He walked down to the shore."},
            ],
        },
        {
            "id": "scene-1-2",
            "imagePrompt": "a letter by candlelight",
            "dialogue": [{"speaker": "Keeper", "text": "Who wrote this?"}],
        },
        {
            "id": "scene-2-1",
            "imagePrompt": "sunrise over the sea",
            "dialogue": [{"speaker": "Narrator", "text": "The answer came at dawn."}],
        },
    ]
}

VOICES = {"voiceSettings": {"keeper": {"voiceId": "onyx"}}}

AUDIO = {
    "bgm": {"selected": "https://audio.example.com/theme.mp3", "volume": 0.3},
    "caption": {"enabled": True, "language": "en"},
}

CONFIRM = {
    "title": "The Bottle",
    "description": "A short tale about a letter",
    "tags": ["sea", "letters"],
    "confirmed": True,
}

PAYLOADS = {1: STORY, 2: STRUCTURE, 3: CAST, 4: SCRIPT, 5: VOICES, 6: AUDIO, 7: CONFIRM}


class ScriptedGenerator(BaseContentGenerator):
    """Suggest the stored payload of the following step and record each call."""

    def __init__(self, suggestions=None, error=None):
        self.suggestions = suggestions if suggestions is not None else {
            step - 1: payload for step, payload in PAYLOADS.items() if step > 1
        }
        self.error = error
        self.calls = []

    async def generate(self, step, data, storyboard=None):
        self.calls.append(step)
        if self.error is not None:
            raise self.error
        return copy.deepcopy(self.suggestions.get(step, {}))


@pytest.fixture
def payloads():
    return copy.deepcopy(PAYLOADS)


@pytest.fixture
def repository():
    return InMemoryWorkflowRepository()


@pytest.fixture
def config():
    return StoryflowConfig()


@pytest.fixture
def service(repository, config):
    return WorkflowService(repository, generator=NullContentGenerator(), config=config)


@pytest.fixture
def scripted_service(repository, config):
    return WorkflowService(repository, generator=ScriptedGenerator(), config=config)


@pytest.fixture
def storyboard(payloads):
    """Storyboard with steps 1 to 6 folded in."""
    board = Storyboard()
    for step in range(1, 7):
        board = apply_step(board, step, STEP_MODELS[step].model_validate(payloads[step]))
    return board


@pytest.fixture
def submit_through(payloads):
    async def _submit(service, workflow_id, last, owner_id=None):
        result = None
        for step in range(1, last + 1):
            result = await service.submit_step(workflow_id, step, payloads[step], owner_id)
        return result

    return _submit


@pytest.fixture
def scripted_generator():
    """Factory for ``ScriptedGenerator`` instances."""
    return ScriptedGenerator
