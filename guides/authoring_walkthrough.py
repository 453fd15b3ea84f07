"""Example walking a story through all seven steps with the in-memory repository."""

import asyncio
import json

from storyflow import WorkflowService
from storyflow.config import StoryflowConfig
from storyflow.persistence import InMemoryWorkflowRepository

STEPS = {
    1: {
        "storyText": "Two robots build a garden on the moon.",
        "characters": "Bolt, a careful engineer; Pip, a dreamer",
        "dramaticTurningPoint": "A seed finally sprouts",
        "futureVision": "The moon turns green",
        "learnings": "Patience grows things",
        "totalScenes": 2,
        "settings": {"language": "en"},
    },
    2: {
        "title": "Moon Garden",
        "acts": [
            {
                "actNumber": 1,
                "actTitle": "Planting",
                "scenes": [
                    {"sceneNumber": 1, "sceneTitle": "Dust", "summary": "Nothing grows"},
                    {"sceneNumber": 2, "sceneTitle": "Sprout", "summary": "Something grows"},
                ],
            }
        ],
    },
    3: {
        "characters": [
            {"id": "bolt", "name": "Bolt", "description": "square and silver"},
            {"id": "pip", "name": "Pip", "description": "round and orange"},
        ],
        "imageStyle": {"preset": "comic"},
    },
    4: {
        "scenes": [
            {
                "id": "scene-1-1",
                "imagePrompt": "two robots on grey dust",
                "dialogue": [
                    {"speaker": "Bolt", "text": "The soil is dead."},
                    {"speaker": "Pip the Dreamer", "text": "Not for long."},
                ],
            },
            {
                "id": "scene-1-2",
                "imagePrompt": "a single green sprout",
                "dialogue": [{"speaker": "Narrator", "text": "And then, a leaf."}],
            },
        ]
    },
    5: {"voiceSettings": {"bolt": {"voiceId": "onyx"}, "pip": {"voiceId": "nova"}}},
    6: {"bgm": {"selected": "none"}, "caption": {"enabled": True}},
    7: {"description": "A tiny space fable", "tags": ["robots"], "confirmed": True},
}


async def main():
    service = WorkflowService(InMemoryWorkflowRepository(), config=StoryflowConfig())
    workflow = await service.create_workflow("demo-user")

    for step, data in STEPS.items():
        result = await service.submit_step(workflow.id, step, data)
        print(f"step {step}: current_step={result.current_step} status={result.status}")

    # "Pip the Dreamer" resolves to Pip; "Narrator" falls back to the default voice
    print(json.dumps(result.script, indent=2))


if __name__ == "__main__":
    asyncio.run(main())
