"""Content generation backed by pydantic_ai agents."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

from pydantic_ai import Agent

from ..errors import GenerationAdapterError
from ..models import STEP_MODELS, Storyboard
from .base import BaseContentGenerator

logger = logging.getLogger(__name__)

SYSTEM_PROMPTS: Dict[int, str] = {
    1: (
        "You structure a story premise into a title and acts made of numbered "
        "scenes. Respect the requested total number of scenes."
    ),
    2: (
        "You design the cast for a storyboard. Give every character a stable id, "
        "a name and a short visual description, and pick an image style preset."
    ),
    3: (
        "You write the script of each scene: spoken dialogue lines with the "
        "speaker's name, and one image prompt per scene. Keep the scene ids."
    ),
    4: (
        "You assign a text-to-speech voice id to each character id, choosing "
        "voices that fit the characters."
    ),
    5: "You choose background music and caption settings for the video.",
    6: "You write the final title, a one paragraph description and tags for the video.",
}


class AgentContentGenerator(BaseContentGenerator):
    """Ask one agent per step for the next step's input.

    Each agent's ``output_type`` is the payload model of the following step,
    so its result can be stored as that step's input without reshaping.
    """

    def __init__(self, model: str, agents: Optional[Dict[int, Agent]] = None):
        self.model = model
        self._agents: Dict[int, Agent] = dict(agents or {})

    def agent_for(self, step: int) -> Agent:
        agent = self._agents.get(step)
        if agent is None:
            agent = Agent(
                self.model,
                output_type=STEP_MODELS[step + 1],
                system_prompt=SYSTEM_PROMPTS[step],
            )
            self._agents[step] = agent
        return agent

    def build_prompt(
        self, step: int, data: Dict[str, Any], storyboard: Optional[Storyboard]
    ) -> str:
        parts = [f"Accepted input of step {step}:", json.dumps(data, ensure_ascii=False)]
        if storyboard is not None:
            parts += ["Current storyboard:", json.dumps(storyboard.to_wire(), ensure_ascii=False)]
        return "\n".join(parts)

    async def generate(
        self, step: int, data: Dict[str, Any], storyboard: Optional[Storyboard] = None
    ) -> Dict[str, Any]:
        if step + 1 not in STEP_MODELS:
            return {}
        prompt = self.build_prompt(step, data, storyboard)
        try:
            result = await self.agent_for(step).run(prompt)
        except Exception as exc:
            raise GenerationAdapterError(step, str(exc)) from exc
        output = result.output
        logger.debug(f"Agent for step {step} returned {type(output).__name__}")
        if hasattr(output, "to_wire"):
            return output.to_wire()
        if isinstance(output, dict):
            return output
        raise GenerationAdapterError(step, f"unexpected output type {type(output).__name__}")
