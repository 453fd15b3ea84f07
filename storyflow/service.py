"""Orchestration of step reads and submissions."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from .compiler import ScriptCompiler
from .config import StoryflowConfig, load_config
from .constants import TOTAL_STEPS
from .contracts import RenderSpecification, StepView, SubmitResult
from .errors import GenerationAdapterError, NotFoundError, StepValidationError
from .generation import BaseContentGenerator, NullContentGenerator
from .machine import WorkflowStateMachine
from .merge import StepMerger
from .models import Storyboard
from .persistence import WorkflowRecord, WorkflowRepository
from .render import BaseRenderer, NullRenderer
from .storyboard import apply_step, derive_step_input, reset_sections

logger = logging.getLogger(__name__)


class WorkflowService:
    """Run step submissions against a repository.

    One submission validates the payload and merges it with what the step
    stored before. It then invalidates downstream steps when a foundational
    step changes, folds the merged input into the storyboard, asks the
    generator for the next step's suggestion and persists the result.
    Confirming step 7 compiles the storyboard and hands the script to the
    renderer.
    """

    def __init__(
        self,
        repository: WorkflowRepository,
        generator: Optional[BaseContentGenerator] = None,
        renderer: Optional[BaseRenderer] = None,
        compiler: Optional[ScriptCompiler] = None,
        merger: Optional[StepMerger] = None,
        machine: Optional[WorkflowStateMachine] = None,
        config: Optional[StoryflowConfig] = None,
    ):
        self.config = config or load_config()
        self.repository = repository
        self.generator = generator or NullContentGenerator()
        self.renderer = renderer or NullRenderer()
        self.compiler = compiler or ScriptCompiler(self.config.compiler)
        self.merger = merger or StepMerger()
        self.machine = machine or WorkflowStateMachine()

    # ------------------------------------------------------------------
    async def create_workflow(self, owner_id: str) -> WorkflowRecord:
        storyboard = Storyboard(language=self.config.compiler.default_language)
        await self.repository.save_storyboard(storyboard)
        workflow = WorkflowRecord(owner_id=owner_id, storyboard_id=storyboard.id)
        await self.repository.create_workflow(workflow)
        logger.info(f"Created workflow {workflow.id} for owner {owner_id}")
        return workflow

    async def get_workflow(
        self, workflow_id: str, owner_id: Optional[str] = None
    ) -> WorkflowRecord:
        workflow = await self.repository.get_workflow(workflow_id, owner_id)
        if workflow is None:
            raise NotFoundError(workflow_id)
        return workflow

    async def get_storyboard(self, workflow: WorkflowRecord) -> Storyboard:
        storyboard = await self.repository.get_storyboard(workflow.storyboard_id)
        if storyboard is None:
            storyboard = Storyboard(
                id=workflow.storyboard_id, language=self.config.compiler.default_language
            )
        return storyboard

    async def read_step(
        self, workflow_id: str, step: int, owner_id: Optional[str] = None
    ) -> StepView:
        """Return the stored input and output of ``step`` and whether it is editable.

        A step that was never seeded gets an input derived from the storyboard.
        """
        step = self.machine.check_step(step)
        workflow = await self.get_workflow(workflow_id, owner_id)
        slot = workflow.slot(step)
        step_input = slot.input
        if step_input is None and step > 1:
            storyboard = await self.get_storyboard(workflow)
            step_input = derive_step_input(
                storyboard, step, self.config.compiler.default_bgm_url
            )
        return StepView(
            step=step,
            input=step_input,
            output=slot.output,
            can_edit=self.machine.can_edit(workflow, step),
        )

    async def submit_step(
        self,
        workflow_id: str,
        step: int,
        data: Any,
        owner_id: Optional[str] = None,
    ) -> SubmitResult:
        step = self.machine.check_step(step)
        workflow = await self.get_workflow(workflow_id, owner_id)
        self.machine.ensure_editable(workflow)
        logger.info(f"Workflow {workflow.id}: submitting step {step}")

        slot = workflow.slot(step)
        document = self.merger.merge(step, data, slot.output)
        accepted = self.merger.validate(step, document)

        storyboard = await self.get_storyboard(workflow)
        has_next = step < TOTAL_STEPS
        previous_next_output = workflow.slot(step + 1).output if has_next else None

        cleared = self.machine.invalidate(workflow, step)
        if cleared:
            storyboard = reset_sections(storyboard, cleared)
        if step + 1 in cleared:
            previous_next_output = None
        storyboard = apply_step(storyboard, step, accepted)

        suggestion = await self._generate(step, document, storyboard) if has_next else {}

        slot.output = {"userInput": document, "generatedContent": suggestion}
        slot.input = document
        if suggestion:
            workflow.slot(step + 1).input = self.merger.merge(
                step + 1, suggestion, previous_next_output
            )
        self.machine.advance(workflow, step)

        script: Optional[Dict[str, Any]] = None
        render_ref: Optional[str] = None
        if step == TOTAL_STEPS and accepted.confirmed:
            spec = self.compiler.compile(storyboard)
            if spec.is_empty:
                logger.warning(
                    f"Workflow {workflow.id}: nothing to render, leaving workflow active"
                )
            else:
                script = spec.to_wire()
                render_ref = await self.renderer.submit(workflow.id, script)
                workflow.script = script
                self.machine.complete(workflow)

        await self.repository.save_storyboard(storyboard)
        await self.repository.save_workflow(workflow)
        return SubmitResult(
            workflow_id=workflow.id,
            step=step,
            current_step=workflow.current_step,
            status=workflow.status,
            suggestion=suggestion,
            script=script,
            render_ref=render_ref,
        )

    async def preview_script(
        self, workflow_id: str, owner_id: Optional[str] = None
    ) -> RenderSpecification:
        """Compile the current storyboard without storing or handing it off."""
        workflow = await self.get_workflow(workflow_id, owner_id)
        return self.compiler.compile(await self.get_storyboard(workflow))

    # ------------------------------------------------------------------
    async def _generate(
        self, step: int, document: Dict[str, Any], storyboard: Storyboard
    ) -> Dict[str, Any]:
        """Ask for the next step's suggestion; failures yield an empty one."""
        try:
            suggestion = await self.generator.generate(step, document, storyboard)
        except GenerationAdapterError as exc:
            logger.warning(f"{exc}; continuing without a suggestion")
            return {}
        if not suggestion:
            return {}
        try:
            return self.merger.validate(step + 1, suggestion).to_wire()
        except StepValidationError as exc:
            logger.warning(f"Discarding unusable suggestion for step {step + 1}: {exc}")
            return {}
