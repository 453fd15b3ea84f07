"""Command line interface for storyflow workflows."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Optional

import typer

from storyflow.background import HeadlessRunner
from storyflow.config import load_config
from storyflow.errors import StoryflowError
from storyflow.generation import get_generator
from storyflow.machine import WorkflowStateMachine
from storyflow.persistence import get_repository
from storyflow.render import get_renderer
from storyflow.service import WorkflowService

app = typer.Typer(help="CLI for storyflow authoring workflows")

# Command groups
workflow_app = typer.Typer(help="Commands for managing workflows")
step_app = typer.Typer(help="Commands for reading and submitting steps")
script_app = typer.Typer(help="Commands for compiled scripts")
run_app = typer.Typer(help="Commands for headless runs")

app.add_typer(workflow_app, name="workflow")
app.add_typer(step_app, name="step")
app.add_typer(script_app, name="script")
app.add_typer(run_app, name="run")


@app.callback()
def main(
    log_level: str = typer.Option("WARNING", help="Logging level for storyflow"),
) -> None:
    """storyflow CLI entry point."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _service() -> WorkflowService:
    config = load_config()
    return WorkflowService(
        get_repository(),
        generator=get_generator(config=config),
        renderer=get_renderer(config=config),
        config=config,
    )


def _fail(message: str) -> None:
    typer.secho(message, fg=typer.colors.RED)
    raise typer.Exit(code=1)


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        _fail(f"Cannot read {path}: {exc}")
    except json.JSONDecodeError as exc:
        _fail(f"{path} is not valid JSON: {exc}")


def _echo_json(data: Any) -> None:
    typer.echo(json.dumps(data, ensure_ascii=False, indent=2))


@workflow_app.command("create")
def workflow_create(owner: str = typer.Option(..., help="Owner id of the workflow")) -> None:
    """Create an empty workflow and print its id."""
    workflow = asyncio.run(_service().create_workflow(owner))
    typer.echo(workflow.id)


@workflow_app.command("list")
def workflow_list(owner: Optional[str] = typer.Option(None, help="Only this owner's workflows")) -> None:
    """
    List workflows with their status and current step.

    Example:
        storyflow workflow list --owner alice
        # Output: 0b6d...    active    step 3
    """
    repo = get_repository()
    workflows = asyncio.run(repo.list_workflows(owner))
    if not workflows:
        typer.echo("No workflows found")
        return
    for wf in workflows:
        typer.echo(f"{wf.id}\t{wf.status}\tstep {wf.current_step}")


@workflow_app.command("show")
def workflow_show(workflow_id: str) -> None:
    """Show a workflow's status and which steps hold data."""
    repo = get_repository()
    wf = asyncio.run(repo.get_workflow(workflow_id))
    if wf is None:
        _fail("Workflow not found")
    machine = WorkflowStateMachine()
    typer.echo(f"Workflow {wf.id}: {wf.status}")
    typer.echo(f"Owner: {wf.owner_id}")
    typer.echo(f"Current step: {wf.current_step} ({machine.progress(wf)}% complete)")
    for number, slot in enumerate(wf.steps, start=1):
        state = "done" if slot.output else ("seeded" if slot.input else "empty")
        typer.echo(f"- step {number}: {state}")
    if wf.script:
        typer.echo(f"Script: {len(wf.script.get('beats', []))} beats")


@step_app.command("show")
def step_show(
    workflow_id: str,
    step: int,
    owner: Optional[str] = typer.Option(None, help="Owner id to scope the lookup"),
) -> None:
    """Print the input, output and edit flag of one step as JSON."""
    try:
        view = asyncio.run(_service().read_step(workflow_id, step, owner))
    except StoryflowError as exc:
        _fail(str(exc))
    _echo_json(view.model_dump(mode="json", by_alias=True))


@step_app.command("submit")
def step_submit(
    workflow_id: str,
    step: int,
    data_file: Path,
    owner: Optional[str] = typer.Option(None, help="Owner id to scope the lookup"),
) -> None:
    """
    Submit the JSON document in DATA_FILE as the input of STEP.

    Example:
        storyflow step submit 0b6d... 1 premise.json
    """
    data = _read_json(data_file)
    try:
        result = asyncio.run(_service().submit_step(workflow_id, step, data, owner))
    except StoryflowError as exc:
        _fail(str(exc))
    typer.echo(f"Step {result.step} saved; current step {result.current_step}; {result.status}")
    if result.suggestion:
        typer.echo(f"Suggestion prepared for step {result.step + 1}")
    if result.render_ref:
        typer.echo(f"Render: {result.render_ref}")


@script_app.command("compile")
def script_compile(
    workflow_id: str,
    out: Optional[Path] = typer.Option(None, help="Write the script to this file"),
) -> None:
    """Compile the workflow's storyboard into a render script without completing it."""
    try:
        spec = asyncio.run(_service().preview_script(workflow_id))
    except StoryflowError as exc:
        _fail(str(exc))
    if spec.is_empty:
        typer.secho("Nothing to render yet", fg=typer.colors.YELLOW)
    if out is not None:
        out.write_text(json.dumps(spec.to_wire(), ensure_ascii=False, indent=2), encoding="utf-8")
        typer.echo(f"Wrote {out}")
    else:
        _echo_json(spec.to_wire())


@run_app.command("start")
def run_start(
    story_file: Path,
    owner: str = typer.Option(..., help="Owner id of the new workflow"),
) -> None:
    """Run all seven steps from the premise in STORY_FILE and print the final status."""
    story = _read_json(story_file)
    runner = HeadlessRunner(_service())
    status = asyncio.run(runner.run(owner, story))
    _echo_json(status.to_wire())
    if status.status == "failed":
        raise typer.Exit(code=1)


@run_app.command("status")
def run_status(run_id: str) -> None:
    """Print the status record of a headless run."""
    status = asyncio.run(get_repository().get_run_status(run_id))
    if status is None:
        _fail("Run not found")
    _echo_json(status.to_wire())


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    app()
