import pytest

from storyflow.background import HeadlessRunner, step_progress
from storyflow.service import WorkflowService


def test_step_progress_values():
    assert [step_progress(i) for i in range(7)] == [12, 25, 38, 51, 64, 77, 90]


@pytest.mark.asyncio
async def test_headless_run_completes(scripted_service, payloads):
    runner = HeadlessRunner(scripted_service)

    status = await runner.run("alice", payloads[1])

    assert status.status == "completed"
    assert status.progress == 100
    assert status.error is None
    assert status.video_id == status.workflow_id
    workflow = await scripted_service.get_workflow(status.workflow_id, "alice")
    assert workflow.status == "completed"
    assert len(workflow.script["beats"]) == 4
    stored = await runner.get_status(status.run_id)
    assert stored.status == "completed"


@pytest.mark.asyncio
async def test_started_run_is_polled_until_done(scripted_service, payloads):
    runner = HeadlessRunner(scripted_service)

    run_id = await runner.start("alice", payloads[1])
    assert (await runner.get_status(run_id)).status in {"pending", "processing", "completed"}
    await runner.wait()

    status = await runner.get_status(run_id)
    assert status.status == "completed"
    assert status.progress == 100


@pytest.mark.asyncio
async def test_invalid_story_fails_the_run(scripted_service):
    runner = HeadlessRunner(scripted_service)

    status = await runner.run("alice", {"storyText": "x", "unexpected": True})

    assert status.status == "failed"
    assert "Invalid payload for step 1" in status.error
    assert status.current_step == "analyzing"


@pytest.mark.asyncio
async def test_run_without_content_fails(repository, config, payloads, scripted_generator):
    generator = scripted_generator(suggestions={})
    runner = HeadlessRunner(WorkflowService(repository, generator=generator, config=config))

    status = await runner.run("alice", payloads[1])

    assert status.status == "failed"
    assert "nothing to render" in status.error
    assert (await repository.get_run_status(status.run_id)).status == "failed"
