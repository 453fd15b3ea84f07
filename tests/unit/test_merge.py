import pytest

from storyflow.errors import InvalidStepError, StepValidationError
from storyflow.merge import MERGE_RULES, StepMerger


def _output(user_input):
    return {"userInput": user_input, "generatedContent": {}}


@pytest.fixture
def merger():
    return StepMerger()


def test_every_step_has_a_rule():
    assert sorted(MERGE_RULES) == [1, 2, 3, 4, 5, 6, 7]


@pytest.mark.parametrize("step", [2, 3, 5, 6, 7])
def test_shallow_merge_is_idempotent_for_noop_edits(merger, payloads, step):
    prior = payloads[step]
    assert merger.merge(step, prior, _output(prior)) == prior


@pytest.mark.parametrize("step", [1, 2, 3, 4, 5, 6, 7])
def test_no_prior_output_passes_input_through(merger, payloads, step):
    assert merger.merge(step, payloads[step], None) == payloads[step]
    assert merger.merge(step, payloads[step], {}) == payloads[step]


def test_shallow_merge_salvages_unset_fields(merger, payloads):
    merged = merger.merge(2, {"title": "A New Title"}, _output(payloads[2]))
    assert merged["title"] == "A New Title"
    assert merged["acts"] == payloads[2]["acts"]


def test_shallow_merge_new_input_wins(merger, payloads):
    new = {"bgm": {"selected": "none"}}
    merged = merger.merge(6, new, _output(payloads[6]))
    assert merged["bgm"] == {"selected": "none"}
    assert merged["caption"] == payloads[6]["caption"]


def test_complete_story_snapshot_replaces_new_input(merger, payloads):
    merged = merger.merge(1, {"storyText": "Something else"}, _output(payloads[1]))
    assert merged == payloads[1]


def test_complete_story_submission_replaces_prior_snapshot(merger, payloads):
    rewritten = dict(payloads[1], storyText="A fisherman hears a song under the ice.")
    merged = merger.merge(1, rewritten, _output(payloads[1]))
    assert merged == rewritten


def test_partial_story_snapshot_is_not_used(merger):
    merged = merger.merge(1, {"storyText": "New"}, _output({"storyText": "Old"}))
    assert merged == {"storyText": "New"}


def test_malformed_story_snapshot_is_ignored(merger, payloads):
    broken = dict(payloads[1], totalScenes=99)
    merged = merger.merge(1, {"storyText": "New"}, _output(broken))
    assert merged == {"storyText": "New"}


def test_scene_merge_keeps_hand_edits_by_id(merger):
    base = {
        "scenes": [
            {"id": "s1", "title": "Fresh title", "actNumber": 1, "sceneNumber": 1,
             "imagePrompt": "generated prompt", "dialogue": []},
            {"id": "s2", "title": "Second", "actNumber": 1, "sceneNumber": 2,
             "imagePrompt": "second prompt"},
        ]
    }
    prior = {
        "scenes": [
            {"id": "s1", "title": "Old title", "actNumber": 9, "sceneNumber": 9,
             "dialogue": [{"speaker": "Ann", "text": "Edited"}],
             "customImageUrl": "https://images.example.com/custom.png"},
            {"id": "gone", "imagePrompt": "dropped"},
        ]
    }

    merged = merger.merge(4, base, _output(prior))

    assert [scene["id"] for scene in merged["scenes"]] == ["s1", "s2"]
    first, second = merged["scenes"]
    assert first["title"] == "Fresh title"
    assert first["actNumber"] == 1
    assert first["sceneNumber"] == 1
    assert first["dialogue"] == [{"speaker": "Ann", "text": "Edited"}]
    assert first["customImageUrl"] == "https://images.example.com/custom.png"
    # the prior never set an image prompt for s1
    assert first["imagePrompt"] == "generated prompt"
    assert second == base["scenes"][1]


def test_dialogue_edit_does_not_touch_other_fields(merger, payloads):
    base = payloads[4]
    edited = {
        "scenes": [
            {"id": "scene-1-1", "dialogue": [{"speaker": "Gull", "text": "Squawk"}]}
        ]
    }
    merged = merger.merge(4, base, _output(edited))
    assert merged["scenes"][0]["dialogue"] == [{"speaker": "Gull", "text": "Squawk"}]
    assert merged["scenes"][0]["imagePrompt"] == base["scenes"][0]["imagePrompt"]
    assert merged["scenes"][1:] == base["scenes"][1:]


def test_scene_merge_without_scenes_keeps_new_input(merger, payloads):
    assert merger.merge(4, {}, _output(payloads[4])) == {}


@pytest.mark.parametrize(
    "payload",
    [
        None,
        ["not", "a", "mapping"],
        "text",
        {"title": "x", "unknown": 1},
        {"acts": "should be a list"},
    ],
)
def test_malformed_payloads_are_rejected(merger, payload):
    with pytest.raises(StepValidationError):
        merger.merge(2, payload, None)


def test_out_of_range_scene_count_is_rejected(merger, payloads):
    with pytest.raises(StepValidationError):
        merger.validate(1, dict(payloads[1], totalScenes=0))


def test_unknown_step_is_rejected(merger):
    with pytest.raises(InvalidStepError):
        merger.merge(8, {}, None)
    with pytest.raises(InvalidStepError):
        merger.validate(0, {})


def test_snake_case_input_is_normalized(merger):
    merged = merger.merge(5, {"voice_settings": {"a": {"voice_id": "nova"}}}, None)
    assert merged == {"voiceSettings": {"a": {"voiceId": "nova"}}}
