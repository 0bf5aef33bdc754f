import pytest

from creative_ingest.config import IngestionSettings
from creative_ingest.state_router import (
    DuplicateActionError,
    FoldState,
    ReferenceImage,
    StateRouter,
    UnknownActionError,
)


@pytest.fixture()
def images():
    return [
        ReferenceImage(id="img_001", url="/images/unfolded_walk.jpg", state=FoldState.UNFOLDED, tags=("walk",)),
        ReferenceImage(id="img_002", url="/images/folded_lift.jpg", state=FoldState.FOLDED, tags=("lift",)),
        ReferenceImage(id="img_003", url="/images/unfolded_sit.jpg", state=FoldState.UNFOLDED, tags=("sit",)),
    ]


@pytest.fixture()
def router(images) -> StateRouter:
    return StateRouter(reference_images=images)


@pytest.mark.parametrize("action", ["Walk", "Sit", "Turn", "Stand", "Rest"])
def test_unfolded_actions(router: StateRouter, action: str) -> None:
    assert router.determine_state(action) is FoldState.UNFOLDED


@pytest.mark.parametrize("action", ["Lift", "Pack", "Carry", "Trunk"])
def test_folded_actions(router: StateRouter, action: str) -> None:
    assert router.determine_state(action) is FoldState.FOLDED


def test_unknown_action_message_suggests_mapping(router: StateRouter) -> None:
    with pytest.raises(UnknownActionError, match="Unknown action 'InvalidAction'") as excinfo:
        router.determine_state("InvalidAction")

    assert "Add a fold state mapping" in str(excinfo.value)


@pytest.mark.parametrize("action", ["walk", "WALK", "", "Walk "])
def test_matching_is_case_sensitive_and_exact(router: StateRouter, action: str) -> None:
    assert router.classify(action) is None
    assert not router.is_valid_action(action)
    with pytest.raises(UnknownActionError):
        router.determine_state(action)


def test_route_returns_images_and_allowed_actions(router: StateRouter) -> None:
    result = router.route("Walk")

    assert result.state is FoldState.UNFOLDED
    assert [image.id for image in result.reference_images] == ["img_001", "img_003"]
    assert result.allowed_actions == ["Walk", "Sit", "Turn", "Stand", "Rest"]


def test_route_without_images_returns_empty_list() -> None:
    assert StateRouter().route("Lift").reference_images == []


def test_batch_route(router: StateRouter) -> None:
    states = [result.state for result in router.batch_route(["Walk", "Lift", "Sit", "Pack"])]

    assert states == [FoldState.UNFOLDED, FoldState.FOLDED, FoldState.UNFOLDED, FoldState.FOLDED]


def test_batch_route_stops_on_unknown_action(router: StateRouter) -> None:
    with pytest.raises(UnknownActionError):
        router.batch_route(["Walk", "InvalidAction", "Sit"])


def test_all_actions_lists_unfolded_first_without_duplicates(router: StateRouter) -> None:
    actions = router.all_actions()

    assert actions[:5] == ["Walk", "Sit", "Turn", "Stand", "Rest"]
    assert set(actions[5:]) == {"Lift", "Pack", "Carry", "Trunk"}
    assert len(actions) == len(set(actions))


def test_add_action(router: StateRouter) -> None:
    router.add_action("Run", FoldState.UNFOLDED)
    router.add_action("Collapse", FoldState.FOLDED)

    assert router.determine_state("Run") is FoldState.UNFOLDED
    assert router.determine_state("Collapse") is FoldState.FOLDED
    assert "Run" in router.all_actions()


def test_add_existing_action_is_rejected(router: StateRouter) -> None:
    with pytest.raises(DuplicateActionError, match="Walk"):
        router.add_action("Walk", FoldState.FOLDED)


def test_add_action_does_not_leak_between_routers() -> None:
    StateRouter().add_action("Jump", FoldState.UNFOLDED)

    assert not StateRouter().is_valid_action("Jump")


@pytest.mark.parametrize(
    "current, target, expected",
    [
        ("Walk", "Sit", "Keep unfolded state"),
        ("Lift", "Pack", "Keep folded state"),
        ("Walk", "Lift", "Switch from unfolded to folded state"),
        ("Lift", "Walk", "Switch from folded to unfolded state"),
    ],
)
def test_switch_suggestion(router: StateRouter, current: str, target: str, expected: str) -> None:
    assert router.switch_suggestion(current, target) == expected


def test_custom_vocabulary_from_settings() -> None:
    settings = IngestionSettings(
        actions={"UNFOLDED": ["Stroll"], "FOLDED": ["Stow"]},
        reference_images=[{"id": "a", "url": "/a.jpg", "state": "folded", "tags": ["stow"]}],
    )

    router = StateRouter.from_settings(settings)

    assert router.determine_state("Stow") is FoldState.FOLDED
    assert not router.is_valid_action("Walk")
    assert router.route("Stow").reference_images[0].tags == ("stow",)


def test_unicode_and_special_action_names_can_be_added() -> None:
    router = StateRouter()
    router.add_action("走る", FoldState.UNFOLDED)
    router.add_action("Walk-Fast!", FoldState.UNFOLDED)

    assert router.determine_state("走る") is FoldState.UNFOLDED
    assert router.determine_state("Walk-Fast!") is FoldState.UNFOLDED


def test_action_mapped_to_both_states_is_rejected() -> None:
    with pytest.raises(DuplicateActionError, match="Lift"):
        StateRouter({"UNFOLDED": ["Walk", "Lift"], "FOLDED": ["Lift"]})


def test_action_listed_twice_in_one_state_is_rejected() -> None:
    with pytest.raises(DuplicateActionError, match="Walk"):
        StateRouter({"UNFOLDED": ["Walk", "Walk"]})
