"""Routing of action tags (the ``B`` field) to product fold states."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

LOGGER = logging.getLogger(__name__)


class FoldState(str, Enum):
    UNFOLDED = "UNFOLDED"
    FOLDED = "FOLDED"


DEFAULT_ACTIONS: Mapping[FoldState, Sequence[str]] = {
    FoldState.UNFOLDED: ("Walk", "Sit", "Turn", "Stand", "Rest"),
    FoldState.FOLDED: ("Lift", "Pack", "Carry", "Trunk"),
}


class UnknownActionError(ValueError):
    """Raised when an action has no fold state mapping."""


class DuplicateActionError(ValueError):
    """Raised when registering an action that is already mapped."""


@dataclass(frozen=True, slots=True)
class ReferenceImage:
    id: str
    url: str
    state: FoldState
    tags: Sequence[str] = ()

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ReferenceImage":
        return cls(
            id=str(data["id"]),
            url=str(data["url"]),
            state=FoldState(str(data["state"]).upper()),
            tags=tuple(str(tag) for tag in data.get("tags", ())),
        )


@dataclass(slots=True)
class RouteResult:
    state: FoldState
    reference_images: List[ReferenceImage] = field(default_factory=list)
    allowed_actions: List[str] = field(default_factory=list)


_STATE_LABELS = {FoldState.UNFOLDED: "unfolded", FoldState.FOLDED: "folded"}


class StateRouter:
    """Maps action tags to fold states and the reference imagery for them.

    Action names are matched case-sensitively.
    """

    def __init__(
        self,
        actions: Optional[Mapping[Any, Iterable[str]]] = None,
        reference_images: Iterable[ReferenceImage] = (),
    ) -> None:
        source = DEFAULT_ACTIONS if actions is None else actions
        self._actions: Dict[FoldState, List[str]] = {state: [] for state in FoldState}
        for state, names in source.items():
            for name in names:
                existing = self.classify(name)
                if existing is not None:
                    raise DuplicateActionError(f"Action '{name}' is already mapped to {existing.value}")
                self._actions[FoldState(state)].append(name)
        self._images = list(reference_images)

    @classmethod
    def from_settings(cls, settings: Any) -> "StateRouter":
        images = [ReferenceImage.from_mapping(image) for image in settings.reference_images]
        return cls(settings.actions, images)

    def classify(self, action: str) -> Optional[FoldState]:
        """Return the fold state for ``action`` or ``None`` when it is unmapped."""
        for state, names in self._actions.items():
            if action in names:
                return state
        return None

    def determine_state(self, action: str) -> FoldState:
        state = self.classify(action)
        if state is None:
            raise UnknownActionError(
                f"Unknown action '{action}'. Add a fold state mapping for it to the configuration."
            )
        return state

    def route(self, action: str) -> RouteResult:
        state = self.determine_state(action)
        return RouteResult(
            state=state,
            reference_images=self.reference_images_for(state),
            allowed_actions=self.allowed_actions(state),
        )

    def batch_route(self, actions: Iterable[str]) -> List[RouteResult]:
        return [self.route(action) for action in actions]

    def reference_images_for(self, state: FoldState) -> List[ReferenceImage]:
        return [image for image in self._images if image.state is state]

    def allowed_actions(self, state: FoldState) -> List[str]:
        return list(self._actions[FoldState(state)])

    def all_actions(self) -> List[str]:
        return [name for state in FoldState for name in self._actions[state]]

    def is_valid_action(self, action: str) -> bool:
        return self.classify(action) is not None

    def add_action(self, action: str, state: FoldState) -> None:
        if self.is_valid_action(action):
            raise DuplicateActionError(f"Action '{action}' is already mapped")
        self._actions[FoldState(state)].append(action)
        LOGGER.debug("Registered action %s as %s", action, FoldState(state).value)

    def switch_suggestion(self, current_action: str, target_action: str) -> str:
        """Describe the fold change needed to move between two actions."""

        current = self.determine_state(current_action)
        target = self.determine_state(target_action)
        if current is target:
            return f"Keep {_STATE_LABELS[current]} state"
        return f"Switch from {_STATE_LABELS[current]} to {_STATE_LABELS[target]} state"


__all__ = [
    "DEFAULT_ACTIONS",
    "DuplicateActionError",
    "FoldState",
    "ReferenceImage",
    "RouteResult",
    "StateRouter",
    "UnknownActionError",
]
