"""
Tier-gated onboarding state machine.

The sequencer walks a user through an ordered set of modules, each a fixed
ordered list of steps. It knows nothing about what a step renders; it only
tracks step ids and the payload each step hands to `advance`. Durable
progress (completed step ids and their payloads) goes through a ProgressStore
so a reload resumes in the right place. Positions are only reachable in
order: nothing past the resume point, and no step whose predecessors in the
module are still open.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Tuple


TIER_SUBSCRIBER = "Subscriber"
TIER_ADMIN = "Admin"


@dataclass(frozen=True)
class OnboardingStep:
    id: str
    title: str


@dataclass(frozen=True)
class OnboardingModule:
    key: str
    title: str
    completion_flag: str
    steps: Tuple[OnboardingStep, ...]


MODULES: Dict[str, OnboardingModule] = {
    "core": OnboardingModule(
        key="core",
        title="Core Setup",
        completion_flag="onboarding_completed",
        steps=(
            OnboardingStep("welcome", "Welcome"),
            OnboardingStep("market", "Business & Market"),
            OnboardingStep("preferences", "Preferences"),
            OnboardingStep("core-confirm", "Review"),
        ),
    ),
    "agents": OnboardingModule(
        key="agents",
        title="AI Agents",
        completion_flag="agent_onboarding_completed",
        steps=(
            OnboardingStep("integrations", "Connect Services"),
            OnboardingStep("customization", "Customize"),
            OnboardingStep("test", "Test Mode"),
        ),
    ),
    "callcenter": OnboardingModule(
        key="callcenter",
        title="Call Center",
        completion_flag="call_center_onboarding_completed",
        steps=(
            OnboardingStep("phone", "Phone Number"),
            OnboardingStep("voice", "Voice Selection"),
            OnboardingStep("identity", "Caller Identity"),
            OnboardingStep("workspace", "Google Workspace"),
            OnboardingStep("call-confirm", "Launch"),
        ),
    ),
}

MODULE_ORDER: Tuple[str, ...] = ("core", "agents", "callcenter")

COMPLETION_FLAGS: Tuple[str, ...] = tuple(MODULES[k].completion_flag for k in MODULE_ORDER)


class InvalidOnboardingState(Exception):
    """Unknown or unreachable module key or step index. Only a reset to the first module recovers."""


class ProgressStore(Protocol):
    def save_steps(self, completed_steps: List[str], step_data: Dict[str, Any]) -> None: ...

    def mark_module_complete(self, module_key: str) -> None: ...


def applicable_modules(tier: Optional[str], has_call_center: bool = False) -> List[str]:
    """Modules unlocked for a tier, always in core -> agents -> callcenter order."""
    modules = ["core"]
    if tier in (TIER_SUBSCRIBER, TIER_ADMIN):
        modules.append("agents")
    if has_call_center or tier == TIER_ADMIN:
        modules.append("callcenter")
    return modules


@dataclass
class OnboardingSequencer:
    active_modules: List[str]
    store: Optional[ProgressStore] = None
    current_module: Optional[str] = "core"
    current_step_index: int = 0
    completed_steps: List[str] = field(default_factory=list)
    step_data: Dict[str, Any] = field(default_factory=dict)
    resume_module: Optional[str] = None

    def __post_init__(self):
        for key in self.active_modules:
            if key not in MODULES:
                raise InvalidOnboardingState(f"Invalid module: {key}")
        # Keep the fixed adjacency order regardless of how the caller listed them
        self.active_modules = [k for k in MODULE_ORDER if k in self.active_modules]
        if self.resume_module is None and self.active_modules:
            self.resume_module = self.active_modules[0]

    @property
    def complete(self) -> bool:
        return self.current_module is None

    @property
    def module(self) -> OnboardingModule:
        if self.current_module not in MODULES or self.current_module not in self.active_modules:
            raise InvalidOnboardingState(f"Invalid module: {self.current_module}")
        return MODULES[self.current_module]

    @property
    def current_step(self) -> OnboardingStep:
        steps = self.module.steps
        if not 0 <= self.current_step_index < len(steps):
            raise InvalidOnboardingState(f"Invalid step: {self.current_step_index}")
        return steps[self.current_step_index]

    def start(self, progress: Optional[Dict[str, Any]]) -> "OnboardingSequencer":
        """Pick the resume point from persisted progress (None means a fresh user)."""
        progress = progress or {}
        self.completed_steps = list(dict.fromkeys(progress.get("completed_steps") or []))
        self.step_data = dict(progress.get("step_data") or {})
        self.current_step_index = 0
        self.current_module = None
        for key in self.active_modules:
            if not progress.get(MODULES[key].completion_flag):
                self.current_module = key
                break
        self.resume_module = self.current_module
        return self

    def _check_reachable(self) -> None:
        if self.resume_module is None:
            return
        order = self.active_modules
        if order.index(self.current_module) > order.index(self.resume_module):
            raise InvalidOnboardingState(f"Module {self.current_module} is not unlocked yet")
        if self.current_module == self.resume_module:
            open_steps = [
                s.id for s in self.module.steps[:self.current_step_index]
                if s.id not in self.completed_steps
            ]
            if open_steps:
                raise InvalidOnboardingState(f"Steps not completed yet: {', '.join(open_steps)}")

    def move_to(self, module_key: str, step_index: int) -> "OnboardingSequencer":
        """Position the sequencer explicitly, e.g. from the client's current page."""
        previous = (self.current_module, self.current_step_index)
        self.current_module, self.current_step_index = module_key, step_index
        try:
            self.current_step
            self._check_reachable()
        except InvalidOnboardingState:
            self.current_module, self.current_step_index = previous
            raise
        return self

    def reset(self) -> "OnboardingSequencer":
        self.current_module = self.active_modules[0]
        self.current_step_index = 0
        return self

    def _neighbour_module(self, offset: int) -> Optional[str]:
        index = self.active_modules.index(self.current_module) + offset
        if 0 <= index < len(self.active_modules):
            return self.active_modules[index]
        return None

    def advance(self, step_data: Any = None) -> "OnboardingSequencer":
        """Complete the current step. Persists before moving; a failed save leaves state untouched."""
        step = self.current_step
        completed = list(dict.fromkeys(self.completed_steps + [step.id]))
        payloads = {**self.step_data, step.id: step_data if step_data is not None else {}}
        if self.store is not None:
            self.store.save_steps(completed, payloads)
        self.completed_steps = completed
        self.step_data = payloads

        if self.current_step_index < len(self.module.steps) - 1:
            self.current_step_index += 1
            return self

        if self.store is not None:
            self.store.mark_module_complete(self.current_module)
        if self.current_module == self.resume_module:
            self.resume_module = self._neighbour_module(1)
        self.current_module = self._neighbour_module(1)
        self.current_step_index = 0
        return self

    def retreat(self) -> "OnboardingSequencer":
        if self.complete:
            return self
        self.current_step  # validates position
        if self.current_step_index > 0:
            self.current_step_index -= 1
            return self
        previous = self._neighbour_module(-1)
        if previous is not None:
            self.current_module = previous
            self.current_step_index = len(MODULES[previous].steps) - 1
        return self

    def snapshot(self) -> Dict[str, Any]:
        return {
            "module": self.current_module,
            "step_index": self.current_step_index,
            "step_id": None if self.complete else self.current_step.id,
            "complete": self.complete,
            "active_modules": list(self.active_modules),
            "completed_steps": list(self.completed_steps),
            "step_data": dict(self.step_data),
        }
