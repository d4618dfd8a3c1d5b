"""
Step Catalog for the CPR and Heimlich scenarios.

Each scenario is a fixed, hand-authored sequence of steps. The clinical
constants below are domain facts (resuscitation guidelines), not tunables,
so they are kept here rather than in Settings.
"""

from __future__ import annotations

from rescue_drill.catalog.models import (
    CountedAction,
    InvalidScenario,
    ScenarioProfile,
    ScenarioType,
    StepDefinition,
)

# =============================================================================
# Clinical constants
# =============================================================================

COMPRESSIONS_REQUIRED = 30
RESCUE_BREATHS_REQUIRED = 2
ABDOMINAL_THRUSTS_REQUIRED = 5

# Compressions per minute, inclusive on both ends
COMPRESSION_RATE_RANGE = (100, 120)
OFF_RATE_FACTOR = 0.8

CPR_OVERTIME_FACTOR = 0.7
HEIMLICH_OVERTIME_FACTOR = 0.8

CPR_SESSION_BUDGET_SECONDS = 5 * 60
HEIMLICH_SESSION_BUDGET_SECONDS = 7 * 60

KNOWLEDGE_BONUS_POINTS = 5

COMPRESSION_STEP_ID = "compression"

# Raw learner actions
CHEST_COMPRESSION = "chest-compression"
RESCUE_BREATH = "rescue-breath"
ABDOMINAL_THRUST = "abdominal-thrust"

CHEST_COMPRESSIONS_DONE = f"chest-compression-{COMPRESSIONS_REQUIRED}"
RESCUE_BREATHS_DONE = f"rescue-breath-{RESCUE_BREATHS_REQUIRED}"
THRUSTS_DONE = f"thrust-{ABDOMINAL_THRUSTS_REQUIRED}"


# =============================================================================
# CPR
# =============================================================================

_CPR_STEPS = (
    StepDefinition(
        id="check-consciousness",
        name="Check Consciousness",
        description="Tap patient's shoulders and shout loudly",
        instruction_text="Tap the patient's shoulder and shout to check for a response",
        required_actions=frozenset({"tap-shoulder", "shout"}),
        time_limit_seconds=30,
        base_points=20,
        video_path="videos/cpr/check-consciousness.mp4",
    ),
    StepDefinition(
        id="call-help",
        name="Call for Help",
        description="Immediately call for help and dial emergency services",
        instruction_text="Call for help, then dial the emergency number",
        required_actions=frozenset({"call-help", "call-emergency"}),
        time_limit_seconds=30,
        base_points=20,
        video_path="videos/cpr/call-help.mp4",
    ),
    StepDefinition(
        id="position",
        name="Position Patient",
        description="Place patient supine, tilt head back to open airway",
        instruction_text="Tilt the head back and lift the chin so the airway is clear",
        required_actions=frozenset({"position-head", "open-airway"}),
        time_limit_seconds=45,
        base_points=20,
        video_path="videos/cpr/position-patient.mp4",
    ),
    StepDefinition(
        id=COMPRESSION_STEP_ID,
        name="Chest Compressions",
        description=f"{COMPRESSIONS_REQUIRED} chest compressions, depth 5-6cm",
        instruction_text=(
            "Press on the lower half of the breastbone at "
            f"{COMPRESSION_RATE_RANGE[0]}-{COMPRESSION_RATE_RANGE[1]} compressions/minute"
        ),
        required_actions=frozenset({CHEST_COMPRESSIONS_DONE}),
        time_limit_seconds=120,
        base_points=25,
        video_path="videos/cpr/chest-compression.mp4",
    ),
    StepDefinition(
        id="ventilation",
        name="Rescue Breathing",
        description=f"{RESCUE_BREATHS_REQUIRED} rescue breaths",
        instruction_text=(
            f"Keep the head tilted back and give {RESCUE_BREATHS_REQUIRED} effective breaths"
        ),
        required_actions=frozenset({RESCUE_BREATHS_DONE}),
        time_limit_seconds=60,
        base_points=15,
        video_path="videos/cpr/rescue-breathing.mp4",
    ),
)

# =============================================================================
# Heimlich
# =============================================================================

_HEIMLICH_STEPS = (
    StepDefinition(
        id="identify-choking",
        name="Identify Choking",
        description="Observe patient symptoms, confirm if choking",
        instruction_text="Check breathing and look for the signs of choking",
        required_actions=frozenset({"check-breathing", "identify-signs"}),
        time_limit_seconds=30,
        base_points=25,
        video_path="videos/heimlich/identify-choking.mp4",
    ),
    StepDefinition(
        id="position-behind",
        name="Position Behind",
        description="Stand behind patient, wrap arms around",
        instruction_text="Stand behind the patient and wrap your arms around the waist",
        required_actions=frozenset({"stand-behind", "arms-around"}),
        time_limit_seconds=20,
        base_points=25,
        video_path="videos/heimlich/position-behind.mp4",
    ),
    StepDefinition(
        id="hand-position",
        name="Hand Position",
        description="Make a fist, position two fingers above navel",
        instruction_text="Make a fist and place it just above the navel, below the ribcage",
        required_actions=frozenset({"make-fist", "position-hands"}),
        time_limit_seconds=30,
        base_points=25,
        video_path="videos/heimlich/hand-position.mp4",
    ),
    StepDefinition(
        id="abdominal-thrust",
        name="Abdominal Thrusts",
        description="Quick thrusts inward and upward",
        instruction_text=f"Perform {ABDOMINAL_THRUSTS_REQUIRED} forceful abdominal thrusts",
        required_actions=frozenset({THRUSTS_DONE}),
        time_limit_seconds=60,
        base_points=25,
        video_path="videos/heimlich/abdominal-thrust.mp4",
    ),
)

_SCENARIOS: dict[ScenarioType, ScenarioProfile] = {
    ScenarioType.CPR: ScenarioProfile(
        scenario_type=ScenarioType.CPR,
        title="CPR Training Simulation",
        steps=_CPR_STEPS,
        session_budget_seconds=CPR_SESSION_BUDGET_SECONDS,
        overtime_factor=CPR_OVERTIME_FACTOR,
        counted_actions={
            CHEST_COMPRESSION: CountedAction(
                CHEST_COMPRESSION, COMPRESSIONS_REQUIRED, CHEST_COMPRESSIONS_DONE
            ),
            RESCUE_BREATH: CountedAction(RESCUE_BREATH, RESCUE_BREATHS_REQUIRED, RESCUE_BREATHS_DONE),
        },
    ),
    ScenarioType.HEIMLICH: ScenarioProfile(
        scenario_type=ScenarioType.HEIMLICH,
        title="Heimlich Maneuver Training",
        steps=_HEIMLICH_STEPS,
        session_budget_seconds=HEIMLICH_SESSION_BUDGET_SECONDS,
        overtime_factor=HEIMLICH_OVERTIME_FACTOR,
        counted_actions={
            ABDOMINAL_THRUST: CountedAction(
                ABDOMINAL_THRUST, ABDOMINAL_THRUSTS_REQUIRED, THRUSTS_DONE
            ),
        },
    ),
}


def get_scenario(scenario_type: ScenarioType | str) -> ScenarioProfile:
    """
    Look up the full profile of a scenario.

    Raises:
        InvalidScenario: If the scenario type is unknown
    """
    key = ScenarioType.parse(scenario_type)
    try:
        return _SCENARIOS[key]
    except KeyError:
        raise InvalidScenario(f"No steps authored for scenario {key.value!r}") from None


def get_steps(scenario_type: ScenarioType | str) -> tuple[StepDefinition, ...]:
    """Ordered steps of a scenario."""
    return get_scenario(scenario_type).steps


def action_choices(step: StepDefinition, profile: ScenarioProfile) -> list[str]:
    """
    Raw actions a learner can perform to satisfy a step.

    Counted requirements are replaced by the repeated action that feeds them.
    """
    feeds = {c.satisfies: c.action_id for c in profile.counted_actions.values()}
    return sorted(feeds.get(req, req) for req in step.required_actions)
