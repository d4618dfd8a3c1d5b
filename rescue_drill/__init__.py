"""
rescue-drill: skills trainer for emergency procedures.

Drives a learner through CPR and Heimlich maneuver scenarios:
- Knowledge tests gate each step
- Instruction shows the technique
- Practice measures simulated actions (compressions, breaths, thrusts)
- A global countdown bounds the whole session
"""

__version__ = "1.0.0"


class RescueDrillError(Exception):
    """Base class for all rescue-drill errors."""
