"""
Situation map - hand-curated, ordered action tags per Situation.

Lists may repeat a tag; the catalog shows it once, at its first position.
Fixed bar tags listed here are filtered out by the catalog.
"""

from typing import Dict, List

from ..models.enums import Situation
from .tags import ActionTag as T


MOTOR_REGIME = [T.A3, T.A5, T.A4, T.A6]
ADD_SAILS = [T.A27, T.A30, T.A29, T.A28]
STEERING = [T.A25, T.A25R, T.A26]
MODIFY_AWA = [T.A39, T.A40, T.A43, T.A44]
SAIL_SHAPE = [T.A41, T.A42, T.A27W, T.A27WR]
SAIL_PLAN = [T.A29, T.A29R, T.A30, T.A30R, T.A31, T.A31R, T.A32, T.A32R, T.A28]
REEF = [T.A33R, T.A33F, T.A34, T.A35F, T.A35R, T.A36, T.A37, T.A38]
COASTAL_NAVIGATION = [T.A50, T.A24, T.A21, T.A23, T.A20]
OPEN_SEA_NAVIGATION = [T.A24, T.A21, T.A23, T.A20]
ENTER_ZONE = [T.A11HR, T.A11AR, T.A11BR]
TRAFFIC_LANE_EXITS = [T.A13, T.A14, T.A15]


S3_TAGS = [T.A11H, T.A11A, T.A11B, T.A9] + MOTOR_REGIME + [T.A10, T.A8M, T.A8A, T.A49, T.A1R]

S44_TAGS = MOTOR_REGIME + STEERING + ADD_SAILS + [T.A23, T.A24, T.A21, T.A12]

S54_TAGS = MODIFY_AWA + STEERING + SAIL_PLAN + REEF + SAIL_SHAPE + OPEN_SEA_NAVIGATION + [T.A12]

S54W_TAGS = REEF + MODIFY_AWA + STEERING + SAIL_PLAN + SAIL_SHAPE + OPEN_SEA_NAVIGATION + [T.A12]


SITUATION_MAP: Dict[Situation, List[T]] = {
    Situation.S1_PREPARING_TRIP: [T.A1] + MOTOR_REGIME + [T.A1A, T.A2],
    Situation.S2_TRIP_STARTED: [T.A7M, T.A7A] + MOTOR_REGIME + [T.A1R, T.A2],
    Situation.S3_IN_HARBOUR_AREA: S3_TAGS,

    Situation.S41_COASTAL_MOTOR:
        MOTOR_REGIME + ADD_SAILS + COASTAL_NAVIGATION + STEERING + [T.A13, T.A14, T.A15, T.A16],
    Situation.S42_PROTECTED_MOTOR:
        MOTOR_REGIME + ADD_SAILS + COASTAL_NAVIGATION + STEERING + [T.A12, T.A14, T.A16],
    Situation.S43_WATERWAY_MOTOR:
        MOTOR_REGIME + [T.A50, T.A24] + STEERING + ADD_SAILS + [T.A12, T.A15, T.A16],
    Situation.S44_OPEN_SEA_MOTOR: S44_TAGS,
    Situation.S45_TRAFFIC_LANE_MOTOR: S44_TAGS + TRAFFIC_LANE_EXITS,

    Situation.S51_COASTAL_SAIL:
        MODIFY_AWA + SAIL_SHAPE + SAIL_PLAN + COASTAL_NAVIGATION + STEERING + REEF
        + [T.A13, T.A14, T.A15, T.A16] + MOTOR_REGIME,
    Situation.S52_PROTECTED_SAIL:
        MODIFY_AWA + SAIL_PLAN + SAIL_SHAPE + STEERING + REEF + COASTAL_NAVIGATION
        + [T.A12, T.A14, T.A16] + MOTOR_REGIME,
    Situation.S53_WATERWAY_SAIL:
        MODIFY_AWA + STEERING + SAIL_PLAN + SAIL_SHAPE + REEF + COASTAL_NAVIGATION
        + [T.A12, T.A15, T.A16] + MOTOR_REGIME,
    Situation.S54_OPEN_SEA_SAIL: S54_TAGS,
    Situation.S55_TRAFFIC_LANE_SAIL: S54_TAGS + TRAFFIC_LANE_EXITS,

    # Strong wind: reefing comes first
    Situation.S51W_COASTAL_SAIL_STRONG:
        REEF + MODIFY_AWA + SAIL_SHAPE + SAIL_PLAN + COASTAL_NAVIGATION + STEERING
        + [T.A13, T.A14, T.A15, T.A16] + MOTOR_REGIME,
    Situation.S52W_PROTECTED_SAIL_STRONG:
        REEF + MODIFY_AWA + SAIL_PLAN + SAIL_SHAPE + STEERING + COASTAL_NAVIGATION
        + [T.A12, T.A14, T.A16] + MOTOR_REGIME,
    Situation.S53W_WATERWAY_SAIL_STRONG:
        REEF + MODIFY_AWA + STEERING + SAIL_PLAN + SAIL_SHAPE + COASTAL_NAVIGATION
        + [T.A12, T.A15, T.A16] + MOTOR_REGIME,
    Situation.S54W_OPEN_SEA_SAIL_STRONG: S54W_TAGS,
    Situation.S55W_TRAFFIC_LANE_SAIL_STRONG: S54W_TAGS + TRAFFIC_LANE_EXITS,

    Situation.S6_APPROACH_MOTOR: MOTOR_REGIME + ENTER_ZONE + STEERING + [T.A12],
    Situation.S6S_APPROACH_SAIL:
        [T.A27R, T.A28, T.A29R, T.A30R, T.A31R, T.A32R] + ENTER_ZONE + STEERING + [T.A12] + MOTOR_REGIME,
    Situation.S7_HARBOUR_STOPPED: S3_TAGS,

    Situation.S8_STORM:
        REEF + SAIL_PLAN + [T.A39, T.A40, T.A43, T.A44, T.A41, T.A42] + STEERING
        + [T.A27R, T.A17, T.A18, T.A45, T.A46, T.A47, T.A48, T.A51, T.A20, T.A19],
    Situation.S9_DANGER_LIGHT_WIND:
        [T.A19, T.A23, T.A21, T.A20, T.A24] + SAIL_PLAN + MODIFY_AWA + SAIL_SHAPE + REEF + STEERING
        + [T.A16] + MOTOR_REGIME,
    Situation.S9W_DANGER_STRONG_WIND:
        [T.A19, T.A23, T.A21, T.A20, T.A24] + SAIL_PLAN + REEF + MODIFY_AWA + SAIL_SHAPE + STEERING
        + [T.A16] + MOTOR_REGIME,

    Situation.E1_MOB: [T.EM1, T.EM4, T.EM7, T.EM8, T.EM13, T.EM14],
    Situation.E2_FIRE: [T.EM1, T.EM8, T.EM4, T.EM7, T.EM12, T.EM13, T.EM14],
    Situation.E3_MEDICAL: [
        T.EM13, T.EM1, T.EM2, T.EM4, T.EM5, T.EM8, T.EM9, T.EM7, T.EM13, T.EM14,
    ],
    Situation.E4_OTHER_EMERGENCY: [
        # PAN PAN (not medical)
        T.EM2, T.EM4, T.EM8, T.EM6, T.EM10, T.EM11, T.EM13, T.EM14,
        # Distress (not medical)
        T.EM1, T.EM4, T.EM8, T.EM6, T.EM7, T.EM12, T.EM14,
        # Mayday relay, assistance to others
        T.EM1R, T.EM2, T.EM3, T.EM8, T.EM4, T.EM7, T.EM11T, T.EM14,
    ],
}
