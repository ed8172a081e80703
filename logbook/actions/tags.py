"""
Action tags - the identifier of every operator action
"""

from enum import Enum


class ActionTag(str, Enum):
    """
    Stable identifiers of operator actions.

    A = situation actions, E = emergency triggers, AF = fixed bar tools,
    EM = emergency management. An R suffix is the reverse of the base action.
    """

    # Trip lifecycle
    A1 = "A1"
    A1R = "A1R"
    A1A = "A1A"
    A2 = "A2"

    # Motor regime
    A3 = "A3"
    A4 = "A4"
    A5 = "A5"
    A6 = "A6"

    # Cast off, mooring
    A7M = "A7M"
    A7A = "A7A"
    A8M = "A8M"
    A8A = "A8A"
    A9 = "A9"
    A10 = "A10"

    # Leave / enter harbour zones
    A11H = "A11H"
    A11HR = "A11HR"
    A11A = "A11A"
    A11AR = "A11AR"
    A11B = "A11B"
    A11BR = "A11BR"

    # Zones, approach, route
    A12 = "A12"
    A13 = "A13"
    A14 = "A14"
    A15 = "A15"
    A16 = "A16"
    A17 = "A17"
    A18 = "A18"
    A19 = "A19"
    A20 = "A20"
    A21 = "A21"
    A23 = "A23"
    A24 = "A24"

    # Autopilot
    A25 = "A25"
    A25R = "A25R"
    A26 = "A26"

    # Sail plan
    A27 = "A27"
    A27R = "A27R"
    A27W = "A27W"
    A27WR = "A27WR"
    A28 = "A28"
    A29 = "A29"
    A29R = "A29R"
    A30 = "A30"
    A30R = "A30R"
    A31 = "A31"
    A31R = "A31R"
    A32 = "A32"
    A32R = "A32R"

    # Reef and furl
    A33R = "A33R"
    A33F = "A33F"
    A34 = "A34"
    A35R = "A35R"
    A35F = "A35F"
    A36 = "A36"
    A37 = "A37"
    A38 = "A38"

    # Sailing geometry and storm tactics
    A39 = "A39"
    A40 = "A40"
    A41 = "A41"
    A42 = "A42"
    A43 = "A43"
    A44 = "A44"
    A45 = "A45"
    A46 = "A46"
    A47 = "A47"
    A48 = "A48"
    A49 = "A49"
    A50 = "A50"
    A51 = "A51"

    # Emergency triggers
    E1 = "E1"
    E2 = "E2"
    E3 = "E3"
    E4 = "E4"

    # Fixed bar
    AF1 = "AF1"
    AF2 = "AF2"
    AF2R = "AF2R"
    AF21 = "AF21"
    AF3N = "AF3N"
    AF3D = "AF3D"
    AF4 = "AF4"
    AF5 = "AF5"
    AF6 = "AF6"
    AF7 = "AF7"
    AF8 = "AF8"
    AF9 = "AF9"
    AF10 = "AF10"
    AF11 = "AF11"
    AF14 = "AF14"
    AF15 = "AF15"
    AF16 = "AF16"
    AF17 = "AF17"

    # Emergency management
    EM1 = "EM1"
    EM1R = "EM1R"
    EM2 = "EM2"
    EM3 = "EM3"
    EM4 = "EM4"
    EM5 = "EM5"
    EM6 = "EM6"
    EM7 = "EM7"
    EM8 = "EM8"
    EM9 = "EM9"
    EM10 = "EM10"
    EM11 = "EM11"
    EM11T = "EM11T"
    EM12 = "EM12"
    EM13 = "EM13"
    EM14 = "EM14"
