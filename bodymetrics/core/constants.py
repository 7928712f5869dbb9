KINECT_JOINTS = [
    "spine_base",
    "spine_mid",
    "neck",
    "head",
    "shoulder_left",
    "elbow_left",
    "wrist_left",
    "hand_left",
    "shoulder_right",
    "elbow_right",
    "wrist_right",
    "hand_right",
    "hip_left",
    "knee_left",
    "ankle_left",
    "foot_left",
    "hip_right",
    "knee_right",
    "ankle_right",
    "foot_right",
    "spine_shoulder",
    "hand_tip_left",
    "thumb_left",
    "hand_tip_right",
    "thumb_right",
]

NOT_TRACKED = "not_tracked"
INFERRED = "inferred"
TRACKED = "tracked"
TRACKING_STATES = (NOT_TRACKED, INFERRED, TRACKED)

LEG_LEFT = ("hip_left", "knee_left", "ankle_left", "foot_left")
LEG_RIGHT = ("hip_right", "knee_right", "ankle_right", "foot_right")
ARM_LEFT = ("shoulder_left", "elbow_left", "wrist_left", "hand_left", "hand_tip_left")
ARM_RIGHT = ("shoulder_right", "elbow_right", "wrist_right", "hand_right", "hand_tip_right")

# Approximate distance between the head joint and the top of the skull, in meters.
HEAD_DIVERGENCE_M = 0.1

MEASUREMENT_FIELDS = (
    "height",
    "leg_length",
    "arm_length",
    "shoulder_width",
    "torso_length",
)

# Bone edges of the Kinect body, torso first, then arms and legs.
SKELETON_BONES = [
    ("head", "neck"),
    ("neck", "spine_shoulder"),
    ("spine_shoulder", "spine_mid"),
    ("spine_mid", "spine_base"),
    ("spine_shoulder", "shoulder_right"),
    ("spine_shoulder", "shoulder_left"),
    ("spine_base", "hip_right"),
    ("spine_base", "hip_left"),
    ("shoulder_right", "elbow_right"),
    ("elbow_right", "wrist_right"),
    ("wrist_right", "hand_right"),
    ("hand_right", "hand_tip_right"),
    ("wrist_right", "thumb_right"),
    ("shoulder_left", "elbow_left"),
    ("elbow_left", "wrist_left"),
    ("wrist_left", "hand_left"),
    ("hand_left", "hand_tip_left"),
    ("wrist_left", "thumb_left"),
    ("hip_right", "knee_right"),
    ("knee_right", "ankle_right"),
    ("ankle_right", "foot_right"),
    ("hip_left", "knee_left"),
    ("knee_left", "ankle_left"),
    ("ankle_left", "foot_left"),
]
