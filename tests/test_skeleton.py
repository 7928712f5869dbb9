import unittest

import numpy as np

from bodymetrics.core.skeleton import (
    Joint,
    Skeleton,
    bone_lengths,
    chain_length,
    count_tracked,
    first_tracked,
    joint_distance,
    skeleton_from_payload,
    skeleton_to_payload,
)
from bodymetrics.exceptions import MalformedStateError


class SkeletonTests(unittest.TestCase):
    def test_distance_is_symmetric(self):
        a = Joint("head", np.array([0.2, 1.7, 2.1]))
        b = Joint("neck", np.array([-0.4, 1.1, 1.9]))
        self.assertAlmostEqual(joint_distance(a, b), joint_distance(b, a), places=12)
        self.assertAlmostEqual(joint_distance(a, b), float(np.sqrt(0.36 + 0.36 + 0.04)), places=9)

    def test_chain_length_sums_consecutive_segments(self):
        joints = [
            Joint("head", np.array([0.0, 1.8, 0.0])),
            Joint("neck", np.array([0.0, 1.5, 0.0])),
            Joint("spine_mid", np.array([0.0, 1.0, 0.0])),
        ]
        self.assertAlmostEqual(chain_length(joints), 0.8, places=9)
        self.assertEqual(chain_length(joints[:1]), 0.0)
        self.assertEqual(chain_length([]), 0.0)

    def test_inferred_joints_are_not_counted_as_tracked(self):
        joints = [
            Joint("hip_left", np.zeros(3), "tracked"),
            Joint("knee_left", np.zeros(3), "inferred"),
            Joint("ankle_left", np.zeros(3), "not_tracked"),
        ]
        self.assertEqual(count_tracked(joints), 1)

    def test_missing_joint_reads_as_untracked_origin(self):
        skeleton = Skeleton(tracking_id="7")
        joint = skeleton.joint("foot_left")
        self.assertEqual(joint.state, "not_tracked")
        np.testing.assert_allclose(joint.xyz, np.zeros(3))

    def test_bone_lengths_cover_every_edge(self):
        skeleton = Skeleton(
            tracking_id="1",
            joints={
                "head": Joint("head", np.array([0.0, 1.8, 0.0])),
                "neck": Joint("neck", np.array([0.0, 1.6, 0.0])),
            },
        )
        lengths = bone_lengths(skeleton)
        self.assertEqual(len(lengths), 24)
        self.assertAlmostEqual(lengths[("head", "neck")], 0.2, places=9)

    def test_first_tracked_skips_idle_bodies(self):
        idle = Skeleton(tracking_id="0", is_tracked=False)
        live = Skeleton(tracking_id="42")
        self.assertIs(first_tracked([idle, live]), live)
        self.assertIsNone(first_tracked([idle]))

    def test_payload_round_trip(self):
        payload = {
            "tracking_id": 72057594037928,
            "joints": {
                "head": {"xyz": [0.0, 1.8, 2.0], "state": "tracked"},
                "knee_left": {"xyz": [0.1, 0.5, 2.0], "state": "inferred"},
            },
        }
        skeleton = skeleton_from_payload(payload)
        self.assertEqual(skeleton.tracking_id, "72057594037928")
        self.assertTrue(skeleton.is_tracked)
        self.assertEqual(skeleton.joint("knee_left").state, "inferred")
        out = skeleton_to_payload(skeleton)
        self.assertEqual(out["joints"]["head"]["xyz"], [0.0, 1.8, 2.0])

    def test_payload_rejects_unknown_label(self):
        with self.assertRaises(MalformedStateError):
            skeleton_from_payload({"tracking_id": "1", "joints": {"tail": {"xyz": [0, 0, 0]}}})

    def test_payload_rejects_bad_state_and_shape(self):
        with self.assertRaises(MalformedStateError):
            skeleton_from_payload(
                {"tracking_id": "1", "joints": {"head": {"xyz": [0, 0, 0], "state": "maybe"}}}
            )
        with self.assertRaises(MalformedStateError):
            skeleton_from_payload({"tracking_id": "1", "joints": {"head": {"xyz": [0, 0]}}})
        with self.assertRaises(MalformedStateError):
            skeleton_from_payload({"joints": {}})


if __name__ == "__main__":
    unittest.main()
