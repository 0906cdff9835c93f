# Copyright 2025 Nokia
# Licensed under the BSD 3-Clause License.
# SPDX-License-Identifier: BSD-3-Clause

import time
import unittest

from common.context import Context, DeadlineExceeded


class TestContext(unittest.TestCase):
    def test_background_never_expires(self):
        ctx = Context.background()
        self.assertIsNone(ctx.remaining())
        self.assertFalse(ctx.expired())
        self.assertEqual(ctx.bound(5.0), 5.0)
        ctx.check()

    def test_with_timeout_expires(self):
        ctx = Context.background().with_timeout(0.01)
        time.sleep(0.02)
        self.assertTrue(ctx.expired())
        self.assertEqual(ctx.remaining(), 0.0)
        with self.assertRaises(DeadlineExceeded):
            ctx.check()

    def test_child_keeps_parent_deadline(self):
        parent = Context.background().with_timeout(0.5)
        child = parent.with_timeout(60)
        self.assertEqual(child.deadline, parent.deadline)

    def test_child_shorter_deadline(self):
        parent = Context.background().with_timeout(60)
        child = parent.with_timeout(1)
        self.assertLess(child.deadline, parent.deadline)

    def test_bound_clamps_to_remaining(self):
        ctx = Context.background().with_timeout(1)
        self.assertLessEqual(ctx.bound(30), 1)

    def test_background_teardown_unaffected_by_expired_run(self):
        run_ctx = Context.background().with_timeout(0)
        teardown = Context.background().with_timeout(60)
        self.assertTrue(run_ctx.expired())
        self.assertFalse(teardown.expired())

    def test_deadline_exceeded_is_timeout(self):
        self.assertIsInstance(DeadlineExceeded(), TimeoutError)
        self.assertEqual(str(DeadlineExceeded()), "context deadline exceeded")


if __name__ == "__main__":
    unittest.main()
