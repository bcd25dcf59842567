"""
| Copyright (C) 2012 Jonas Diemer, Philip Axer
| TU Braunschweig, Germany
| All rights reserved.
| See LICENSE file for copyright and license details.

:Authors:
         - Jonas Diemer
         - Philip Axer

Description
-----------

Regression tests of the task and resource model
"""

import unittest

from pyblocking import model


class Test(unittest.TestCase):

    def test_max_num_requests(self):
        info = model.ResourceSharingInfo()
        t = info.add_task(period=10, response=5)
        req = info.add_request(t, 0, 2, 3)
        # jobs overlapping a window of 20: ceil((20 + 5) / 10) = 3
        self.assertEqual(req.get_max_num_requests(20), 6)
        self.assertEqual(req.get_max_num_requests(0), 2)
        self.assertEqual(req.get_max_num_requests(5), 2)
        self.assertEqual(req.get_max_num_requests(6), 4)

    def test_task_derived_quantities(self):
        info = model.ResourceSharingInfo()
        t = info.add_task(100, 50, cluster=1, priority=3)
        self.assertEqual(t.get_total_num_requests(), 0)
        self.assertEqual(t.get_max_request_length(), 0)
        self.assertEqual(t.get_num_arrivals(), 1)

        info.add_request(t, 0, 2, 10)
        info.add_request_rw(t, 1, 3, 7, model.READ)
        self.assertEqual(t.get_total_num_requests(), 5)
        self.assertEqual(t.get_max_request_length(), 10)
        self.assertEqual(t.get_num_arrivals(), 6)
        self.assertTrue(t.requests[0].is_write())
        self.assertTrue(t.requests[1].is_read())
        self.assertIs(t.requests[1].get_task(), t)

    def test_defaults(self):
        info = model.ResourceSharingInfo()
        t = info.add_task(100, 50)
        self.assertEqual(t.cluster, 0)
        self.assertEqual(t.priority, model.LOWEST_PRIORITY)
        self.assertEqual(info.add_request(t, 0, 1, 1).request_type, model.WRITE)

    def test_task_order(self):
        info = model.ResourceSharingInfo()
        tasks = [info.add_task(10 * (i + 1), 5) for i in range(5)]
        self.assertEqual(len(info), 5)
        self.assertEqual(info.get_tasks(), tasks)
        self.assertEqual([t.period for t in info], [10, 20, 30, 40, 50])

    def test_request_targets_given_task(self):
        info = model.ResourceSharingInfo()
        t1 = info.add_task(100, 50)
        t2 = info.add_task(100, 50)
        info.add_request(t1, 0, 1, 10)
        self.assertEqual(len(t1.requests), 1)
        self.assertEqual(len(t2.requests), 0)

    def test_invalid_request_type(self):
        info = model.ResourceSharingInfo()
        t = info.add_task(100, 50)
        with self.assertRaises(AssertionError):
            info.add_request_rw(t, 0, 1, 10, 2)

    def test_foreign_task(self):
        info = model.ResourceSharingInfo()
        other = model.ResourceSharingInfo()
        info.add_task(100, 50)
        t = other.add_task(100, 50)
        with self.assertRaises(AssertionError):
            info.add_request(t, 0, 1, 10)

    def test_request_before_task(self):
        info = model.ResourceSharingInfo()
        t = model.TaskInfo(100, 50)
        with self.assertRaises(AssertionError):
            info.add_request(t, 0, 1, 10)

    def test_as_mutex(self):
        info = model.ResourceSharingInfo()
        t = info.add_task(100, 50, 1, 2)
        info.add_request_rw(t, 3, 2, 7, model.READ)
        mtx = info.as_mutex()
        self.assertEqual(len(mtx), 1)
        t_mtx = mtx.get_tasks()[0]
        self.assertEqual((t_mtx.period, t_mtx.response, t_mtx.cluster, t_mtx.priority),
                         (100, 50, 1, 2))
        req = t_mtx.requests[0]
        self.assertTrue(req.is_write())
        self.assertEqual((req.resource_id, req.num_requests, req.request_length),
                         (3, 2, 7))
        # the source task set is untouched
        self.assertTrue(t.requests[0].is_read())

    def test_locality(self):
        loc = model.ResourceLocality()
        self.assertEqual(loc[0], model.NO_CPU)
        self.assertEqual(loc[1000], model.NO_CPU)
        loc.assign_resource(3, 2)
        self.assertEqual(loc[3], 2)
        self.assertEqual(loc[2], model.NO_CPU)
        self.assertEqual(loc[4], model.NO_CPU)
        loc.assign_resource(3, 0)
        self.assertEqual(loc[3], 0)

    def test_replicas(self):
        rep = model.ReplicaInfo()
        self.assertEqual(rep[0], 1)
        self.assertEqual(rep[42], 1)
        rep.set_replicas(2, 4)
        self.assertEqual(rep[2], 4)
        self.assertEqual(rep[1], 1)
        with self.assertRaises(AssertionError):
            rep.set_replicas(0, 0)


if __name__ == "__main__":
    unittest.main()
