"""
| Copyright (C) 2012 Philip Axer
| TU Braunschweig, Germany
| All rights reserved.
| See LICENSE file for copyright and license details.

:Authors:
         - Philip Axer

Description
-----------

Suspension-oblivious blocking bounds
"""

import unittest

from pyblocking import model
from pyblocking import oblivious
from pyblocking.analysis import Interference


def _global_info():
    info = model.ResourceSharingInfo()
    for length in (10, 20, 30):
        t = info.add_task(100, 100)
        info.add_request(t, 0, 1, length)
    return info


def test_global_omlp():
    # each task may issue two requests while the analyzed job is pending
    res = oblivious.global_omlp_bounds(_global_info(), 2)
    assert res[0] == Interference(3, 80)
    assert res[2] == Interference(3, 50)
    assert res.get_max_request_span(0) == Interference(4, 90)

    res = oblivious.global_omlp_bounds(_global_info(), 1)
    assert res[0] == Interference(1, 30)


def test_global_fmlp():
    res = oblivious.global_fmlp_bounds(_global_info())
    assert res[0] == Interference(2, 50)
    assert res[1] == Interference(2, 40)
    assert res[2] == Interference(2, 30)


def test_global_fmlp_counts_tasks():
    info = model.ResourceSharingInfo()
    t0 = info.add_task(100, 100)
    info.add_request(t0, 0, 1, 10)
    info.add_request(t0, 0, 1, 40)
    t1 = info.add_task(100, 100)
    info.add_request(t1, 0, 1, 20)
    t2 = info.add_task(100, 100)
    info.add_request(t2, 0, 1, 30)

    res = oblivious.global_fmlp_bounds(info)
    # three tasks share the resource, so at most two requests are ahead
    assert res[1] == Interference(2, 70)
    assert res[0] == Interference(4, 100)


def test_clustered_omlp_charges_donation():
    info = model.ResourceSharingInfo()
    t1 = info.add_task(100, 50)
    info.add_request(t1, 0, 1, 10)
    t2 = info.add_task(100, 50)
    info.add_request(t2, 0, 1, 10)

    res = oblivious.clustered_omlp_bounds(info, 2)
    for i in range(2):
        assert res.get_arrival_blocking(i) == 20
        assert res[i] == Interference(3, 30)


def test_clustered_rw_omlp():
    info = model.ResourceSharingInfo()
    t1 = info.add_task(100, 50, 0, 1)
    info.add_request_rw(t1, 0, 1, 4, model.READ)
    t2 = info.add_task(100, 50, 0, 2)
    info.add_request_rw(t2, 0, 1, 10, model.WRITE)

    res = oblivious.clustered_rw_omlp_bounds(info, 2)
    # reader: one writer, plus the writer's span upon arrival
    assert res.get_arrival_blocking(0) == 14
    assert res[0] == Interference(1, 10) + Interference(2, 14)
    # writer: one read phase, no lower-priority task
    assert res[1] == Interference(1, 4)


class TestKExclusion(unittest.TestCase):

    def setUp(self):
        self.info = model.ResourceSharingInfo()
        # the analyzed task has the lowest priority, hence no arrival blocking
        for prio, length in [(4, 10), (1, 20), (2, 30), (3, 40)]:
            t = self.info.add_task(100, 50, 0, prio)
            self.info.add_request(t, 0, 1, length)

    def bound(self, replicas):
        rep = model.ReplicaInfo()
        rep.set_replicas(0, replicas)
        return oblivious.clustered_kx_omlp_bounds(self.info, rep, 4)

    def test_replicas(self):
        self.assertEqual(self.bound(1)[0], Interference(3, 90))
        self.assertEqual(self.bound(2)[0], Interference(2, 70))
        self.assertEqual(self.bound(3)[0], Interference(1, 40))
        self.assertEqual(self.bound(4)[0], Interference(1, 40))

    def test_single_replica_is_clustered_omlp(self):
        res = oblivious.clustered_omlp_bounds(self.info, 4)
        self.assertEqual(self.bound(1), res)

    def test_default_replicas(self):
        res = oblivious.clustered_kx_omlp_bounds(self.info, model.ReplicaInfo(), 4)
        self.assertEqual(res, self.bound(1))

    def test_replication_monotonicity(self):
        previous = None
        for k in range(1, 6):
            res = self.bound(k)
            if previous is not None:
                for i in range(len(res)):
                    self.assertLessEqual(res.get_blocking_term(i),
                                         previous.get_blocking_term(i))
            previous = res


def test_part_omlp():
    info = model.ResourceSharingInfo()
    a = info.add_task(100, 50, 0, 1)
    info.add_request(a, 0, 1, 10)
    b = info.add_task(100, 50, 0, 2)
    info.add_request(b, 0, 1, 5)
    c = info.add_task(100, 50, 1, 1)
    info.add_request(c, 0, 1, 20)

    res = oblivious.part_omlp_bounds(info)

    assert res.get_remote_blocking(0) == 20
    assert res.get_remote_blocking(1) == 20
    assert res.get_remote_blocking(2) == 10

    # a waits for the contention token held by b
    assert res.get_max_request_span(1) == Interference(2, 25)
    assert res.get_local_blocking(0) == 25
    assert res.get_local_blocking(1) == 0
    assert res.get_local_blocking(2) == 0

    assert res[0] == Interference(3, 45)
    assert res[1] == Interference(1, 20)
    assert res[2] == Interference(1, 10)
